"""
Pytest configuration for the `rds_cloud` test suite.

Tests import `rds_cloud...` normally (no importlib file loaders). To make that
work in a fresh checkout without an editable install, the local `src`
directory is added to `sys.path`.
"""

from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    """
    Ensure the local `rds_cloud` package is importable for tests.

    Only affects the test runtime.
    """

    project_root = Path(__file__).resolve().parent.parent
    src = project_root / "src"

    if src.is_dir():
        # Prepend so local sources win over any globally installed package.
        sys.path.insert(0, str(src))
