#!/usr/bin/env python3
"""
CLI for listing the plants of a Siemens RDS cloud account.

Authenticates with RDS_API_KEY / RDS_USERNAME / RDS_PASSWORD, fetches the plant
list and prints it as JSON to stdout.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import uuid
from typing import Optional

from ..api_auth import auth as auth_mod
from ..api_auth.token_keeper import TokenKeeper


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="rds-plants",
        description="List the plants of a Siemens RDS cloud account.",
    )
    p.add_argument("--pretty", action="store_true", help="Pretty-print JSON output.")
    p.add_argument(
        "--timeout-seconds",
        default=None,
        help="HTTP timeout in seconds (default: RDS_TIMEOUT_SECONDS or no timeout).",
    )
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help='Logging verbosity (default: RDS_LOG_LEVEL or "INFO").',
    )
    return p.parse_args(sys.argv[1:] if argv is None else argv)


def main(argv: Optional[list[str]] = None) -> int:
    """
    CLI entrypoint: print the plant list as JSON.

    Returns 0 on success, 1 when no token or plant list could be obtained,
    2 on configuration errors.
    """
    args = _parse_args(argv)
    run_id = uuid.uuid4().hex[:12]
    log_level = args.log_level or os.getenv("RDS_LOG_LEVEL") or "INFO"
    log = auth_mod.configure_logging(run_id=run_id, level=log_level)

    try:
        cfg = auth_mod.load_config(args, log=log)
    except auth_mod.CliError as e:
        log.error("CLI error: %s", auth_mod._sanitize_text(str(e)))
        print(f"Error: {auth_mod._sanitize_text(str(e))}", file=sys.stderr)
        return 2

    keeper = TokenKeeper(
        cfg.api_key,
        cfg.username,
        cfg.password,
        timeout_seconds=cfg.timeout_seconds,
        log=log,
    )
    plants = keeper.plants()
    if plants is None:
        reason = keeper.last_failure.reason if keeper.last_failure is not None else "unknown error"
        print(f"Error: {auth_mod._sanitize_text(reason)}", file=sys.stderr)
        return 1

    if args.pretty:
        print(json.dumps(plants.to_list(), indent=2, ensure_ascii=False))
    else:
        print(json.dumps(plants.to_list(), ensure_ascii=False))
    log.info("listed %s plant(s)", len(plants))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
