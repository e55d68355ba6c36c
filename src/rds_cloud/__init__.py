"""
Top-level package for the `rds_cloud` Python code.

This package provides Siemens RDS cloud authentication and plant data retrieval.
"""

__all__: list[str] = []
