"""
Authentication module for the Siemens RDS cloud.

Provides the access-token exchange, expiry tracking and a caller-side token keeper.

Note: import the submodules directly, e.g.
  from rds_cloud.api_auth.access_token import AccessToken
"""

__all__: list[str] = []
