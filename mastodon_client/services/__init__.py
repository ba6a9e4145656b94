"""
Service layer modules map semantic operations (statuses, accounts, media,
auth) onto dispatcher calls.
"""

__all__ = [
    "account_service",
    "auth_service",
    "media_service",
    "status_service",
]
