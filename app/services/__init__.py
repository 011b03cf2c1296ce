"""Service layer package."""

__all__ = [
    "auth_service",
    "profile_service",
    "storage_service",
    "token_store",
]
