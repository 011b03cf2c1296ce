"""ORM models. Importing this package registers every table on ``Base.metadata``."""
from app.models.user import User
from app.models.refresh_token import RefreshToken

__all__ = ["User", "RefreshToken"]
