"""SQLAlchemy models exposed for Alembic and imports."""
from .finance import AccountsPayable, Category
from .user import User, UserRole

__all__ = ["User", "UserRole", "Category", "AccountsPayable"]
