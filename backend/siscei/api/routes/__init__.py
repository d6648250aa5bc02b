"""Route modules for the SISCEI API."""
from . import auth, finance, users

__all__ = ["auth", "users", "finance"]
