"""Database models."""
from finquest.models.user import User
from finquest.models.transaction import Transaction

__all__ = ["User", "Transaction"]
