"""SQLAlchemy ORM models."""

from authstudy.models.base import Base
from authstudy.models.user import User

__all__ = ["Base", "User"]
