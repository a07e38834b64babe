"""Database utilities and models."""

from adaptwell.db.base import Base
from adaptwell.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
