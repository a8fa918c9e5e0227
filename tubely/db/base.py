# tubely/db/base.py
"""
Tubely — SQLAlchemy Base registry
=================================

Import all ORM models so their tables are registered on `Base.metadata`.
Alembic autogeneration and the test fixtures rely on this.

Tip: Keep this file import-only; no runtime logic.
"""

from tubely.db.base_class import Base
from tubely.db.models.video import Video

__all__ = ["Base", "Video"]
