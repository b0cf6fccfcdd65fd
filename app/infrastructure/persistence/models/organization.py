"""Organization body ORM models: Forum contains Areas contain Units.

Only the columns the approval engine reads (admin_user_id) and the
containment links are mapped here.
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Forum(CuidMixin, TimestampMixin, Base):
    """Top-level organization body. Table: forum."""

    __tablename__ = "forum"

    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    admin_user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)


class Area(CuidMixin, TimestampMixin, Base):
    """Area within a forum. Table: area."""

    __tablename__ = "area"

    forum_id: Mapped[str] = mapped_column(
        String, ForeignKey("forum.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    admin_user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)


class Unit(CuidMixin, TimestampMixin, Base):
    """Unit within an area. Table: unit."""

    __tablename__ = "unit"

    area_id: Mapped[str] = mapped_column(
        String, ForeignKey("area.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    forum_id: Mapped[str] = mapped_column(
        String, ForeignKey("forum.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    admin_user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
