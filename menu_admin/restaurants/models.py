from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import Integer, String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from menu_admin.db.main import Base

if TYPE_CHECKING:
    from menu_admin.menu_items.models import MenuItem

class Restaurant(Base):
    """
    Restaurant model (read-only from the point of view of the menu import).

    Attributes:
        id: Primary key (auto-incremented)
        name: Display name of the restaurant as entered by operators
        created_at: Timestamp of creation (not nullable, server default now())
        menu_items: List of menu items (back-populates 'restaurant')
    """
    __tablename__ = 'restaurants'

    __table_args__ = (
        Index('idx_restaurants_name', 'name'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    menu_items: Mapped[List['MenuItem']] = relationship('MenuItem', back_populates='restaurant')
