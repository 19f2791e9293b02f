from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import Index, Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from menu_admin.db.main import Base

if TYPE_CHECKING:
    from menu_admin.menu_items.models import MenuItem

class Category(Base):
    """
    Global menu category shared by all restaurants.
    
    Attributes:
        id: Primary key
        name: Category name (indexed)
        sort_order: Position in the customer-facing menu (ascending)
        created_at: Timestamp of creation
        menu_items: List of menu items in this category
    """
    __tablename__ = "categories"
    __table_args__ = (
        Index('idx_categories_name', 'name'),
        Index('idx_categories_sort_order', 'sort_order'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    menu_items: Mapped[List['MenuItem']] = relationship('MenuItem', back_populates='category')
