from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Integer, String, Text, DateTime, Boolean, Numeric,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func, expression

from menu_admin.db.main import Base

if TYPE_CHECKING:
    from menu_admin.restaurants.models import Restaurant
    from menu_admin.categories.models import Category

class MenuItem(Base):
    """
    MenuItem model representing a single dish in a restaurant catalog.
    
    Attributes:
        id: Primary key (auto-incremented)
        restaurant_id: Foreign key to restaurant (not nullable, indexed)
        category_id: Foreign key to category (nullable, indexed)
        name: Item name as shown to customers
        description: Free-text description (not nullable, empty by default)
        price: Price (not nullable, non-negative)
        is_vegetarian / is_vegan: Dietary flags (default false)
        is_available: Whether the item can be ordered (default true)
        preparation_time: Preparation time in minutes
        image_url: Public URL of the product photo (nullable)
        created_at: Timestamp of creation (not nullable, server default now())
    """
    __tablename__ = 'menu_items'
    
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_menu_item_price_non_negative'),
        Index('idx_menu_items_restaurant_id', 'restaurant_id'),
        Index('idx_menu_items_category_id', 'category_id'),
        {'comment': 'Restaurant catalog items'}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False)
    category_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('categories.id', ondelete='SET NULL'), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_vegetarian: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=expression.false())
    is_vegan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=expression.false())
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=expression.true())
    preparation_time: Mapped[int] = mapped_column(Integer, nullable=False, default=15, server_default="15")
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    restaurant: Mapped['Restaurant'] = relationship('Restaurant', back_populates='menu_items')
    category: Mapped[Optional['Category']] = relationship('Category', back_populates='menu_items')
