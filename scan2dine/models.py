"""
SQLAlchemy Database Models

Tables backing the SQL data backend. Column names are snake_case; the
FIELD_MAP on each row class translates the camelCase document field
names used everywhere else in the application.

Author: Khalil_Bannouri
Version: 1.0.0
"""

from typing import Any

from sqlalchemy import Column, Integer, String, Float, DateTime, Text, Boolean, JSON
from scan2dine.database import Base


class MenuItemRow(Base):
    """
    One menu item. Owned by exactly one restaurant.
    """
    __tablename__ = "menu_items"

    FIELD_MAP = {
        "restaurantId": "restaurant_id",
        "name": "name",
        "price": "price",
        "category": "category",
        "description": "description",
        "imageUrl": "image_url",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "version": "version",
    }

    # Primary Key
    id = Column(String(36), primary_key=True)

    # =========================================================================
    # OWNERSHIP
    # =========================================================================
    restaurant_id = Column(String(128), nullable=False, index=True)

    # =========================================================================
    # ITEM DETAILS
    # =========================================================================
    name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    category = Column(String(50), nullable=True, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)

    # =========================================================================
    # TIMESTAMPS / CONCURRENCY
    # =========================================================================
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    version = Column(Integer, nullable=False, default=1)

    def to_document(self) -> dict[str, Any]:
        return {field: getattr(self, column) for field, column in self.FIELD_MAP.items()}

    def __repr__(self):
        return f"<MenuItemRow {self.id} - {self.name} - {self.category}>"


class RestaurantRow(Base):
    """
    Restaurant profile. The primary key is the owner's account id.
    """
    __tablename__ = "restaurants"

    FIELD_MAP = {
        "name": "name",
        "ownerName": "owner_name",
        "email": "email",
        "address": "address",
        "phone": "phone",
        "description": "description",
        "logo": "logo",
        "theme": "theme",
        "categories": "categories",
        "isSetupComplete": "is_setup_complete",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "version": "version",
    }

    id = Column(String(128), primary_key=True)

    # =========================================================================
    # PROFILE
    # =========================================================================
    name = Column(String(100), nullable=False, default="")
    owner_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    description = Column(Text, nullable=True)
    logo = Column(String(500), nullable=True)

    # =========================================================================
    # CUSTOMIZATION
    # =========================================================================
    theme = Column(JSON, nullable=False, default=dict)
    categories = Column(JSON, nullable=False, default=list)
    is_setup_complete = Column(Boolean, nullable=False, default=False)

    # =========================================================================
    # TIMESTAMPS / CONCURRENCY
    # =========================================================================
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    version = Column(Integer, nullable=False, default=1)

    def to_document(self) -> dict[str, Any]:
        return {field: getattr(self, column) for field, column in self.FIELD_MAP.items()}

    def __repr__(self):
        return f"<RestaurantRow {self.id} - {self.name}>"
