"""
Public Menu

Builds what a diner sees at /menu/{restaurant_id}. Profile and items are
fetched concurrently with the strict reads, so an unreachable store is
reported as such instead of looking like an empty menu.

States (mutually exclusive):
    - UNAVAILABLE: a fetch failed
    - NOT_FOUND: no restaurant with that id
    - COMING_SOON: restaurant exists, no items yet
    - READY: grouped category sections
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from scan2dine.core.exceptions import BackendError
from scan2dine.schemas import (
    MenuItem,
    PublicCategoryResponse,
    PublicMenuItemResponse,
    PublicMenuResponse,
    Restaurant,
)
from scan2dine.services.gateway.base import BaseMenuGateway
from scan2dine.services.grouping import group_by_category
from scan2dine.services.ordering import order_link

logger = logging.getLogger(__name__)


class MenuState(str, Enum):
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"
    COMING_SOON = "coming_soon"
    READY = "ready"


@dataclass
class MenuEntry:
    item: MenuItem
    order_url: Optional[str] = None


@dataclass
class CategorySection:
    """One collapsible category block; starts expanded."""
    name: str
    entries: list[MenuEntry]
    expanded: bool = True

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def count_label(self) -> str:
        return f"{self.count} {'item' if self.count == 1 else 'items'}"


@dataclass
class PublicMenu:
    state: MenuState
    restaurant_id: str
    restaurant: Optional[Restaurant] = None
    sections: list[CategorySection] = field(default_factory=list)

    @property
    def can_order(self) -> bool:
        return any(entry.order_url for section in self.sections for entry in section.entries)

    def to_response(self) -> PublicMenuResponse:
        """JSON shape; only meaningful for READY and COMING_SOON menus."""
        restaurant = self.restaurant
        return PublicMenuResponse(
            restaurant_id=self.restaurant_id,
            name=restaurant.name if restaurant else "",
            description=restaurant.description if restaurant else None,
            address=restaurant.address if restaurant else None,
            phone=restaurant.phone if restaurant else None,
            logo=restaurant.logo if restaurant else None,
            theme=restaurant.theme if restaurant else {},
            categories=[
                PublicCategoryResponse(
                    name=section.name,
                    count=section.count,
                    items=[
                        PublicMenuItemResponse(
                            id=entry.item.id,
                            name=entry.item.name,
                            price=entry.item.price,
                            description=entry.item.description,
                            image_url=entry.item.image_url,
                            order_url=entry.order_url,
                        )
                        for entry in section.entries
                    ],
                )
                for section in self.sections
            ],
        )


def build_sections(restaurant: Restaurant, items: list[MenuItem]) -> list[CategorySection]:
    """Group items and attach an order link to each when the restaurant has a phone."""
    return [
        CategorySection(
            name=category,
            entries=[MenuEntry(item=item, order_url=order_link(item, restaurant)) for item in bucket],
        )
        for category, bucket in group_by_category(items).items()
    ]


async def load_public_menu(gateway: BaseMenuGateway, restaurant_id: str) -> PublicMenu:
    """
    Fetch and assemble a restaurant's public menu.

    Both reads must succeed; a failure of either one makes the whole menu
    UNAVAILABLE.
    """
    try:
        restaurant, items = await asyncio.gather(
            gateway.fetch_restaurant(restaurant_id),
            gateway.fetch_menu_items(restaurant_id),
        )
    except BackendError as e:
        logger.error(f"Error loading menu data for {restaurant_id}: {e}")
        return PublicMenu(state=MenuState.UNAVAILABLE, restaurant_id=restaurant_id)

    if restaurant is None:
        return PublicMenu(state=MenuState.NOT_FOUND, restaurant_id=restaurant_id)

    if not items:
        return PublicMenu(
            state=MenuState.COMING_SOON,
            restaurant_id=restaurant_id,
            restaurant=restaurant,
        )

    return PublicMenu(
        state=MenuState.READY,
        restaurant_id=restaurant_id,
        restaurant=restaurant,
        sections=build_sections(restaurant, items),
    )
