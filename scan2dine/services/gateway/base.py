"""
Menu Gateway Abstract Base Class

Defines the interface contract for every data store holding menu items
and restaurant profiles. InMemoryMenuGateway, SqlMenuGateway and
FirestoreMenuGateway all implement it, so the editor and the public menu
never know which store is active.

Read contract:
    - fetch_* raise BackendError when the store cannot be read.
    - get_* are the lenient variants: they log the failure and return an
      empty list / None, which callers cannot tell apart from a store
      that is simply empty.

Write contract:
    - Every write touches exactly one document.
    - Failures raise BackendError and are never swallowed.
    - Updates merge the given fields, refresh updatedAt and bump version.
      With expected_version set, a mismatch raises ConflictError;
      without it the last write wins.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from scan2dine.core.exceptions import BackendError
from scan2dine.schemas import MenuItem, Restaurant

logger = logging.getLogger(__name__)

MENU_ITEMS_COLLECTION = "menuItems"
RESTAURANTS_COLLECTION = "restaurants"

# Fields callers may never overwrite through an update
PROTECTED_ITEM_FIELDS = frozenset({"id", "restaurantId", "createdAt", "updatedAt", "version"})
PROTECTED_RESTAURANT_FIELDS = frozenset({"id", "createdAt", "updatedAt", "version"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clean_update(fields: dict[str, Any], protected: Iterable[str]) -> dict[str, Any]:
    """Drop bookkeeping fields from a partial update."""
    protected = set(protected)
    dropped = protected.intersection(fields)
    if dropped:
        logger.debug(f"Ignoring protected fields in update: {sorted(dropped)}")
    return {k: v for k, v in fields.items() if k not in protected}


def sort_menu_items(items: list[MenuItem]) -> list[MenuItem]:
    """Store ordering: category, then name."""
    return sorted(items, key=lambda item: (item.category or "", item.name))


class BaseMenuGateway(ABC):
    """
    Abstract base class for menu data stores.

    Example:
        >>> gateway = get_menu_gateway()
        >>> item_id = await gateway.add_menu_item("r1", {"name": "Soup", "price": 4.5})
        >>> items = await gateway.get_menu_items("r1")
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the data store.

        Returns:
            str: Provider name (e.g., "memory", "sql", "firestore")
        """
        pass

    # =========================================================================
    # STRICT READS
    # =========================================================================

    @abstractmethod
    async def fetch_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        """
        Load every item of a restaurant, ordered by category then name.

        Raises:
            BackendError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def fetch_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        """
        Load a restaurant profile.

        Returns:
            The profile, or None if no such document exists

        Raises:
            BackendError: If the store cannot be read
        """
        pass

    # =========================================================================
    # LENIENT READS
    # =========================================================================

    async def get_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        """Like fetch_menu_items, but an unreadable store yields []."""
        try:
            return await self.fetch_menu_items(restaurant_id)
        except BackendError as e:
            logger.error(f"Error fetching menu items for {restaurant_id}: {e}")
            return []

    async def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        """Like fetch_restaurant, but an unreadable store yields None."""
        try:
            return await self.fetch_restaurant(restaurant_id)
        except BackendError as e:
            logger.error(f"Error fetching restaurant {restaurant_id}: {e}")
            return None

    # =========================================================================
    # WRITES
    # =========================================================================

    @abstractmethod
    async def add_menu_item(self, restaurant_id: str, item: dict[str, Any]) -> str:
        """
        Store a new item for the restaurant.

        Args:
            restaurant_id: Owning restaurant
            item: Document fields (camelCase); nothing is validated here

        Returns:
            str: Identifier assigned by the store
        """
        pass

    @abstractmethod
    async def update_menu_item(
        self,
        item_id: str,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        """Merge fields into an existing item."""
        pass

    @abstractmethod
    async def delete_menu_item(self, item_id: str) -> None:
        """Remove an item. Unknown ids are not an error."""
        pass

    @abstractmethod
    async def create_restaurant(
        self,
        restaurant_id: str,
        fields: dict[str, Any],
    ) -> Restaurant:
        """Create the profile document for a freshly signed-up account."""
        pass

    @abstractmethod
    async def update_restaurant(
        self,
        restaurant_id: str,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        """Merge fields into an existing restaurant profile."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the data store.

        Returns:
            bool: True if the store is reachable
        """
        pass
