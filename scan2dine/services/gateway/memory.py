"""
In-Memory Menu Gateway

Keeps menu items and restaurants in process memory. Used in development
mode (DATA_BACKEND=memory) and by the test suite.

Behavior:
    - Ids look like Firestore auto ids (20 hex chars)
    - Reads return deep copies, so callers can't mutate stored documents
    - Optional simulated latency and random failure rate for exercising
      error handling, like the other development services

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import copy
import random
import uuid
import logging
from typing import Any, Optional

from scan2dine.core.exceptions import BackendError, ConflictError, RecordNotFoundError
from scan2dine.schemas import MenuItem, Restaurant
from scan2dine.services.gateway.base import (
    BaseMenuGateway,
    PROTECTED_ITEM_FIELDS,
    PROTECTED_RESTAURANT_FIELDS,
    clean_update,
    sort_menu_items,
    utcnow,
)

logger = logging.getLogger(__name__)


class InMemoryMenuGateway(BaseMenuGateway):
    """
    Dictionary-backed gateway.

    Attributes:
        failure_rate: Probability that a call raises BackendError (0.0-1.0)
        latency: Seconds each call sleeps before touching the data

    Example:
        >>> gateway = InMemoryMenuGateway()
        >>> await gateway.create_restaurant("r1", {"name": "Chez Nous"})
        >>> await gateway.add_menu_item("r1", {"name": "Soup", "price": 4.5})
    """

    def __init__(self, failure_rate: float = 0.0, latency: float = 0.0):
        self.failure_rate = failure_rate
        self.latency = latency
        self._items: dict[str, dict[str, Any]] = {}
        self._restaurants: dict[str, dict[str, Any]] = {}

        logger.info(
            f"InMemoryMenuGateway initialized (failure_rate={failure_rate:.0%})"
        )

    @property
    def provider_name(self) -> str:
        return "memory"

    async def _simulate_call(self, operation: str) -> None:
        """Apply latency, then fail at the configured rate."""
        if self.latency:
            await asyncio.sleep(self.latency)
        else:
            await asyncio.sleep(0)
        if self.failure_rate and random.random() < self.failure_rate:
            logger.warning(f"Mock data store failure (simulated) during {operation}")
            raise BackendError(
                f"Simulated failure during {operation}",
                code="unavailable",
                provider=self.provider_name,
            )

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex[:20]

    # =========================================================================
    # READS
    # =========================================================================

    async def fetch_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        await self._simulate_call("fetch_menu_items")
        items = [
            MenuItem.from_document(item_id, copy.deepcopy(doc))
            for item_id, doc in self._items.items()
            if doc.get("restaurantId") == restaurant_id
        ]
        return sort_menu_items(items)

    async def fetch_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        await self._simulate_call("fetch_restaurant")
        doc = self._restaurants.get(restaurant_id)
        if doc is None:
            return None
        return Restaurant.from_document(restaurant_id, copy.deepcopy(doc))

    # =========================================================================
    # MENU ITEM WRITES
    # =========================================================================

    async def add_menu_item(self, restaurant_id: str, item: dict[str, Any]) -> str:
        await self._simulate_call("add_menu_item")
        now = utcnow()
        item_id = self._new_id()
        self._items[item_id] = {
            **copy.deepcopy(item),
            "restaurantId": restaurant_id,
            "createdAt": now,
            "updatedAt": now,
            "version": 1,
        }
        logger.info(f"Menu item {item_id} added for restaurant {restaurant_id}")
        return item_id

    async def update_menu_item(
        self,
        item_id: str,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        await self._simulate_call("update_menu_item")
        doc = self._items.get(item_id)
        if doc is None:
            raise RecordNotFoundError(
                f"Menu item {item_id} not found", code="not_found", provider=self.provider_name
            )
        self._check_version(doc, expected_version, f"menu item {item_id}")
        doc.update(copy.deepcopy(clean_update(fields, PROTECTED_ITEM_FIELDS)))
        doc["updatedAt"] = utcnow()
        doc["version"] = doc.get("version", 1) + 1
        logger.info(f"Menu item {item_id} updated (version {doc['version']})")

    async def delete_menu_item(self, item_id: str) -> None:
        await self._simulate_call("delete_menu_item")
        if self._items.pop(item_id, None) is not None:
            logger.info(f"Menu item {item_id} deleted")

    # =========================================================================
    # RESTAURANT WRITES
    # =========================================================================

    async def create_restaurant(
        self,
        restaurant_id: str,
        fields: dict[str, Any],
    ) -> Restaurant:
        await self._simulate_call("create_restaurant")
        if restaurant_id in self._restaurants:
            raise BackendError(
                f"Restaurant {restaurant_id} already exists",
                code="already_exists",
                provider=self.provider_name,
            )
        now = utcnow()
        doc = {
            **copy.deepcopy(clean_update(fields, PROTECTED_RESTAURANT_FIELDS)),
            "createdAt": now,
            "updatedAt": now,
            "version": 1,
        }
        self._restaurants[restaurant_id] = doc
        logger.info(f"Restaurant {restaurant_id} created")
        return Restaurant.from_document(restaurant_id, copy.deepcopy(doc))

    async def update_restaurant(
        self,
        restaurant_id: str,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        await self._simulate_call("update_restaurant")
        doc = self._restaurants.get(restaurant_id)
        if doc is None:
            raise RecordNotFoundError(
                f"Restaurant {restaurant_id} not found",
                code="not_found",
                provider=self.provider_name,
            )
        self._check_version(doc, expected_version, f"restaurant {restaurant_id}")
        doc.update(copy.deepcopy(clean_update(fields, PROTECTED_RESTAURANT_FIELDS)))
        doc["updatedAt"] = utcnow()
        doc["version"] = doc.get("version", 1) + 1
        logger.info(f"Restaurant {restaurant_id} updated (version {doc['version']})")

    def _check_version(
        self,
        doc: dict[str, Any],
        expected_version: Optional[int],
        label: str,
    ) -> None:
        if expected_version is None:
            return
        actual = doc.get("version", 1)
        if actual != expected_version:
            raise ConflictError(
                f"{label} was changed by someone else "
                f"(expected version {expected_version}, found {actual})",
                expected=expected_version,
                actual=actual,
                provider=self.provider_name,
            )

    async def health_check(self) -> bool:
        """Memory store is always reachable."""
        return True
