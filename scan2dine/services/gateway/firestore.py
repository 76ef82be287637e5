"""
Firestore Menu Gateway

Production implementation backed by Cloud Firestore through the
firebase-admin async client. Used when DATA_BACKEND=firestore.

Collections:
    - menuItems: one document per item, restaurantId field as foreign key
    - restaurants: document id equals the owner's account id

Requirements:
    - Composite index on menuItems (restaurantId ASC, category ASC, name ASC)
    - FIREBASE_CREDENTIALS_PATH or application default credentials

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from typing import Any, Optional

from firebase_admin import firestore_async
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from scan2dine.core.exceptions import BackendError, ConflictError, RecordNotFoundError
from scan2dine.schemas import MenuItem, Restaurant
from scan2dine.services.firebase_app import get_firebase_app
from scan2dine.services.gateway.base import (
    BaseMenuGateway,
    MENU_ITEMS_COLLECTION,
    PROTECTED_ITEM_FIELDS,
    PROTECTED_RESTAURANT_FIELDS,
    RESTAURANTS_COLLECTION,
    clean_update,
    utcnow,
)

logger = logging.getLogger(__name__)


class FirestoreMenuGateway(BaseMenuGateway):
    """
    Cloud Firestore implementation of the menu gateway.

    Version checks read the document first, then write with a
    last-update-time precondition so a concurrent writer between the
    read and the write is also detected.

    Example:
        >>> gateway = FirestoreMenuGateway()
        >>> items = await gateway.fetch_menu_items("uid_123")
    """

    def __init__(self, client: Any = None):
        """
        Args:
            client: AsyncClient to use; defaults to the firebase-admin one
        """
        self._client = client or firestore_async.client(app=get_firebase_app())
        logger.info("FirestoreMenuGateway initialized")

    @property
    def provider_name(self) -> str:
        return "firestore"

    def _wrap(self, operation: str, exc: google_exceptions.GoogleAPIError) -> BackendError:
        logger.error(f"Firestore error during {operation}: {exc}")
        return BackendError(
            f"Firestore error during {operation}: {exc}",
            code=type(exc).__name__,
            provider=self.provider_name,
        )

    # =========================================================================
    # READS
    # =========================================================================

    async def fetch_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        query = (
            self._client.collection(MENU_ITEMS_COLLECTION)
            .where(filter=FieldFilter("restaurantId", "==", restaurant_id))
            .order_by("category")
            .order_by("name")
        )
        try:
            snapshots = await query.get()
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap("fetch_menu_items", e) from e

        return [MenuItem.from_document(snap.id, snap.to_dict()) for snap in snapshots]

    async def fetch_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        try:
            snap = await self._client.collection(RESTAURANTS_COLLECTION).document(restaurant_id).get()
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap("fetch_restaurant", e) from e

        if not snap.exists:
            return None
        return Restaurant.from_document(snap.id, snap.to_dict())

    # =========================================================================
    # WRITES
    # =========================================================================

    async def add_menu_item(self, restaurant_id: str, item: dict[str, Any]) -> str:
        now = utcnow()
        document = {
            **clean_update(item, PROTECTED_ITEM_FIELDS),
            "restaurantId": restaurant_id,
            "createdAt": now,
            "updatedAt": now,
            "version": 1,
        }
        try:
            _, ref = await self._client.collection(MENU_ITEMS_COLLECTION).add(document)
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap("add_menu_item", e) from e

        logger.info(f"Menu item {ref.id} added for restaurant {restaurant_id}")
        return ref.id

    async def update_menu_item(
        self,
        item_id: str,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        ref = self._client.collection(MENU_ITEMS_COLLECTION).document(item_id)
        await self._update(
            ref,
            clean_update(fields, PROTECTED_ITEM_FIELDS),
            expected_version,
            f"menu item {item_id}",
        )
        logger.info(f"Menu item {item_id} updated")

    async def delete_menu_item(self, item_id: str) -> None:
        try:
            await self._client.collection(MENU_ITEMS_COLLECTION).document(item_id).delete()
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap("delete_menu_item", e) from e

        logger.info(f"Menu item {item_id} deleted")

    async def create_restaurant(
        self,
        restaurant_id: str,
        fields: dict[str, Any],
    ) -> Restaurant:
        now = utcnow()
        document = {
            "name": "",
            "theme": {},
            "categories": [],
            "isSetupComplete": False,
            **clean_update(fields, PROTECTED_RESTAURANT_FIELDS),
            "createdAt": now,
            "updatedAt": now,
            "version": 1,
        }
        ref = self._client.collection(RESTAURANTS_COLLECTION).document(restaurant_id)
        try:
            await ref.create(document)
        except google_exceptions.AlreadyExists as e:
            raise BackendError(
                f"Restaurant {restaurant_id} already exists",
                code="already_exists",
                provider=self.provider_name,
            ) from e
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap("create_restaurant", e) from e

        logger.info(f"Restaurant {restaurant_id} created")
        return Restaurant.from_document(restaurant_id, document)

    async def update_restaurant(
        self,
        restaurant_id: str,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        ref = self._client.collection(RESTAURANTS_COLLECTION).document(restaurant_id)
        await self._update(
            ref,
            clean_update(fields, PROTECTED_RESTAURANT_FIELDS),
            expected_version,
            f"restaurant {restaurant_id}",
        )
        logger.info(f"Restaurant {restaurant_id} updated")

    async def _update(
        self,
        ref: Any,
        fields: dict[str, Any],
        expected_version: Optional[int],
        label: str,
    ) -> None:
        """Read-check-write a single document."""
        try:
            snap = await ref.get()
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap(f"update of {label}", e) from e

        if not snap.exists:
            raise RecordNotFoundError(
                f"{label} not found", code="not_found", provider=self.provider_name
            )

        current = (snap.to_dict() or {}).get("version", 1)
        if expected_version is not None and current != expected_version:
            raise ConflictError(
                f"{label} was changed by someone else "
                f"(expected version {expected_version}, found {current})",
                expected=expected_version,
                actual=current,
                provider=self.provider_name,
            )

        payload = {**fields, "updatedAt": utcnow(), "version": current + 1}
        option = self._client.write_option(last_update_time=snap.update_time)
        try:
            await ref.update(payload, option=option)
        except google_exceptions.FailedPrecondition as e:
            raise ConflictError(
                f"{label} changed while it was being saved",
                expected=expected_version,
                provider=self.provider_name,
            ) from e
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap(f"update of {label}", e) from e

    async def health_check(self) -> bool:
        try:
            await self._client.collection(RESTAURANTS_COLLECTION).limit(1).get()
            return True
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Firestore health check failed: {e}")
            return False
