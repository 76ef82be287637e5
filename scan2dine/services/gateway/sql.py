"""
SQL Menu Gateway

Stores menu items and restaurants in relational tables through the
SQLAlchemy async ORM. Used for self-hosted installs (DATA_BACKEND=sql).

Documents are translated to and from rows with the FIELD_MAP declared on
each model; fields a table has no column for are dropped with a warning.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
import uuid
from typing import Any, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scan2dine.core.exceptions import BackendError, ConflictError, RecordNotFoundError
from scan2dine.database import get_session_maker
from scan2dine.models import MenuItemRow, RestaurantRow
from scan2dine.schemas import MenuItem, Restaurant
from scan2dine.services.gateway.base import (
    BaseMenuGateway,
    PROTECTED_ITEM_FIELDS,
    PROTECTED_RESTAURANT_FIELDS,
    clean_update,
    utcnow,
)

logger = logging.getLogger(__name__)


def _apply_fields(row: Any, fields: dict[str, Any]) -> None:
    """Copy document fields onto a row through its FIELD_MAP."""
    for field, value in fields.items():
        column = row.FIELD_MAP.get(field)
        if column is None:
            logger.warning(f"{type(row).__name__} has no column for field '{field}', skipped")
            continue
        setattr(row, column, value)


class SqlMenuGateway(BaseMenuGateway):
    """
    SQLAlchemy implementation of the menu gateway.

    Args:
        session_maker: Session factory; defaults to the process-wide one
            built from DATABASE_URL
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_maker = session_maker or get_session_maker()
        logger.info("SqlMenuGateway initialized")

    @property
    def provider_name(self) -> str:
        return "sql"

    def _wrap(self, operation: str, exc: SQLAlchemyError) -> BackendError:
        logger.error(f"SQL error during {operation}: {exc}")
        return BackendError(
            f"Database error during {operation}",
            code="database_error",
            provider=self.provider_name,
        )

    # =========================================================================
    # READS
    # =========================================================================

    async def fetch_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        query = (
            select(MenuItemRow)
            .where(MenuItemRow.restaurant_id == restaurant_id)
            .order_by(MenuItemRow.category, MenuItemRow.name)
        )
        try:
            async with self._session_maker() as session:
                result = await session.execute(query)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise self._wrap("fetch_menu_items", e) from e

        return [MenuItem.from_document(row.id, row.to_document()) for row in rows]

    async def fetch_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        try:
            async with self._session_maker() as session:
                row = await session.get(RestaurantRow, restaurant_id)
        except SQLAlchemyError as e:
            raise self._wrap("fetch_restaurant", e) from e

        if row is None:
            return None
        return Restaurant.from_document(row.id, row.to_document())

    # =========================================================================
    # MENU ITEM WRITES
    # =========================================================================

    async def add_menu_item(self, restaurant_id: str, item: dict[str, Any]) -> str:
        now = utcnow()
        row = MenuItemRow(
            id=uuid.uuid4().hex[:20],
            restaurant_id=restaurant_id,
            created_at=now,
            updated_at=now,
            version=1,
        )
        _apply_fields(row, clean_update(item, PROTECTED_ITEM_FIELDS))

        try:
            async with self._session_maker() as session:
                async with session.begin():
                    session.add(row)
        except SQLAlchemyError as e:
            raise self._wrap("add_menu_item", e) from e

        logger.info(f"Menu item {row.id} added for restaurant {restaurant_id}")
        return row.id

    async def update_menu_item(
        self,
        item_id: str,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    row = await session.get(MenuItemRow, item_id)
                    if row is None:
                        raise RecordNotFoundError(
                            f"Menu item {item_id} not found",
                            code="not_found",
                            provider=self.provider_name,
                        )
                    self._check_version(row, expected_version, f"menu item {item_id}")
                    _apply_fields(row, clean_update(fields, PROTECTED_ITEM_FIELDS))
                    row.updated_at = utcnow()
                    row.version = (row.version or 1) + 1
        except SQLAlchemyError as e:
            raise self._wrap("update_menu_item", e) from e

        logger.info(f"Menu item {item_id} updated")

    async def delete_menu_item(self, item_id: str) -> None:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    row = await session.get(MenuItemRow, item_id)
                    if row is not None:
                        await session.delete(row)
        except SQLAlchemyError as e:
            raise self._wrap("delete_menu_item", e) from e

        logger.info(f"Menu item {item_id} deleted")

    # =========================================================================
    # RESTAURANT WRITES
    # =========================================================================

    async def create_restaurant(
        self,
        restaurant_id: str,
        fields: dict[str, Any],
    ) -> Restaurant:
        now = utcnow()
        row = RestaurantRow(
            id=restaurant_id,
            name="",
            theme={},
            categories=[],
            is_setup_complete=False,
            created_at=now,
            updated_at=now,
            version=1,
        )
        _apply_fields(row, clean_update(fields, PROTECTED_RESTAURANT_FIELDS))

        try:
            async with self._session_maker() as session:
                async with session.begin():
                    if await session.get(RestaurantRow, restaurant_id) is not None:
                        raise BackendError(
                            f"Restaurant {restaurant_id} already exists",
                            code="already_exists",
                            provider=self.provider_name,
                        )
                    session.add(row)
        except SQLAlchemyError as e:
            raise self._wrap("create_restaurant", e) from e

        logger.info(f"Restaurant {restaurant_id} created")
        return Restaurant.from_document(row.id, row.to_document())

    async def update_restaurant(
        self,
        restaurant_id: str,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    row = await session.get(RestaurantRow, restaurant_id)
                    if row is None:
                        raise RecordNotFoundError(
                            f"Restaurant {restaurant_id} not found",
                            code="not_found",
                            provider=self.provider_name,
                        )
                    self._check_version(row, expected_version, f"restaurant {restaurant_id}")
                    _apply_fields(row, clean_update(fields, PROTECTED_RESTAURANT_FIELDS))
                    row.updated_at = utcnow()
                    row.version = (row.version or 1) + 1
        except SQLAlchemyError as e:
            raise self._wrap("update_restaurant", e) from e

        logger.info(f"Restaurant {restaurant_id} updated")

    def _check_version(self, row: Any, expected_version: Optional[int], label: str) -> None:
        if expected_version is not None and row.version != expected_version:
            raise ConflictError(
                f"{label} was changed by someone else "
                f"(expected version {expected_version}, found {row.version})",
                expected=expected_version,
                actual=row.version,
                provider=self.provider_name,
            )

    async def health_check(self) -> bool:
        try:
            async with self._session_maker() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False
