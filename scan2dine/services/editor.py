"""
Admin Editor

Everything the owner dashboard does, independent of HTTP:

    - load(): items + profile, fetched concurrently
    - menu tab: add/edit share one draft; every write is followed by a
      full reload of the list, never a local patch
    - delete: only with explicit confirmation
    - QR tab: encode the public menu URL, offer a named download
    - settings / theme / onboarding: restaurant profile writes

Writes raise (BackendError, EncodingError); the web layer turns them into
flash banners. Nothing is retried.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping, Optional

from scan2dine.core.config import get_settings
from scan2dine.core.exceptions import BackendError, RecordNotFoundError
from scan2dine.schemas import (
    DEFAULT_CATEGORIES,
    MenuItem,
    MenuItemDraft,
    OnboardingDraft,
    Restaurant,
    RestaurantDraft,
    ThemeDraft,
)
from scan2dine.services.accounts import OwnerSession
from scan2dine.services.gateway.base import BaseMenuGateway
from scan2dine.services.grouping import group_by_category
from scan2dine.services.qr import (
    QRCodeImage,
    QRDownload,
    download_qr_code,
    generate_qr_code,
    public_menu_url,
    qr_filename,
)

logger = logging.getLogger(__name__)


class DashboardTab(str, Enum):
    MENU = "menu"
    QR = "qr"
    THEME = "theme"
    SETTINGS = "settings"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DashboardTab":
        """Unknown or missing values open the menu tab."""
        try:
            return cls(value) if value else cls.MENU
        except ValueError:
            return cls.MENU


@dataclass
class Flash:
    """Transient dashboard banner."""
    kind: Literal["success", "error", "info"]
    message: str
    dismiss_after: int = field(default_factory=lambda: get_settings().flash_dismiss_seconds)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["Flash"]:
        if not data or "message" not in data:
            return None
        return cls(
            kind=data.get("kind", "info"),
            message=data["message"],
            dismiss_after=data.get("dismiss_after", get_settings().flash_dismiss_seconds),
        )


@dataclass
class DashboardStats:
    item_count: int = 0
    category_count: int = 0


@dataclass
class DashboardState:
    """Everything the dashboard template needs."""
    session: OwnerSession
    tab: DashboardTab
    menu_url: str
    restaurant: Optional[Restaurant] = None
    items: list[MenuItem] = field(default_factory=list)
    grouped: dict[str, list[MenuItem]] = field(default_factory=dict)
    stats: DashboardStats = field(default_factory=DashboardStats)
    suggested_categories: list[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    load_failed: bool = False

    def find_item(self, item_id: Optional[str]) -> Optional[MenuItem]:
        if not item_id:
            return None
        return next((item for item in self.items if item.id == item_id), None)


class AdminEditor:
    """
    Dashboard operations for one signed-in owner.

    Args:
        session: The signed-in owner; its account id is the restaurant id
        gateway: Data store
        origin: Public origin used to build the menu URL
    """

    def __init__(self, session: OwnerSession, gateway: BaseMenuGateway, origin: str):
        self.session = session
        self.gateway = gateway
        self.origin = origin

    @property
    def restaurant_id(self) -> str:
        return self.session.account_id

    @property
    def menu_url(self) -> str:
        return public_menu_url(self.origin, self.restaurant_id)

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load(self, tab: DashboardTab = DashboardTab.MENU) -> DashboardState:
        """
        Fetch items and profile concurrently.

        The two reads are independent: if one fails the other is still
        shown, and load_failed tells the page to warn the owner.
        """
        items_result, restaurant_result = await asyncio.gather(
            self.gateway.fetch_menu_items(self.restaurant_id),
            self.gateway.fetch_restaurant(self.restaurant_id),
            return_exceptions=True,
        )

        load_failed = False
        items: list[MenuItem] = []
        restaurant: Optional[Restaurant] = None

        for result in (items_result, restaurant_result):
            if isinstance(result, BackendError):
                logger.error(f"Dashboard load for {self.restaurant_id} failed: {result}")
                load_failed = True
            elif isinstance(result, BaseException):
                raise result

        if not isinstance(items_result, BaseException):
            items = items_result
        if not isinstance(restaurant_result, BaseException):
            restaurant = restaurant_result

        grouped = group_by_category(items)
        suggested = list(DEFAULT_CATEGORIES)
        if restaurant is not None and restaurant.categories:
            suggested = list(restaurant.categories)

        return DashboardState(
            session=self.session,
            tab=tab,
            menu_url=self.menu_url,
            restaurant=restaurant,
            items=items,
            grouped=grouped,
            stats=DashboardStats(item_count=len(items), category_count=len(grouped)),
            suggested_categories=suggested,
            load_failed=load_failed,
        )

    async def reload_items(self) -> list[MenuItem]:
        return await self.gateway.get_menu_items(self.restaurant_id)

    async def reload_restaurant(self) -> Optional[Restaurant]:
        return await self.gateway.get_restaurant(self.restaurant_id)

    # =========================================================================
    # MENU TAB
    # =========================================================================

    async def save_item(
        self,
        draft: MenuItemDraft,
        item_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> list[MenuItem]:
        """
        Add (no item_id) or update an item, then reload the whole list.

        Returns:
            The reloaded item list
        """
        if item_id:
            await self._require_owned(item_id)
            await self.gateway.update_menu_item(item_id, draft.to_fields(), expected_version)
            logger.info(f"Owner {self.restaurant_id} updated item {item_id}")
        else:
            new_id = await self.gateway.add_menu_item(self.restaurant_id, draft.to_fields())
            logger.info(f"Owner {self.restaurant_id} added item {new_id}")
        return await self.reload_items()

    async def delete_item(self, item_id: str, confirmed: bool) -> bool:
        """
        Delete an item once the owner has confirmed.

        Returns:
            True if the item was deleted, False if confirmation was missing
        """
        if not confirmed:
            logger.info(f"Delete of {item_id} not confirmed, nothing written")
            return False
        await self._require_owned(item_id)
        await self.gateway.delete_menu_item(item_id)
        await self.reload_items()
        return True

    async def _require_owned(self, item_id: str) -> None:
        """Items are addressed by id alone; make sure this one is ours."""
        items = await self.gateway.fetch_menu_items(self.restaurant_id)
        if not any(item.id == item_id for item in items):
            raise RecordNotFoundError(
                f"Menu item {item_id} not found", code="not_found", provider=self.gateway.provider_name
            )

    # =========================================================================
    # QR TAB
    # =========================================================================

    def generate_qr(self, options: Optional[dict[str, Any]] = None) -> QRCodeImage:
        """Encode the public menu URL. Raises EncodingError."""
        return generate_qr_code(self.menu_url, options)

    async def qr_download(self) -> Optional[QRDownload]:
        """Regenerate the QR code and name it after the restaurant."""
        restaurant = await self.reload_restaurant()
        image = self.generate_qr()
        return download_qr_code(image, qr_filename(restaurant.name if restaurant else None))

    # =========================================================================
    # PROFILE TABS
    # =========================================================================

    async def save_settings(
        self,
        draft: RestaurantDraft,
        expected_version: Optional[int] = None,
    ) -> Optional[Restaurant]:
        """Write the settings form, then reload the profile."""
        await self.gateway.update_restaurant(self.restaurant_id, draft.to_fields(), expected_version)
        return await self.reload_restaurant()

    async def save_theme(self, draft: ThemeDraft) -> Optional[Restaurant]:
        await self.gateway.update_restaurant(self.restaurant_id, {"theme": draft.to_theme()})
        return await self.reload_restaurant()

    async def complete_onboarding(self, draft: OnboardingDraft) -> None:
        """
        Save the wizard and mark setup complete.

        An account without a restaurant document (e.g. created directly in
        the provider console) gets one here.
        """
        fields = draft.to_fields()
        try:
            await self.gateway.update_restaurant(self.restaurant_id, fields)
        except RecordNotFoundError:
            logger.warning(f"No restaurant for {self.restaurant_id}, creating it during onboarding")
            fields.setdefault("name", "")
            fields["email"] = self.session.email
            await self.gateway.create_restaurant(self.restaurant_id, fields)
