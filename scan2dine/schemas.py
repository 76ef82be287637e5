"""
Pydantic Schemas for Records, Forms and API Responses

Three kinds of models live here:
    - Records (MenuItem, Restaurant): documents read back from the data
      store. Attributes are snake_case, stored field names are camelCase
      and mapped through aliases.
    - Drafts: typed form input, validated at the boundary before any
      gateway call.
    - Responses: JSON shapes served by the API routes.

Author: Khalil_Bannouri
Version: 1.0.0
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional, List, Literal
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
import re


DEFAULT_CATEGORIES = ["Starters", "Main Course", "Desserts", "Drinks", "Specials"]
ONBOARDING_CATEGORIES = ["Starters", "Main Course", "Desserts", "Drinks"]
DEFAULT_ITEM_CATEGORY = "Starters"

FONT_FAMILIES = ["Inter", "Georgia", "Playfair Display", "Roboto", "Lato"]

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
_PHONE = re.compile(r"^[\d\s\+\-\(\)\.]+$")
_EMAIL = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


def _clean_phone(v: Optional[str]) -> Optional[str]:
    v = _blank_to_none(v)
    if v is None:
        return v
    if not _PHONE.match(v) or len(re.sub(r"\D", "", v)) < 7:
        raise ValueError("Phone number must have at least 7 digits")
    return v


# =============================================================================
# RECORDS
# =============================================================================

class MenuItem(BaseModel):
    """A single purchasable entry on a restaurant's menu."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    restaurant_id: str = Field(..., alias="restaurantId")
    name: str
    price: float = 0.0
    category: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    version: int = 1

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "MenuItem":
        """Build a record from a raw stored document."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Stored shape of the record (camelCase, without the id)."""
        return self.model_dump(by_alias=True, exclude={"id"})


class Restaurant(BaseModel):
    """Owner-configured profile; its id is the owner's account id."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    owner_name: Optional[str] = Field(None, alias="ownerName")
    email: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    theme: dict[str, Any] = Field(default_factory=dict)
    categories: List[str] = Field(default_factory=list)
    is_setup_complete: bool = Field(False, alias="isSetupComplete")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    version: int = 1

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Restaurant":
        """Build a record from a raw stored document."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Stored shape of the record (camelCase, without the id)."""
        return self.model_dump(by_alias=True, exclude={"id"})


# =============================================================================
# FORM DRAFTS
# =============================================================================

class MenuItemDraft(BaseModel):
    """Add/edit form for a menu item."""

    name: str = Field(..., min_length=1, max_length=100, examples=["Tomato Soup"])
    price: Decimal = Field(..., ge=0, examples=["4.50"])
    category: str = Field(default=DEFAULT_ITEM_CATEGORY, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=500)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("price")
    @classmethod
    def round_price(cls, v: Decimal) -> Decimal:
        return v.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @field_validator("category", mode="before")
    @classmethod
    def strip_category(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("image_url", mode="before")
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        v = _blank_to_none(v)
        if v is not None and not v.lower().startswith(("http://", "https://")):
            raise ValueError("Image URL must start with http:// or https://")
        return v

    @classmethod
    def from_item(cls, item: MenuItem) -> "MenuItemDraft":
        """Pre-populate the form from an existing item (edit mode)."""
        return cls.model_construct(
            name=item.name,
            price=Decimal(str(item.price)).quantize(Decimal("0.01")),
            category=item.category or "",
            description=item.description,
            image_url=item.image_url,
        )

    def to_fields(self) -> dict[str, Any]:
        """Fields written to the store."""
        return {
            "name": self.name,
            "price": float(self.price),
            "category": self.category,
            "description": self.description,
            "imageUrl": self.image_url,
        }


class RestaurantDraft(BaseModel):
    """Settings form, bound 1:1 to the editable restaurant fields."""

    name: str = Field(..., min_length=1, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    description: Optional[str] = Field(None, max_length=1000)
    logo: Optional[str] = Field(None, max_length=500)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("address", "description", "logo", mode="before")
    @classmethod
    def clean_optional(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _clean_phone(v)

    @classmethod
    def from_restaurant(cls, restaurant: Restaurant) -> "RestaurantDraft":
        return cls.model_construct(
            name=restaurant.name,
            address=restaurant.address,
            phone=restaurant.phone,
            description=restaurant.description,
            logo=restaurant.logo,
        )

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump()


class OnboardingDraft(BaseModel):
    """First-run wizard: contact details, branding and menu categories."""

    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    description: Optional[str] = Field(None, max_length=1000)
    logo: Optional[str] = Field(None, max_length=500)
    categories: List[str] = Field(default_factory=lambda: list(ONBOARDING_CATEGORIES))

    @field_validator("address", "description", "logo", mode="before")
    @classmethod
    def clean_optional(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _clean_phone(v)

    @field_validator("categories")
    @classmethod
    def clean_categories(cls, v: List[str]) -> List[str]:
        seen: list[str] = []
        for category in v:
            category = category.strip()
            if category and category not in seen:
                seen.append(category)
        return seen

    def to_fields(self) -> dict[str, Any]:
        fields = self.model_dump()
        fields["isSetupComplete"] = True
        return fields


class LoginDraft(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class SignupDraft(BaseModel):
    """Account + restaurant creation form."""

    owner_name: str = Field(..., min_length=2, max_length=100)
    restaurant_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("owner_name", "restaurant_name", mode="before")
    @classmethod
    def strip_names(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        v = v.strip().lower()
        if not _EMAIL.match(v):
            raise ValueError("Invalid email format")
        return v

    def restaurant_fields(self) -> dict[str, Any]:
        """Initial restaurant document created together with the account."""
        return {
            "name": self.restaurant_name,
            "ownerName": self.owner_name,
            "email": self.email,
            "isSetupComplete": False,
            "theme": {},
            "categories": [],
        }


class ThemeDraft(BaseModel):
    """Cosmetic settings stored as an opaque blob on the restaurant."""

    primary_color: str = Field(default="#16a34a")
    accent_color: str = Field(default="#f97316")
    font_family: str = Field(default="Inter")
    layout: Literal["list", "grid"] = "list"

    @field_validator("primary_color", "accent_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not _HEX_COLOR.match(v):
            raise ValueError("Colors must look like #RRGGBB")
        return v.lower()

    @field_validator("font_family")
    @classmethod
    def validate_font(cls, v: str) -> str:
        if v not in FONT_FAMILIES:
            raise ValueError(f"Font must be one of: {', '.join(FONT_FAMILIES)}")
        return v

    @classmethod
    def from_theme(cls, theme: dict[str, Any]) -> "ThemeDraft":
        """Read a stored theme blob, falling back to defaults for bad values."""
        defaults = cls()
        try:
            return cls(
                primary_color=theme.get("primaryColor", defaults.primary_color),
                accent_color=theme.get("accentColor", defaults.accent_color),
                font_family=theme.get("fontFamily", defaults.font_family),
                layout=theme.get("layout", defaults.layout),
            )
        except ValueError:
            return defaults

    def to_theme(self) -> dict[str, Any]:
        return {
            "primaryColor": self.primary_color,
            "accentColor": self.accent_color,
            "fontFamily": self.font_family,
            "layout": self.layout,
        }


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class PublicMenuItemResponse(BaseModel):
    id: str
    name: str
    price: float
    description: Optional[str] = None
    image_url: Optional[str] = None
    order_url: Optional[str] = None


class PublicCategoryResponse(BaseModel):
    name: str
    count: int
    items: List[PublicMenuItemResponse]


class PublicMenuResponse(BaseModel):
    """JSON variant of the public menu page."""
    restaurant_id: str
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    logo: Optional[str] = None
    theme: dict[str, Any] = Field(default_factory=dict)
    categories: List[PublicCategoryResponse]


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    data_backend: str
    auth_backend: str
    data_store: str
    auth_service: str
    timestamp: datetime
