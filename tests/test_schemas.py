from decimal import Decimal

import pytest
from pydantic import ValidationError

from scan2dine.core.exceptions import DraftValidationError
from scan2dine.schemas import (
    MenuItem,
    MenuItemDraft,
    OnboardingDraft,
    Restaurant,
    RestaurantDraft,
    SignupDraft,
    ThemeDraft,
)

from tests.conftest import make_item


class TestMenuItemDraft:
    def test_defaults_and_cleanup(self):
        draft = MenuItemDraft(name="  Soup ", price="4.499", description="   ")

        assert draft.name == "Soup"
        assert draft.price == Decimal("4.50")
        assert draft.category == "Starters"
        assert draft.description is None
        assert draft.to_fields() == {
            "name": "Soup",
            "price": 4.5,
            "category": "Starters",
            "description": None,
            "imageUrl": None,
        }

    @pytest.mark.parametrize("data", [
        {"name": "", "price": "1"},
        {"name": "Soup", "price": "-1"},
        {"name": "Soup", "price": "abc"},
        {"name": "Soup", "price": "1", "image_url": "ftp://x/y.png"},
    ])
    def test_rejects_bad_input(self, data):
        with pytest.raises(ValidationError):
            MenuItemDraft.model_validate(data)

    def test_blank_category_is_kept_empty(self):
        assert MenuItemDraft(name="Soup", price="1", category="  ").category == ""

    def test_from_item_prefills_edit_form(self):
        item = make_item("Soup", "Starters", price=4.5, description="Hot")
        draft = MenuItemDraft.from_item(item)
        assert (draft.name, draft.price, draft.category, draft.description) == (
            "Soup", Decimal("4.50"), "Starters", "Hot",
        )


def test_draft_validation_error_collapses_messages():
    with pytest.raises(ValidationError) as exc_info:
        MenuItemDraft.model_validate({"name": "Soup", "price": "1", "image_url": "nope"})

    error = DraftValidationError.from_pydantic(exc_info.value)

    assert error.field_errors == {"image_url": "Image URL must start with http:// or https://"}
    assert "image_url" in str(error)


def test_restaurant_draft_phone():
    assert RestaurantDraft(name="X", phone=" +1 555 123 4567 ").phone == "+1 555 123 4567"
    assert RestaurantDraft(name="X", phone="").phone is None
    with pytest.raises(ValidationError):
        RestaurantDraft(name="X", phone="12")


def test_onboarding_draft_dedupes_categories():
    draft = OnboardingDraft(categories=["Starters", " ", "Starters ", "Drinks"])
    assert draft.categories == ["Starters", "Drinks"]
    assert draft.to_fields()["isSetupComplete"] is True


def test_onboarding_draft_default_categories():
    assert OnboardingDraft().categories == ["Starters", "Main Course", "Desserts", "Drinks"]


def test_signup_draft():
    draft = SignupDraft(owner_name="Jane", restaurant_name="Chez Nous", email=" Jane@Example.com ", password="secret1")
    assert draft.email == "jane@example.com"
    assert draft.restaurant_fields()["isSetupComplete"] is False

    with pytest.raises(ValidationError):
        SignupDraft(owner_name="Jane", restaurant_name="X", email="not-an-email", password="secret1")
    with pytest.raises(ValidationError):
        SignupDraft(owner_name="Jane", restaurant_name="X", email="a@b.co", password="123")


def test_theme_round_trip_and_fallback():
    theme = ThemeDraft(primary_color="#AABBCC", layout="grid")
    assert theme.to_theme()["primaryColor"] == "#aabbcc"
    assert ThemeDraft.from_theme(theme.to_theme()) == theme
    assert ThemeDraft.from_theme({"primaryColor": "red"}) == ThemeDraft()


def test_records_map_stored_field_names():
    item = MenuItem.from_document("i1", {"restaurantId": "r1", "name": "Soup", "imageUrl": "https://x/y.png", "extra": 1})
    assert item.restaurant_id == "r1"
    assert item.to_document()["imageUrl"] == "https://x/y.png"

    restaurant = Restaurant.from_document("r1", {"name": "Chez", "isSetupComplete": True})
    assert restaurant.is_setup_complete is True
    assert restaurant.theme == {}
