import pytest

from scan2dine.core.exceptions import BackendError, ConflictError, RecordNotFoundError
from scan2dine.services.gateway.memory import InMemoryMenuGateway


async def test_add_and_list_items_ordered_by_category_then_name(any_gateway):
    await any_gateway.add_menu_item("r1", {"name": "Tart", "price": 5.0, "category": "Desserts"})
    await any_gateway.add_menu_item("r1", {"name": "Cake", "price": 6.0, "category": "Desserts"})
    await any_gateway.add_menu_item("r1", {"name": "Soup", "price": 4.5, "category": "Starters"})
    await any_gateway.add_menu_item("r2", {"name": "Other restaurant", "price": 1.0})

    items = await any_gateway.get_menu_items("r1")

    assert [item.name for item in items] == ["Cake", "Tart", "Soup"]
    assert all(item.restaurant_id == "r1" for item in items)
    assert all(item.version == 1 and item.created_at is not None for item in items)


async def test_unknown_restaurant_is_none(any_gateway):
    assert await any_gateway.get_restaurant("missing") is None
    assert await any_gateway.fetch_restaurant("missing") is None


async def test_update_merges_fields_and_bumps_version(any_gateway):
    item_id = await any_gateway.add_menu_item(
        "r1", {"name": "Soup", "price": 4.5, "category": "Starters", "description": "Hot"}
    )

    await any_gateway.update_menu_item(item_id, {"price": 5.0, "restaurantId": "hijack"})

    [item] = await any_gateway.fetch_menu_items("r1")
    assert item.price == 5.0
    assert item.description == "Hot"
    assert item.restaurant_id == "r1"
    assert item.version == 2


async def test_update_missing_item_raises(any_gateway):
    with pytest.raises(RecordNotFoundError):
        await any_gateway.update_menu_item("nope", {"name": "X"})


async def test_version_conflict(any_gateway):
    item_id = await any_gateway.add_menu_item("r1", {"name": "Soup", "price": 4.5})
    await any_gateway.update_menu_item(item_id, {"price": 5.0}, expected_version=1)

    with pytest.raises(ConflictError) as exc_info:
        await any_gateway.update_menu_item(item_id, {"price": 6.0}, expected_version=1)

    assert exc_info.value.expected == 1
    assert exc_info.value.actual == 2
    [item] = await any_gateway.fetch_menu_items("r1")
    assert item.price == 5.0


async def test_delete_item_and_unknown_id(any_gateway):
    item_id = await any_gateway.add_menu_item("r1", {"name": "Soup", "price": 4.5})

    await any_gateway.delete_menu_item(item_id)
    await any_gateway.delete_menu_item("never-existed")

    assert await any_gateway.get_menu_items("r1") == []


async def test_restaurant_create_and_partial_update(any_gateway):
    await any_gateway.create_restaurant(
        "r1", {"name": "Chez Nous", "email": "owner@example.com", "theme": {"layout": "grid"}}
    )

    await any_gateway.update_restaurant("r1", {"phone": "555 123 4567", "categories": ["Starters"]})

    restaurant = await any_gateway.fetch_restaurant("r1")
    assert restaurant.name == "Chez Nous"
    assert restaurant.email == "owner@example.com"
    assert restaurant.phone == "555 123 4567"
    assert restaurant.theme == {"layout": "grid"}
    assert restaurant.categories == ["Starters"]
    assert restaurant.version == 2


async def test_create_existing_restaurant_fails(any_gateway):
    await any_gateway.create_restaurant("r1", {"name": "Chez Nous"})
    with pytest.raises(BackendError) as exc_info:
        await any_gateway.create_restaurant("r1", {"name": "Again"})
    assert exc_info.value.code == "already_exists"


async def test_update_missing_restaurant_raises(any_gateway):
    with pytest.raises(RecordNotFoundError):
        await any_gateway.update_restaurant("missing", {"name": "X"})


async def test_health_check(any_gateway):
    assert await any_gateway.health_check() is True


class TestFailureReporting:
    """Strict reads surface failures, lenient reads hide them."""

    @pytest.fixture
    def broken(self) -> InMemoryMenuGateway:
        return InMemoryMenuGateway(failure_rate=1.0)

    async def test_strict_reads_raise(self, broken):
        with pytest.raises(BackendError):
            await broken.fetch_menu_items("r1")
        with pytest.raises(BackendError):
            await broken.fetch_restaurant("r1")

    async def test_lenient_reads_return_empty(self, broken):
        assert await broken.get_menu_items("r1") == []
        assert await broken.get_restaurant("r1") is None

    async def test_writes_raise(self, broken):
        with pytest.raises(BackendError):
            await broken.add_menu_item("r1", {"name": "Soup", "price": 1.0})
        with pytest.raises(BackendError):
            await broken.delete_menu_item("x")


async def test_memory_reads_are_copies(gateway):
    await gateway.create_restaurant("r1", {"name": "Chez Nous", "categories": ["Starters"]})

    restaurant = await gateway.fetch_restaurant("r1")
    restaurant.categories.append("Mutated")

    assert (await gateway.fetch_restaurant("r1")).categories == ["Starters"]
