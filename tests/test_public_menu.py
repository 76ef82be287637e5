from scan2dine.services.gateway.memory import InMemoryMenuGateway
from scan2dine.services.public_menu import MenuState, load_public_menu


async def test_ready_menu_sections(seeded_gateway):
    await seeded_gateway.add_menu_item("r1", {"name": "Mystery", "price": 3.0, "category": ""})

    menu = await load_public_menu(seeded_gateway, "r1")

    assert menu.state == MenuState.READY
    assert [s.name for s in menu.sections] == ["Other", "Desserts", "Starters"]
    assert all(s.expanded for s in menu.sections)
    assert menu.sections[0].count_label == "1 item"
    assert menu.can_order is True
    assert menu.sections[0].entries[0].order_url.startswith("https://wa.me/15551234567?text=")


async def test_count_label_plural(seeded_gateway):
    await seeded_gateway.add_menu_item("r1", {"name": "Pie", "price": 3.0, "category": "Desserts"})
    menu = await load_public_menu(seeded_gateway, "r1")
    assert menu.sections[0].count_label == "2 items"


async def test_no_phone_means_no_order_links(seeded_gateway):
    await seeded_gateway.update_restaurant("r1", {"phone": None})

    menu = await load_public_menu(seeded_gateway, "r1")

    assert menu.state == MenuState.READY
    assert menu.can_order is False


async def test_not_found(gateway):
    menu = await load_public_menu(gateway, "missing")
    assert menu.state == MenuState.NOT_FOUND


async def test_coming_soon(gateway):
    await gateway.create_restaurant("r1", {"name": "Empty Kitchen"})
    menu = await load_public_menu(gateway, "r1")
    assert menu.state == MenuState.COMING_SOON
    assert menu.restaurant.name == "Empty Kitchen"


async def test_unavailable_is_distinct_from_not_found():
    menu = await load_public_menu(InMemoryMenuGateway(failure_rate=1.0), "r1")
    assert menu.state == MenuState.UNAVAILABLE
    assert menu.restaurant is None


async def test_json_shape(seeded_gateway):
    response = (await load_public_menu(seeded_gateway, "r1")).to_response()

    assert response.name == "Chez Nous"
    assert [c.name for c in response.categories] == ["Desserts", "Starters"]
    assert response.categories[1].items[0].name == "Soup"
    assert response.categories[1].count == 1
