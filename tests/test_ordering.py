from urllib.parse import parse_qs, urlparse

from scan2dine.services.ordering import format_price, order_link, order_message, phone_digits

from tests.conftest import make_item, make_restaurant


def test_phone_digits():
    assert phone_digits("+1 (555) 123-4567") == "15551234567"
    assert phone_digits(None) == ""


def test_format_price():
    assert format_price(4.5) == "$4.50"
    assert format_price(10, "€") == "€10.00"


def test_order_message():
    message = order_message(make_item("Tomato Soup", price=4.5), make_restaurant())
    assert message == "Hi! I'd like to order: Tomato Soup ($4.50) from Chez Nous"


def test_order_link_addresses_digits_and_encodes_message():
    link = order_link(make_item("Fish & Chips", price=12), make_restaurant())

    parsed = urlparse(link)
    assert parsed.scheme == "https"
    assert parsed.netloc == "wa.me"
    assert parsed.path == "/15551234567"
    assert "%26" in parsed.query
    assert parse_qs(parsed.query)["text"] == ["Hi! I'd like to order: Fish & Chips ($12.00) from Chez Nous"]


def test_order_link_keeps_uri_component_safe_characters():
    link = order_link(make_item("Soup", price=1), make_restaurant())
    assert "Hi!%20I'd%20like" in link


def test_no_link_without_phone():
    assert order_link(make_item("Soup"), make_restaurant(phone=None)) is None
    assert order_link(make_item("Soup"), make_restaurant(phone="n/a")) is None
