"""
Order-via-Message Links

Diners order by opening WhatsApp with a prefilled message addressed to
the restaurant. Nothing is recorded on our side.
"""

import re
from typing import Optional
from urllib.parse import quote

from scan2dine.core.config import get_settings
from scan2dine.schemas import MenuItem, Restaurant

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def phone_digits(phone: Optional[str]) -> str:
    """Strip everything but digits from a phone number."""
    return re.sub(r"\D", "", phone or "")


def format_price(price: float, currency_symbol: Optional[str] = None) -> str:
    if currency_symbol is None:
        currency_symbol = get_settings().currency_symbol
    return f"{currency_symbol}{price:.2f}"


def order_message(item: MenuItem, restaurant: Restaurant) -> str:
    return (
        f"Hi! I'd like to order: {item.name} ({format_price(item.price)}) "
        f"from {restaurant.name}"
    )


def order_link(item: MenuItem, restaurant: Restaurant) -> Optional[str]:
    """
    Deep link that opens a prefilled order message.

    Returns:
        https://wa.me/<digits>?text=<encoded message>, or None when the
        restaurant has no usable phone number
    """
    digits = phone_digits(restaurant.phone)
    if not digits:
        return None
    base_url = get_settings().whatsapp_base_url.rstrip("/")
    text = quote(order_message(item, restaurant), safe=_URI_COMPONENT_SAFE)
    return f"{base_url}/{digits}?text={text}"
