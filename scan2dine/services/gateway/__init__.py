"""
Menu Gateway Factory

Provides a single entry point for obtaining the data store that holds
menu items and restaurant profiles. Selected by DATA_BACKEND, which
defaults from ENV_MODE (development -> memory, otherwise firestore).

Usage:
    from scan2dine.services.gateway import get_menu_gateway

    gateway = get_menu_gateway()
    items = await gateway.get_menu_items(restaurant_id)

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from scan2dine.core.config import DataBackend, get_settings
from scan2dine.services.gateway.base import BaseMenuGateway
from scan2dine.services.gateway.memory import InMemoryMenuGateway
from scan2dine.services.gateway.sql import SqlMenuGateway
from scan2dine.services.gateway.firestore import FirestoreMenuGateway

logger = logging.getLogger(__name__)


@lru_cache()
def get_menu_gateway() -> BaseMenuGateway:
    """
    Get the configured menu gateway instance.

    The instance is cached so the in-memory store survives across
    requests and the SQL/Firestore clients are created only once.

    Returns:
        BaseMenuGateway: Configured gateway
    """
    settings = get_settings()

    if settings.data_backend == DataBackend.FIRESTORE:
        logger.info("Menu Gateway: Using FirestoreMenuGateway")
        return FirestoreMenuGateway()
    if settings.data_backend == DataBackend.SQL:
        logger.info("Menu Gateway: Using SqlMenuGateway")
        return SqlMenuGateway()

    logger.info("Menu Gateway: Using InMemoryMenuGateway (development mode)")
    return InMemoryMenuGateway(
        failure_rate=settings.mock_failure_rate,
        latency=settings.mock_latency_seconds,
    )


def reset_menu_gateway() -> None:
    """
    Clear the cached gateway instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_menu_gateway.cache_clear()
    logger.debug("Menu gateway cache cleared")


__all__ = [
    "get_menu_gateway",
    "reset_menu_gateway",
    "BaseMenuGateway",
    "InMemoryMenuGateway",
    "SqlMenuGateway",
    "FirestoreMenuGateway",
]
