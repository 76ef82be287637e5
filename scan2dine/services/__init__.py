"""
                        Services Module

Contains all business logic with the hybrid architecture pattern.
Backend-facing services have development and production implementations
selected by configuration.

Services:
    - gateway: Menu items and restaurant profiles (memory / sql / firestore)
    - auth: Owner accounts (mock / Firebase Auth)
    - grouping: Category buckets for rendering
    - ordering: WhatsApp order links
    - qr: QR code generation and download packaging
    - accounts: Owner sign-up / sign-in / sign-out
    - editor: Owner dashboard operations
    - public_menu: Diner-facing menu assembly
"""

from scan2dine.services.gateway import get_menu_gateway
from scan2dine.services.auth import get_auth_service

__all__ = ["get_menu_gateway", "get_auth_service"]
