"""
                        Scan2Dine

Digital menu SaaS for restaurants: owners manage a menu and print a
QR code, diners open the public menu and order over WhatsApp.

Author: Khalil_Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil_Bannouri"
