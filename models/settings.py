"""
models/settings.py
------------------
Shop texts an administrator can change from the bot.
"""

from dataclasses import dataclass

from config import SHOP_ABOUT, SHOP_HOURS, SUPPORT_CONTACT

ABOUT = "about"
HOURS = "hours"
CONTACTS = "contacts"
SUPPORT = "support"
SETTING_KEYS = (ABOUT, HOURS, CONTACTS, SUPPORT)


@dataclass
class ShopSettings:
    """
    Texts shown by the Info and Support menu buttons.

    Attributes:
        about: Shop description (delivery, payment terms).
        hours: Working hours.
        contacts: Phone, address or other contact details.
        support: Where customers should write with questions.
    """
    about: str = SHOP_ABOUT
    hours: str = SHOP_HOURS
    contacts: str = ""
    support: str = SUPPORT_CONTACT

    @classmethod
    def from_mapping(cls, values: dict[str, str]) -> "ShopSettings":
        """Build settings from stored key/value pairs, keeping defaults for missing keys."""
        return cls(**{k: v for k, v in values.items() if k in SETTING_KEYS})
