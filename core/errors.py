"""
core/errors.py
--------------
Exceptions raised around update dispatch.
"""


class DirectoryUnavailable(Exception):
    """The user directory could not read or write a user's state."""


class RegistryError(ValueError):
    """The handler registry built at startup is malformed."""
