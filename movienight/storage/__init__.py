"""Stores for nights, submissions and ballots."""

from .base import Store

# Store registry - import stores here to register them
_stores: list[type[Store]] = []


def register_store(store_class: type[Store]) -> type[Store]:
    """Decorator to register a store class."""
    _stores.append(store_class)
    return store_class


def get_all_stores() -> list[type[Store]]:
    """Return all registered store classes."""
    return _stores.copy()


def detect_store(url: str) -> type[Store] | None:
    """Return the registered store class that handles the given URL."""
    for store_class in _stores:
        if store_class.can_open(url):
            return store_class
    return None


def get_supported_store_urls() -> str:
    """Return a user-friendly description of supported store URLs."""
    lines = ["Supported store URLs:"]
    for store_class in _stores:
        example = getattr(store_class, "EXAMPLE_URL", None)
        if example:
            lines.append(f"  - {example}")
    return "\n".join(lines)
