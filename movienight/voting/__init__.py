"""Tally systems for picking a night's winner."""

from .base import TallySystem

# Tally system registry - import systems here to register them
_tally_systems: list[type[TallySystem]] = []


def register_tally_system(system_class: type[TallySystem]) -> type[TallySystem]:
    """Decorator to register a tally system class."""
    _tally_systems.append(system_class)
    return system_class


def get_all_tally_systems() -> list[TallySystem]:
    """Return instances of all registered tally systems."""
    return [system_class() for system_class in _tally_systems]


def get_tally_system(key: str) -> TallySystem:
    """Return an instance of the tally system registered under `key`.

    Raises:
        KeyError: If no system has that key
    """
    for system_class in _tally_systems:
        if system_class.KEY == key:
            return system_class()
    raise KeyError(f"Unknown tally system: {key}")
