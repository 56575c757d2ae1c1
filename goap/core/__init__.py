"""
Core module - podstawowe komponenty współdzielone przez planer.

Zawiera:
- HexCoord: Współrzędne hexagonalne (wartości faktów pozycyjnych)
- ConfigLoader: Wczytywanie konfiguracji z defaults
"""

from .hex_coord import HexCoord, hexes_in_range
from .config_loader import ConfigLoader, BUILTIN_DEFAULTS

__all__ = ["HexCoord", "hexes_in_range", "ConfigLoader", "BUILTIN_DEFAULTS"]
