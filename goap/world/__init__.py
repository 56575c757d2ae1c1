"""
World module - fakty i niemutowalne snapshoty świata.

Zawiera:
- WorldState: Niemutowalna mapa faktów
- fact_key / parse_fact_key: Budowanie kluczy ``name(args)``
- FactSource: Protokół encji projektujących się na fakty
"""

from .facts import (
    FactValue,
    FactSource,
    fact_key,
    parse_fact_key,
    fact_equals,
    is_fact_value,
    validate_fact,
)
from .world_state import WorldState

__all__ = [
    "WorldState", "FactValue", "FactSource",
    "fact_key", "parse_fact_key", "fact_equals", "is_fact_value", "validate_fact",
]
