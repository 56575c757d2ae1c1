"""
Fakty - jedyne słownictwo, które rozumie planer.

Fakt to para (klucz, wartość):
    - klucz: atom z przestrzenią nazw, np. ``at(unit_7)``, ``alive(orc_2)``
    - wartość: mały typ dyskryminowany

DOZWOLONE WARTOŚCI:
═══════════════════════════════════════════════════════════════════

    bool       - flagi (alive, item_available, in_combat)
    int        - liczniki i punkty (health, nearby_enemies)
    str        - identyfikatory nieprzezroczyste (holding = "sword_1")
    Enum       - wartości wyliczeniowe treści gry
    HexCoord   - pozycje na siatce

Wszystko inne (float, listy, słowniki, None) jest odrzucane. Brak faktu
wyraża się brakiem klucza - ``WorldState.get`` zwraca wtedy None.

Uwaga na bool/int: w Pythonie ``True == 1``. Dla planera to RÓŻNE wartości,
dlatego porównania idą przez ``fact_equals``.

Przykład:
    >>> fact_key("at", "unit_7")
    'at(unit_7)'
    >>> parse_fact_key("in_range(a,b)")
    ('in_range', ('a', 'b'))
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Mapping, Protocol, Tuple, Union, runtime_checkable

from ..core.hex_coord import HexCoord


FactValue = Union[bool, int, str, Enum, HexCoord]

FACT_VALUE_TYPES = (bool, int, str, Enum, HexCoord)


def fact_key(name: str, *args: Any) -> str:
    """
    Buduje klucz faktu ``name(arg1,arg2)``.

    Bez argumentów zwraca samo ``name``.
    """
    if not args:
        return name
    return f"{name}({','.join(str(a) for a in args)})"


def parse_fact_key(key: str) -> Tuple[str, Tuple[str, ...]]:
    """
    Rozbija klucz faktu na nazwę i argumenty.

    Raises:
        ValueError: Jeśli nawiasy są niezbalansowane
    """
    if "(" not in key:
        return key, ()
    if not key.endswith(")"):
        raise ValueError(f"Malformed fact key: {key!r}")
    name, _, rest = key.partition("(")
    inner = rest[:-1]
    if not inner:
        return name, ()
    return name, tuple(part.strip() for part in inner.split(","))


def is_fact_value(value: Any) -> bool:
    """Sprawdza czy wartość jest dozwoloną wartością faktu."""
    return isinstance(value, FACT_VALUE_TYPES)


def validate_fact(key: Any, value: Any) -> None:
    """
    Waliduje parę (klucz, wartość).

    Raises:
        TypeError: Jeśli klucz nie jest str lub wartość ma zły typ
    """
    if not isinstance(key, str) or not key:
        raise TypeError(f"Fact key must be a non-empty string, got {key!r}")
    if not is_fact_value(value):
        raise TypeError(
            f"Fact '{key}' has unsupported value {value!r} "
            f"(expected bool, int, str, Enum or HexCoord)"
        )


def fact_equals(actual: Any, expected: Any) -> bool:
    """
    Porównuje wartości faktów bez mieszania bool z int.

    Example:
        >>> fact_equals(True, 1)
        False
        >>> fact_equals(3, 3)
        True
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    return actual == expected


def value_tag(value: Any) -> str:
    """Znacznik typu używany w kanonicznym kluczu stanu."""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, Enum):
        return f"enum:{type(value).__qualname__}"
    return type(value).__name__


def value_to_json(value: Any) -> Any:
    """Serializacja wartości faktu do JSON."""
    if isinstance(value, HexCoord):
        return value.to_list()
    if isinstance(value, Enum):
        return value.name
    return value


@runtime_checkable
class FactSource(Protocol):
    """
    Abstrakcyjna zdolność: "encja wystawiająca pozycje/atrybuty jako fakty".

    Planer nigdy nie zależy od konkretnych klas jednostek - kod gry
    projektuje swoje encje na fakty przez ten protokół.
    """

    def to_facts(self) -> Mapping[str, FactValue]:
        ...
