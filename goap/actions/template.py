"""
Szablon akcji - sparametryzowany schemat "co można zrobić".

Szablon NIE jest wykonywalny. Dopiero grounding (patrz grounding.py)
wiąże parametry z konkretnymi wartościami i tworzy ActionInstance.

BUDOWA SZABLONU:
═══════════════════════════════════════════════════════════════════

    id              - nazwa akcji ("MoveTo", "Attack", "Pickup")
    parameters      - uporządkowana lista parametrów; każdy ma domenę
                      wartości kandydujących podawaną przez wywołującego
    preconditions   - warunki (klucz, wartość) nad faktami i parametrami
    effects         - przypisania (klucz, wartość) nad faktami i parametrami
    base_cost       - koszt bazowy (>= 0)
    cost_fn         - dodatkowy składnik kosztu zależny od kontekstu (>= 0)
    guard           - filtr wiązań (np. "cel w zasięgu")
    claims          - zasoby na wyłączność (rezerwacje drużynowe)
    duration        - ile tur trwa akcja (0 = natychmiastowa)

Klucze faktów są wzorcami ``str.format``: ``"at({agent})"``,
``"health({enemy})"``. Nazwy w nawiasach klamrowych to parametry szablonu
albo zmienne kontekstu (zawsze: ``agent``, ``team``; plus
``GroundingContext.variables``).

WARTOŚCI WARUNKÓW I EFEKTÓW:
═══════════════════════════════════════════════════════════════════

    literał          - True, 3, "sword", HexCoord(1, 2)
    Ref("target")    - wartość związanego parametru / zmiennej kontekstu
    FactOf("at({enemy})")
                     - wartość innego faktu w stanie w chwili groundingu
    callable(bindings, state)
                     - wartość wyliczana (np. health - damage)

Gdy wartość warunku nie daje się wyznaczyć (FactOf wskazuje brakujący fakt,
callable zwraca None) - wiązanie jest odrzucane (brak instancji, nie błąd).
Gdy callable efektu zwraca None - ten efekt jest pomijany (efekt warunkowy).

Przykład:
    >>> move = ActionTemplate(
    ...     id="MoveTo",
    ...     parameters=[Parameter("target", domain="positions")],
    ...     effects=[Effect("at({agent})", Ref("target"))],
    ...     base_cost=0.0,
    ...     cost_fn=lambda b, s: s.get(f"at({b['agent']})").distance(b["target"]),
    ... )
"""

from __future__ import annotations
from dataclasses import dataclass, field
from string import Formatter
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Union, TYPE_CHECKING

from ..errors import ConfigurationError, NegativeCost

if TYPE_CHECKING:
    from ..world.world_state import WorldState


Bindings = Mapping[str, Any]
CostFn = Callable[[Bindings, "WorldState"], float]
Guard = Callable[[Bindings, "WorldState"], bool]


@dataclass(frozen=True)
class Ref:
    """Odwołanie do związanego parametru lub zmiennej kontekstu."""
    name: str


@dataclass(frozen=True)
class FactOf:
    """Wartość przepisywana z faktu ``key`` (wzorzec) w chwili groundingu."""
    key: str


ValueSpec = Union[Any, Ref, FactOf, Callable[[Bindings, "WorldState"], Any]]


@dataclass(frozen=True)
class Condition:
    """Warunek wstępny: fakt ``key`` musi mieć wartość ``value``."""
    key: str
    value: ValueSpec = True


@dataclass(frozen=True)
class Effect:
    """Efekt: po wykonaniu akcji fakt ``key`` przyjmuje wartość ``value``."""
    key: str
    value: ValueSpec = True


@dataclass(frozen=True)
class Parameter:
    """
    Parametr szablonu.

    Attributes:
        name: Nazwa używana we wzorcach kluczy ({name}) i w Ref
        domain: Nazwa domeny w GroundingContext.domains (domyślnie = name)
    """
    name: str
    domain: Optional[str] = None

    @property
    def domain_name(self) -> str:
        return self.domain or self.name


def placeholders(pattern: str) -> Tuple[str, ...]:
    """
    Nazwy pól ``{...}`` we wzorcu klucza.

    Example:
        >>> placeholders("in_range({agent},{enemy})")
        ('agent', 'enemy')
    """
    return tuple(
        field_name for _, field_name, _, _ in Formatter().parse(pattern)
        if field_name
    )


def _as_tuple(items: Optional[Iterable[Any]]) -> Tuple[Any, ...]:
    return tuple(items) if items is not None else ()


@dataclass(frozen=True)
class ActionTemplate:
    """
    Sparametryzowany schemat akcji.

    Szablony rejestruje się raz (ActionRegistry) i współdzieli między
    wszystkimi wywołaniami planera - dlatego klasa jest niemutowalna.

    Raises:
        NegativeCost: Jeśli base_cost < 0
        ConfigurationError: Jeśli nazwy parametrów się powtarzają
    """
    id: str
    parameters: Tuple[Parameter, ...] = ()
    preconditions: Tuple[Condition, ...] = ()
    effects: Tuple[Effect, ...] = ()
    base_cost: float = 1.0
    cost_fn: Optional[CostFn] = field(default=None, compare=False)
    guard: Optional[Guard] = field(default=None, compare=False)
    claims: Tuple[str, ...] = ()
    duration: int = 0

    def __post_init__(self):
        # Listy z konstruktora zamieniamy na krotki - szablon ma być niemutowalny
        for name in ("parameters", "preconditions", "effects", "claims"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

        if not self.id:
            raise ConfigurationError("Action template needs a non-empty id")
        if not self.base_cost >= 0:
            raise NegativeCost(self.id, self.base_cost)
        if self.duration < 0:
            raise ConfigurationError(f"Template '{self.id}': duration must be >= 0")

        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise ConfigurationError(f"Template '{self.id}': duplicate parameter names {names}")

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    @property
    def effect_width(self) -> int:
        """Maksymalna liczba faktów, które akcja może zmienić naraz."""
        return len(self.effects)

    def referenced_names(self) -> Tuple[str, ...]:
        """Wszystkie nazwy używane we wzorcach kluczy i Ref (bez powtórzeń)."""
        seen = []
        patterns = [c.key for c in self.preconditions] + [e.key for e in self.effects]
        patterns += list(self.claims)
        values = [c.value for c in self.preconditions] + [e.value for e in self.effects]
        for value in values:
            if isinstance(value, FactOf):
                patterns.append(value.key)
        for pattern in patterns:
            for name in placeholders(pattern):
                if name not in seen:
                    seen.append(name)
        for value in values:
            if isinstance(value, Ref) and value.name not in seen:
                seen.append(value.name)
        return tuple(seen)

    def __repr__(self) -> str:
        params = ", ".join(self.parameter_names)
        return f"ActionTemplate({self.id}({params}), base_cost={self.base_cost})"
