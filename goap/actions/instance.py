"""
ActionInstance - szablon z wszystkimi parametrami związanymi.

Instancja zawiera już konkretne warunki i efekty (pary klucz/wartość)
oraz policzony koszt dla tego wiązania. Żyje tylko w jednym wywołaniu
planera i w planie, który z niego wyszedł.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..world.facts import FactValue, value_to_json
from ..world.world_state import WorldState


@dataclass(frozen=True)
class ActionInstance:
    """
    Ugruntowana akcja.

    Attributes:
        template_id: Id szablonu źródłowego
        bindings: Wartości parametrów w kolejności z szablonu
        preconditions: Konkretne warunki (klucz, wartość)
        effects: Konkretne przypisania (klucz, wartość)
        cost: Koszt tej instancji (>= 0)
        agent: Agent, dla którego ugruntowano akcję
        claims: Zasoby na wyłączność (rezerwacje drużynowe)
        duration: Liczba tur wykonania (0 = natychmiast)
        order: (indeks szablonu w rejestrze, indeks wiązania) - tie-break
    """
    template_id: str
    bindings: Tuple[Tuple[str, Any], ...]
    preconditions: Tuple[Tuple[str, FactValue], ...]
    effects: Tuple[Tuple[str, FactValue], ...]
    cost: float
    agent: Optional[str] = None
    claims: Tuple[str, ...] = ()
    duration: int = 0
    order: Tuple[int, int] = field(default=(0, 0), compare=False)

    @property
    def name(self) -> str:
        """Czytelna nazwa, np. ``MoveTo((2, 1))`` albo ``Attack(orc_1)``."""
        args = ",".join(str(value) for _, value in self.bindings)
        return f"{self.template_id}({args})"

    def binding(self, name: str, default: Any = None) -> Any:
        for key, value in self.bindings:
            if key == name:
                return value
        return default

    # ─────────────────────────────────────────────────────────────────────────
    # STAN
    # ─────────────────────────────────────────────────────────────────────────

    def is_applicable(self, state: WorldState) -> bool:
        """Czy wszystkie warunki wstępne są spełnione w danym stanie."""
        return all(state.matches(key, value) for key, value in self.preconditions)

    def violations(self, state: WorldState) -> List[Tuple[str, FactValue, Any]]:
        """
        Niespełnione warunki jako (klucz, oczekiwana, aktualna).

        Aktualna = None gdy faktu brak.
        """
        return [
            (key, value, state.get(key))
            for key, value in self.preconditions
            if not state.matches(key, value)
        ]

    def apply(self, state: WorldState) -> WorldState:
        """Nowy snapshot z nałożonymi efektami (wszystkie naraz)."""
        return state.with_facts(self.effects)

    # ─────────────────────────────────────────────────────────────────────────
    # REPREZENTACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "template": self.template_id,
            "agent": self.agent,
            "bindings": {k: value_to_json(v) for k, v in self.bindings},
            "preconditions": {k: value_to_json(v) for k, v in self.preconditions},
            "effects": {k: value_to_json(v) for k, v in self.effects},
            "cost": self.cost,
            "duration": self.duration,
            "claims": list(self.claims),
        }

    def __repr__(self) -> str:
        return f"ActionInstance({self.name}, cost={self.cost})"
