"""
Cel planowania - koniunkcja warunków na faktach.

Warunek to para (klucz, oczekiwana wartość). Nie ma negacji - brak/obecność
czy niezgodność enuma wyrażamy osobnymi wartościami faktu.

TWARDE I MIĘKKIE CELE:
═══════════════════════════════════════════════════════════════════

    Twardy cel (soft=False)
    ─────────────────────────────────────────────────────────────
    Spełniony wtedy i tylko wtedy, gdy WSZYSTKIE warunki są spełnione.
    Gdy planer nie znajdzie takiego stanu - zwraca porażkę.

    Miękki cel (soft=True)
    ─────────────────────────────────────────────────────────────
    Gdy pełne dopasowanie nie istnieje (w budżecie), planer zwraca
    najlepszy znaleziony stan: najmniejsza ważona liczba niespełnionych
    warunków, potem najniższy koszt.

Wagi (opcjonalne) wpływają tylko na ranking częściowych planów
miękkiego celu. Domyślna waga warunku = 1.0.

Przykład:
    >>> goal = Goal({"at(u)": "B"}, name="reach_b")
    >>> goal.is_satisfied(WorldState({"at(u)": "A"}))
    False
"""

from __future__ import annotations
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from ..world.facts import FactValue, fact_equals, validate_fact, value_to_json
from ..world.world_state import WorldState


Condition = Tuple[str, FactValue]


class Goal:
    """
    Zbiór docelowych warunków na faktach.

    Attributes:
        name (str): Nazwa celu (do logów)
        conditions (Tuple[Condition, ...]): Warunki w kolejności podania
        weights (Dict[str, float]): Waga per klucz warunku
        soft (bool): Czy dopuszczalne jest częściowe spełnienie
    """

    __slots__ = ("name", "conditions", "weights", "soft")

    def __init__(
        self,
        conditions: Union[Mapping[str, FactValue], Iterable[Condition]],
        name: str = "",
        weights: Optional[Mapping[str, float]] = None,
        soft: bool = False,
    ):
        """
        Raises:
            TypeError: Jeśli warunek ma niedozwolony typ wartości
            ValueError: Jeśli klucz się powtarza albo waga jest <= 0
        """
        items = conditions.items() if isinstance(conditions, Mapping) else conditions
        seen = set()
        ordered = []
        for key, value in items:
            validate_fact(key, value)
            if key in seen:
                raise ValueError(f"Goal condition '{key}' given twice")
            seen.add(key)
            ordered.append((key, value))

        weights = dict(weights or {})
        for key, weight in weights.items():
            if key not in seen:
                raise ValueError(f"Weight given for unknown condition '{key}'")
            if weight <= 0:
                raise ValueError(f"Weight of '{key}' must be positive, got {weight}")

        self.name = name or ",".join(key for key, _ in ordered) or "empty"
        self.conditions: Tuple[Condition, ...] = tuple(ordered)
        self.weights: Dict[str, float] = weights
        self.soft = soft

    @classmethod
    def single(cls, key: str, value: FactValue, name: str = "") -> Goal:
        """Cel z jednym warunkiem."""
        return cls([(key, value)], name=name)

    # ─────────────────────────────────────────────────────────────────────────
    # SPRAWDZANIE
    # ─────────────────────────────────────────────────────────────────────────

    def is_satisfied(self, state: WorldState) -> bool:
        """Czy wszystkie warunki są spełnione."""
        return all(state.matches(key, value) for key, value in self.conditions)

    def unsatisfied_conditions(self, state: WorldState) -> FrozenSet[Condition]:
        """Zbiór warunków niespełnionych w danym stanie."""
        return frozenset(
            (key, value) for key, value in self.conditions
            if not state.matches(key, value)
        )

    def unsatisfied_count(self, state: WorldState) -> int:
        return sum(1 for key, value in self.conditions if not state.matches(key, value))

    def unsatisfied_weight(self, state: WorldState) -> float:
        """Ważona suma niespełnionych warunków (ranking miękkich celów)."""
        return sum(
            self.weights.get(key, 1.0)
            for key, value in self.conditions
            if not state.matches(key, value)
        )

    def expects(self, key: str) -> Any:
        """Oczekiwana wartość dla klucza (None gdy cel go nie dotyczy)."""
        for cond_key, value in self.conditions:
            if cond_key == key:
                return value
        return None

    def as_soft(self) -> Goal:
        """Kopia celu oznaczona jako miękka."""
        return Goal(self.conditions, name=self.name, weights=self.weights, soft=True)

    # ─────────────────────────────────────────────────────────────────────────
    # REPREZENTACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "soft": self.soft,
            "conditions": {key: value_to_json(value) for key, value in self.conditions},
            "weights": dict(self.weights),
        }

    def __len__(self) -> int:
        return len(self.conditions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Goal):
            return NotImplemented
        return (
            len(self.conditions) == len(other.conditions)
            and all(
                k1 == k2 and fact_equals(v1, v2)
                for (k1, v1), (k2, v2) in zip(self.conditions, other.conditions)
            )
            and self.weights == other.weights
            and self.soft == other.soft
        )

    def __hash__(self) -> int:
        return hash((self.conditions, self.soft))

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self.conditions)
        soft = ", soft" if self.soft else ""
        return f"Goal({self.name}: {inner}{soft})"
