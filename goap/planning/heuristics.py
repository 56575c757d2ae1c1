"""
Heurystyki dla planera A*.

Heurystyka h(stan, cel) szacuje pozostały koszt. Aby A* zwracał plan
o minimalnym koszcie, h musi być DOPUSZCZALNA - nigdy nie przeszacowywać.

Domyślna heurystyka:
    h = min_koszt_akcji * ceil(niespełnione_warunki / max_efektów_akcji)

    Liczba niespełnionych warunków to minimum z opisu planera. Skalowanie
    przez najniższy koszt bazowy i podział przez szerokość efektów
    utrzymują dopuszczalność: jedna akcja kosztuje co najmniej
    ``min_koszt_akcji`` i naprawia co najwyżej ``max_efektów_akcji``
    warunków. Dla kosztów jednostkowych i akcji z jednym efektem daje to
    dokładnie liczbę niespełnionych warunków.

Heurystyki dziedzinowe (np. odległość do celu ruchu) podaje wywołujący;
``max_of`` łączy kilka dopuszczalnych heurystyk w jedną dopuszczalną.
"""

from __future__ import annotations
from math import ceil
from typing import Callable, Optional

from ..core.hex_coord import HexCoord
from ..goals.goal import Goal
from ..world.world_state import WorldState
from ..actions.registry import ActionRegistry


Heuristic = Callable[[WorldState, Goal], float]


def zero_heuristic(state: WorldState, goal: Goal) -> float:
    """h = 0 - A* degeneruje do Dijkstry."""
    return 0.0


class UnsatisfiedCountHeuristic:
    """
    Liczba niespełnionych warunków, skalowana do dopuszczalności.

    Attributes:
        unit_cost: Dolne ograniczenie kosztu jednej akcji
        width: Górne ograniczenie liczby warunków naprawianych przez akcję
    """

    def __init__(self, unit_cost: float = 1.0, width: int = 1):
        if unit_cost < 0:
            raise ValueError(f"unit_cost must be >= 0, got {unit_cost}")
        self.unit_cost = unit_cost
        self.width = max(1, width)

    @classmethod
    def for_registry(cls, registry: ActionRegistry) -> UnsatisfiedCountHeuristic:
        return cls(unit_cost=registry.min_base_cost, width=registry.max_effect_width)

    def __call__(self, state: WorldState, goal: Goal) -> float:
        if self.unit_cost == 0:
            return 0.0
        missing = goal.unsatisfied_count(state)
        return self.unit_cost * ceil(missing / self.width)

    def __repr__(self) -> str:
        return f"UnsatisfiedCountHeuristic(unit_cost={self.unit_cost}, width={self.width})"


def position_distance_heuristic(position_key: str, step_cost: float = 1.0) -> Heuristic:
    """
    Odległość hex do pozycji wymaganej przez cel.

    Dopuszczalna, gdy każdy hex ruchu kosztuje co najmniej ``step_cost``
    (tak liczy ``move_to`` z domyślną funkcją odległości).
    """
    def heuristic(state: WorldState, goal: Goal) -> float:
        target = goal.expects(position_key)
        current = state.get(position_key)
        if isinstance(target, HexCoord) and isinstance(current, HexCoord):
            return step_cost * current.distance(target)
        return 0.0
    return heuristic


def max_of(*heuristics: Heuristic) -> Heuristic:
    """Maksimum dopuszczalnych heurystyk - nadal dopuszczalne."""
    def heuristic(state: WorldState, goal: Goal) -> float:
        return max((h(state, goal) for h in heuristics), default=0.0)
    return heuristic


def default_heuristic(registry: Optional[ActionRegistry]) -> Heuristic:
    if registry is None:
        return zero_heuristic
    return UnsatisfiedCountHeuristic.for_registry(registry)
