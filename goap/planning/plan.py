"""
Wynik planowania: Plan i PlanningResult.

Plan to uporządkowana sekwencja ActionInstance + łączny koszt. Po zwróceniu
należy do jednego egzekutora i jest niemutowalny.

PlanningResult opakowuje plan razem ze statusem - porażki wyszukiwania
(brak planu, przekroczony budżet, anulowanie) są zwykłymi wartościami,
a nie wyjątkami. Kto woli wyjątki, woła ``unwrap()``.

STATUSY:
═══════════════════════════════════════════════════════════════════

    FOUND            plan spełnia cel
    PARTIAL          miękki cel: najlepszy częściowy plan
    NO_PLAN_FOUND    przestrzeń stanów wyczerpana
    BUDGET_EXCEEDED  limit rozwinięć/głębokości przerwał wyszukiwanie
    CANCELLED        wywołujący anulował wyszukiwanie
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..errors import BudgetExceeded, NoPlanFound, PlanningCancelled
from ..goals.goal import Goal
from ..actions.instance import ActionInstance
from ..world.world_state import WorldState


class PlanStatus(Enum):
    """Status wyniku planowania."""

    FOUND = auto()
    PARTIAL = auto()
    NO_PLAN_FOUND = auto()
    BUDGET_EXCEEDED = auto()
    CANCELLED = auto()

    def has_plan(self) -> bool:
        return self in (PlanStatus.FOUND, PlanStatus.PARTIAL)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Plan:
    """
    Uporządkowana sekwencja akcji.

    Attributes:
        actions: Akcje w kolejności wykonania
        cost: Łączny koszt (suma kosztów akcji)
        goal: Cel, dla którego plan powstał
        start_state: Stan początkowy wyszukiwania
        final_state: Stan po nałożeniu wszystkich efektów
        partial: True gdy plan tylko przybliża miękki cel
    """
    actions: Tuple[ActionInstance, ...]
    cost: float
    goal: Optional[Goal] = None
    start_state: Optional[WorldState] = field(default=None, compare=False)
    final_state: Optional[WorldState] = field(default=None, compare=False)
    partial: bool = False

    @classmethod
    def empty(cls, start: WorldState, goal: Optional[Goal] = None) -> Plan:
        """Pusty plan o koszcie 0 (cel już spełniony)."""
        return cls(actions=(), cost=0.0, goal=goal, start_state=start, final_state=start)

    def replay(self, start: Optional[WorldState] = None) -> WorldState:
        """
        Nakłada efekty kolejnych akcji na stan startowy.

        Dla stanu startowego wyszukiwania daje dokładnie ``final_state``.

        Raises:
            ValueError: Jeśli nie podano stanu, a plan go nie zna
        """
        state = start if start is not None else self.start_state
        if state is None:
            raise ValueError("Plan has no start state to replay from")
        for action in self.actions:
            state = action.apply(state)
        return state

    def is_valid_from(self, start: WorldState) -> bool:
        """Czy każda akcja jest wykonalna po kolei od stanu ``start``."""
        state = start
        for action in self.actions:
            if not action.is_applicable(state):
                return False
            state = action.apply(state)
        return True

    def names(self) -> List[str]:
        return [action.name for action in self.actions]

    def claims(self) -> Tuple[str, ...]:
        """Zasoby na wyłączność zajmowane przez plan (bez powtórzeń, w kolejności)."""
        seen: List[str] = []
        for action in self.actions:
            for claim in action.claims:
                if claim not in seen:
                    seen.append(claim)
        return tuple(seen)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actions": [action.to_dict() for action in self.actions],
            "cost": self.cost,
            "partial": self.partial,
            "goal": self.goal.to_dict() if self.goal is not None else None,
        }

    def __len__(self) -> int:
        return len(self.actions)

    def __iter__(self) -> Iterator[ActionInstance]:
        return iter(self.actions)

    def __getitem__(self, index: int) -> ActionInstance:
        return self.actions[index]

    def __repr__(self) -> str:
        flag = ", partial" if self.partial else ""
        return f"Plan({' -> '.join(self.names()) or '<empty>'}, cost={self.cost}{flag})"


@dataclass
class SearchStats:
    """Statystyki jednego wyszukiwania."""
    expansions: int = 0
    generated: int = 0
    max_depth: int = 0
    depth_pruned: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "expansions": self.expansions,
            "generated": self.generated,
            "max_depth": self.max_depth,
            "depth_pruned": self.depth_pruned,
        }


@dataclass
class PlanningResult:
    """
    Wynik wywołania planera.

    Attributes:
        status: Status wyszukiwania
        goal: Cel planowania
        plan: Plan (FOUND/PARTIAL) albo None
        stats: Statystyki wyszukiwania
    """
    status: PlanStatus
    goal: Goal
    plan: Optional[Plan] = None
    stats: SearchStats = field(default_factory=SearchStats)

    @property
    def ok(self) -> bool:
        """Czy jest plan (pełny lub częściowy)."""
        return self.status.has_plan()

    @property
    def found(self) -> bool:
        """Czy plan w pełni spełnia cel."""
        return self.status == PlanStatus.FOUND

    def unwrap(self) -> Plan:
        """
        Zwraca plan albo rzuca odpowiedni wyjątek.

        Raises:
            NoPlanFound, BudgetExceeded, PlanningCancelled
        """
        if self.plan is not None and self.ok:
            return self.plan
        message = f"Goal '{self.goal.name}': {self.status.name} after {self.stats.expansions} expansions"
        if self.status == PlanStatus.BUDGET_EXCEEDED:
            raise BudgetExceeded(message, self)
        if self.status == PlanStatus.CANCELLED:
            raise PlanningCancelled(message, self)
        raise NoPlanFound(message, self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.name,
            "goal": self.goal.to_dict(),
            "plan": self.plan.to_dict() if self.plan is not None else None,
            "stats": self.stats.to_dict(),
        }
