"""
Koordynacja drużyny - wielu agentów planuje na tym samym świecie.

Dwie niezależne warstwy:

plan_for_team:
    Planowanie sekwencyjne. Agenci planują po kolei (agent_order),
    a efekty planu każdego agenta są nakładane na wspólny stan przed
    planowaniem następnego - kolejni agenci "widzą" zamiary poprzednich
    (np. przedmiot już podniesiony).

TeamCoordinator:
    Minimalny protokół rezerwacji dla planów powstałych RÓWNOLEGLE.
    Każdy plan zgłasza zasoby na wyłączność (claims instancji, np.
    "item:sword"). Konflikty rozstrzyga priorytet podany przez
    wywołującego - przegrany plan jest unieważniany, a jego egzekutor
    przechodzi do NEEDS_REPLAN.

ROZSTRZYGANIE (resolve):
═══════════════════════════════════════════════════════════════════

    1. Sortuj agentów po (priority(agent), agent_id) - najniższy pierwszy
    2. Agent dostaje WSZYSTKIE swoje zasoby albo żadnego:
       - wszystkie wolne -> rezerwacje przyznane
       - choć jeden zajęty przez lepszego agenta -> plan unieważniony,
         rezerwacje zwolnione dla kolejnych agentów
    3. Agent bez zasobów zawsze przechodzi

Ta warstwa nie zmienia semantyki planowania pojedynczego agenta.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..actions.grounding import GroundingContext
from ..actions.registry import ActionRegistry
from ..events.event_logger import EventLogger, EventType
from ..execution.executor import PlanExecutor
from ..goals.goal import Goal
from ..planning.heuristics import Heuristic
from ..planning.plan import Plan, PlanningResult
from ..planning.planner import Planner, SearchBudget
from ..world.world_state import WorldState


PriorityFn = Callable[[str], Any]


@dataclass
class Reservation:
    """
    Rezerwacja zasobów jednego agenta.

    Attributes:
        agent_id: Agent zgłaszający plan
        plan: Zgłoszony plan
        resources: Zasoby na wyłączność (claims planu)
        executor: Opcjonalny egzekutor do unieważnienia po przegranej
        granted: Czy rezerwacje zostały przyznane
    """
    agent_id: str
    plan: Plan
    resources: Tuple[str, ...]
    executor: Optional[PlanExecutor] = None
    granted: bool = False


@dataclass
class TeamAllocation:
    """Wynik rozstrzygnięcia rezerwacji."""
    accepted: Tuple[str, ...] = ()
    invalidated: Tuple[str, ...] = ()
    holders: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": list(self.accepted),
            "invalidated": list(self.invalidated),
            "holders": dict(self.holders),
        }


class TeamCoordinator:
    """
    Rezerwacje zasobów dla planów wielu agentów.

    Attributes:
        priority: agent_id -> klucz sortowania (niższy = ważniejszy);
            domyślnie wszyscy równi, więc decyduje agent_id
        logger: Opcjonalny logger zdarzeń
        reservations (Dict[str, Reservation]): Zgłoszenia per agent
    """

    def __init__(self, priority: Optional[PriorityFn] = None, logger: Optional[EventLogger] = None):
        self.priority = priority or (lambda agent_id: 0)
        self.logger = logger
        self.reservations: Dict[str, Reservation] = {}
        self._holders: Dict[str, str] = {}
        self.tick: int = 0

    def propose(self, agent_id: str, plan: Plan, executor: Optional[PlanExecutor] = None) -> Reservation:
        """
        Zgłasza wstępną rezerwację zasobów planu.

        Nowe zgłoszenie tego samego agenta zastępuje poprzednie.
        """
        self.release(agent_id)
        reservation = Reservation(agent_id, plan, plan.claims(), executor)
        self.reservations[agent_id] = reservation
        return reservation

    def resolve(self, tick: Optional[int] = None) -> TeamAllocation:
        """
        Rozstrzyga konflikty wszystkich zgłoszonych planów.

        Returns:
            TeamAllocation: Kto przeszedł, kto przegrał i kto trzyma zasoby
        """
        if tick is not None:
            self.tick = tick

        ordered = sorted(self.reservations.values(), key=lambda r: (self.priority(r.agent_id), r.agent_id))
        holders: Dict[str, str] = {}
        accepted: List[str] = []
        losers: List[Tuple[Reservation, str]] = []

        for reservation in ordered:
            taken = [res for res in reservation.resources if res in holders]
            if taken:
                losers.append((reservation, taken[0]))
                continue
            for resource in reservation.resources:
                holders[resource] = reservation.agent_id
            accepted.append(reservation.agent_id)

        for reservation in ordered:
            if reservation.agent_id not in accepted:
                continue
            newly_granted = not reservation.granted
            reservation.granted = True
            if newly_granted and self.logger:
                for resource in reservation.resources:
                    self.logger.log_reservation(
                        self.tick, EventType.RESERVATION_GRANTED, reservation.agent_id, resource,
                    )

        for reservation, resource in losers:
            del self.reservations[reservation.agent_id]
            winner = holders[resource]
            if self.logger:
                self.logger.log_reservation(
                    self.tick, EventType.RESERVATION_REVOKED, reservation.agent_id, resource, winner=winner,
                )
            if reservation.executor is not None:
                reservation.executor.invalidate(f"resource '{resource}' reserved by {winner}")

        self._holders = holders
        return TeamAllocation(
            accepted=tuple(accepted),
            invalidated=tuple(r.agent_id for r, _ in losers),
            holders=dict(holders),
        )

    def release(self, agent_id: str) -> None:
        """Zwalnia wszystkie rezerwacje agenta (plan wykonany lub porzucony)."""
        self.reservations.pop(agent_id, None)
        self._holders = {res: holder for res, holder in self._holders.items() if holder != agent_id}

    def holder(self, resource: str) -> Optional[str]:
        """Agent trzymający zasób po ostatnim resolve() (None = wolny)."""
        return self._holders.get(resource)

    def clear(self) -> None:
        self.reservations.clear()
        self._holders.clear()

    def __len__(self) -> int:
        return len(self.reservations)


# ─────────────────────────────────────────────────────────────────────────────
# PLANOWANIE SEKWENCYJNE
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class TeamPlan:
    """
    Wynik planowania drużyny.

    Attributes:
        results: agent_id -> wynik ostatniej próby (None = agent bez celów)
        plans: agent_id -> plan (tylko agenci z planem)
        final_state: Wspólny stan po nałożeniu wszystkich planów
    """
    results: Dict[str, Optional[PlanningResult]]
    plans: Dict[str, Plan]
    final_state: WorldState

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": {
                agent: result.to_dict() if result is not None else None
                for agent, result in self.results.items()
            },
            "final_state": self.final_state.to_json_dict(),
        }


def plan_for_team(
    start: WorldState,
    registry: ActionRegistry,
    goals_per_agent: Mapping[str, Sequence[Goal]],
    agent_order: Sequence[str],
    contexts: Optional[Mapping[str, GroundingContext]] = None,
    budget: Optional[SearchBudget] = None,
    heuristic: Optional[Heuristic] = None,
    logger: Optional[EventLogger] = None,
) -> TeamPlan:
    """
    Planuje agentów po kolei na wspólnym stanie.

    Dla każdego agenta próbuje jego celów w podanej kolejności i bierze
    pierwszy, dla którego powstał plan.

    Args:
        start: Snapshot świata
        registry: Szablony akcji (wspólne dla drużyny)
        goals_per_agent: agent_id -> cele w kolejności preferencji
        agent_order: Kolejność planowania
        contexts: agent_id -> kontekst groundingu (domyślnie tylko agent_id)
        budget: Budżet na JEDNO wyszukiwanie
    """
    planner = Planner(registry, heuristic=heuristic, budget=budget, logger=logger)
    contexts = contexts or {}

    state = start
    results: Dict[str, Optional[PlanningResult]] = {}
    plans: Dict[str, Plan] = {}

    for agent_id in agent_order:
        goals = goals_per_agent.get(agent_id, ())
        results[agent_id] = None
        context = contexts.get(agent_id) or GroundingContext(agent_id=agent_id)

        for goal in goals:
            result = planner.plan(state, goal, context)
            results[agent_id] = result
            if result.ok and result.plan is not None:
                plans[agent_id] = result.plan
                state = result.plan.final_state
                break

    return TeamPlan(results=results, plans=plans, final_state=state)
