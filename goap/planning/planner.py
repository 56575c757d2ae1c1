"""
Planer GOAP - wyszukiwanie A* w przestrzeni stanów świata.

A* znajduje sekwencję akcji o minimalnym koszcie, która przekształca
stan startowy w stan spełniający cel.

Jak działa A* (wersja dla stanów świata):
    1. Open list (kopiec) z węzłem startowym, g = 0
    2. Dla każdego węzła:
       - g: łączny koszt akcji od startu
       - h: heurystyka (dopuszczalna - nie przeszacowuje)
       - f: g + h
    3. Zdejmij węzeł z najniższym f
       - stan spełnia cel -> odtwórz ścieżkę po rodzicach (odwróconą)
       - inaczej: ugruntuj szablony w tym stanie, dla każdej wykonalnej
         akcji policz następnika i g' = g + koszt akcji
    4. Następnik trafia na open list tylko wtedy, gdy jego kanoniczny
       stan nie ma już zapisanego kosztu <= g' (closed set + best_g).
       Przy limicie max_depth stan pamięta wszystkie niezdominowane pary
       (g, głębokość): droższa, ale płytsza ścieżka nadal może zmieścić
       się w budżecie.
    5. Pusta open list / przekroczony budżet -> porażka
       (miękki cel: najlepszy częściowy plan)

Cykle (akcja A cofa efekt akcji B) są obsługiwane wyłącznie przez
kanoniczny klucz stanu i closed set.

Tie-break przy równym f (deterministyczny):
    1. niższe g
    2. mniej akcji w ścieżce
    3. kolejność rejestracji ostatniej akcji (indeks szablonu, indeks wiązania)
    4. kolejność wstawienia na open list

Budżet:
    max_expansions - limit rozwinięć węzłów
    max_depth      - maksymalna długość planu
    Przekroczenie budżetu to NORMALNY wynik (BUDGET_EXCEEDED), nie wyjątek.

Anulowanie:
    ``should_cancel()`` sprawdzane między rozwinięciami. Wyszukiwanie nie
    dotyka niczego poza własnymi strukturami, więc porzucona praca nie
    wymaga sprzątania.

Przykład użycia:
    >>> registry = ActionRegistry([move_to()])
    >>> ctx = GroundingContext(agent_id="u", domains={"positions": [A, B]})
    >>> result = Planner(registry).plan(start, Goal({"at(u)": B}), ctx)
    >>> result.plan.names()
    ['MoveTo((3, 0))']
"""

from __future__ import annotations
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple
import heapq

from ..actions.grounding import GroundingContext
from ..actions.instance import ActionInstance
from ..actions.registry import ActionRegistry
from ..events.event_logger import EventLogger
from ..goals.goal import Goal
from ..world.world_state import CanonicalKey, WorldState
from .heuristics import Heuristic, default_heuristic
from .plan import Plan, PlanningResult, PlanStatus, SearchStats


# Precyzja porównań f/g - sumy floatów nie mogą psuć tie-breaku
_PRECISION = 9

_ROOT_ORDER: Tuple[int, int] = (-1, -1)

Successors = Callable[[WorldState], Iterable[ActionInstance]]

# (g, głębokość) dotarcia do stanu
Label = Tuple[float, int]


def _label(g: float, depth: int, depth_capped: bool) -> Label:
    """Etykieta węzła; głębokość liczy się tylko przy limicie max_depth."""
    return (round(g, _PRECISION), depth if depth_capped else 0)


@dataclass(frozen=True)
class SearchBudget:
    """
    Limity wyszukiwania.

    Attributes:
        max_expansions: Limit rozwinięć (None = bez limitu)
        max_depth: Maksymalna liczba akcji w planie (None = bez limitu)
    """
    max_expansions: Optional[int] = 5000
    max_depth: Optional[int] = 12

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> SearchBudget:
        """Buduje budżet z sekcji ``planner`` konfiguracji."""
        return cls(
            max_expansions=config.get("max_expansions", cls.max_expansions),
            max_depth=config.get("max_depth", cls.max_depth),
        )

    @classmethod
    def unlimited(cls) -> SearchBudget:
        return cls(max_expansions=None, max_depth=None)

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {"max_expansions": self.max_expansions, "max_depth": self.max_depth}


@dataclass
class _PlanNode:
    """
    Węzeł A* - istnieje tylko wewnątrz jednego wyszukiwania.

    Attributes:
        state: Stan świata w tym węźle
        action: Akcja, która go wytworzyła (None dla korzenia)
        g: Koszt od startu
        h: Heurystyka
        depth: Liczba akcji od startu
        parent: Poprzedni węzeł (do odtworzenia ścieżki)
    """
    state: WorldState
    action: Optional[ActionInstance]
    g: float
    h: float
    depth: int
    parent: Optional["_PlanNode"] = field(default=None, repr=False)

    @property
    def f(self) -> float:
        return self.g + self.h


def _reconstruct(node: _PlanNode) -> List[ActionInstance]:
    """Odtwarza akcje od korzenia do węzła."""
    actions: List[ActionInstance] = []
    current: Optional[_PlanNode] = node
    while current is not None and current.action is not None:
        actions.append(current.action)
        current = current.parent
    actions.reverse()
    return actions


class Planner:
    """
    Planer A* nad rejestrem szablonów.

    Planer jest bezstanowy między wywołaniami - równoległe wywołania
    (np. jedno na agenta) nie wymagają synchronizacji.

    Attributes:
        registry (ActionRegistry): Szablony akcji (współdzielone, niemutowalne)
        heuristic (Heuristic): h(stan, cel)
        budget (SearchBudget): Domyślny budżet
        logger (Optional[EventLogger]): Opcjonalny logger zdarzeń
        trace_expansions (bool): Loguj każde rozwinięcie (NODE_EXPANDED)
    """

    def __init__(
        self,
        registry: ActionRegistry,
        heuristic: Optional[Heuristic] = None,
        budget: Optional[SearchBudget] = None,
        logger: Optional[EventLogger] = None,
        trace_expansions: bool = False,
    ):
        self.registry = registry
        self.heuristic = heuristic or default_heuristic(registry)
        self.budget = budget or SearchBudget()
        self.logger = logger
        self.trace_expansions = trace_expansions

    @classmethod
    def from_config(
        cls,
        registry: ActionRegistry,
        config: Dict[str, Any],
        heuristic: Optional[Heuristic] = None,
        logger: Optional[EventLogger] = None,
    ) -> Planner:
        """Tworzy planer z sekcji ``planner`` (patrz ConfigLoader)."""
        return cls(
            registry,
            heuristic=heuristic,
            budget=SearchBudget.from_config(config),
            logger=logger,
            trace_expansions=bool(config.get("trace_expansions", False)),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # API
    # ─────────────────────────────────────────────────────────────────────────

    def plan(
        self,
        start: WorldState,
        goal: Goal,
        context: Optional[GroundingContext] = None,
        budget: Optional[SearchBudget] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
        tick: int = 0,
    ) -> PlanningResult:
        """
        Szuka planu o minimalnym koszcie dla celu.

        Args:
            start: Snapshot świata (niemutowalny przez całe wyszukiwanie)
            goal: Cel do osiągnięcia
            context: Kontekst agenta (domeny parametrów)
            budget: Limity (domyślnie budżet planera)
            should_cancel: Flaga anulowania sprawdzana między rozwinięciami
            tick: Tura gry - tylko do logów

        Returns:
            PlanningResult: Plan albo porażka jako wartość

        Raises:
            InvalidGrounding, NegativeCost: Defekty szablonów (fatalne)
        """
        context = context or GroundingContext()

        def successors(state: WorldState) -> List[ActionInstance]:
            return self.registry.ground(state, context, applicable_only=True)

        return self._search(start, goal, successors, budget, should_cancel, tick, context.agent_id)

    def plan_instances(
        self,
        start: WorldState,
        goal: Goal,
        instances: Sequence[ActionInstance],
        budget: Optional[SearchBudget] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
        tick: int = 0,
        agent_id: Optional[str] = None,
    ) -> PlanningResult:
        """
        Wyszukiwanie nad gotową listą instancji (bez groundingu per stan).

        Instancje muszą mieć stałe warunki/efekty - przydatne, gdy kod gry
        sam buduje listę akcji na turę.
        """
        def successors(state: WorldState) -> List[ActionInstance]:
            return [action for action in instances if action.is_applicable(state)]

        return self._search(start, goal, successors, budget, should_cancel, tick, agent_id)

    # ─────────────────────────────────────────────────────────────────────────
    # A*
    # ─────────────────────────────────────────────────────────────────────────

    def _search(
        self,
        start: WorldState,
        goal: Goal,
        successors: Successors,
        budget: Optional[SearchBudget],
        should_cancel: Optional[Callable[[], bool]],
        tick: int,
        agent_id: Optional[str],
    ) -> PlanningResult:
        budget = budget or self.budget
        stats = SearchStats(generated=1)

        if self.logger:
            self.logger.log_plan_requested(tick, agent_id, goal.to_dict(), budget.to_dict(), len(start))

        # Przypadek trywialny - cel już spełniony
        if goal.is_satisfied(start):
            result = PlanningResult(PlanStatus.FOUND, goal, Plan.empty(start, goal), stats)
            return self._finish(result, tick, agent_id)

        root = _PlanNode(state=start, action=None, g=0.0, h=self.heuristic(start, goal), depth=0)

        # Struktury A*
        sequence = count()
        open_set: List[Tuple[float, float, int, Tuple[int, int], int, _PlanNode]] = []
        # Etykiety (g, głębokość) niezdominowane dla każdego stanu. Bez limitu
        # głębokości składowa głębokości to zawsze 0, więc zostaje samo best_g.
        depth_capped = budget.max_depth is not None
        labels: Dict[CanonicalKey, List[Label]] = {start.canonical_key(): [(0.0, 0)]}
        closed_set: Set[Tuple[CanonicalKey, Label]] = set()
        heapq.heappush(open_set, self._entry(root, _ROOT_ORDER, next(sequence)))

        best_partial = root
        best_rank = self._partial_rank(root, goal)
        budget_hit = False

        while open_set:
            if should_cancel is not None and should_cancel():
                return self._finish(PlanningResult(PlanStatus.CANCELLED, goal, None, stats), tick, agent_id)

            current = heapq.heappop(open_set)[-1]
            key = current.state.canonical_key()
            label = _label(current.g, current.depth, depth_capped)

            # Już przetworzony albo nieaktualny wpis (znaleziono lepszą drogę)
            if (key, label) in closed_set or label not in labels.get(key, ()):
                continue

            # Cel osiągnięty?
            if goal.is_satisfied(current.state):
                plan = self._make_plan(current, start, goal, partial=False)
                return self._finish(PlanningResult(PlanStatus.FOUND, goal, plan, stats), tick, agent_id)

            if goal.soft:
                rank = self._partial_rank(current, goal)
                if rank < best_rank:
                    best_partial, best_rank = current, rank

            if budget.max_expansions is not None and stats.expansions >= budget.max_expansions:
                budget_hit = True
                break

            # Oznacz jako przetworzony
            closed_set.add((key, label))
            stats.expansions += 1
            if self.logger and self.trace_expansions:
                self.logger.log_expansion(
                    tick, agent_id, current.g, current.h, current.depth, current.state.canonical_hash()
                )

            if budget.max_depth is not None and current.depth >= budget.max_depth:
                stats.depth_pruned += 1
                continue

            # Eksploruj następników
            for action in successors(current.state):
                child_state = action.apply(current.state)
                child_key = child_state.canonical_key()
                tentative_g = current.g + action.cost
                child_label = _label(tentative_g, current.depth + 1, depth_capped)

                front = labels.setdefault(child_key, [])
                if any(g <= child_label[0] and d <= child_label[1] for g, d in front):
                    continue
                front[:] = [(g, d) for g, d in front if not (child_label[0] <= g and child_label[1] <= d)]
                front.append(child_label)

                child = _PlanNode(
                    state=child_state,
                    action=action,
                    g=tentative_g,
                    h=self.heuristic(child_state, goal),
                    depth=current.depth + 1,
                    parent=current,
                )
                stats.generated += 1
                stats.max_depth = max(stats.max_depth, child.depth)
                heapq.heappush(open_set, self._entry(child, action.order, next(sequence)))

        # Brak planu
        status = PlanStatus.BUDGET_EXCEEDED if (budget_hit or stats.depth_pruned) else PlanStatus.NO_PLAN_FOUND
        if goal.soft:
            plan = self._make_plan(best_partial, start, goal, partial=True)
            return self._finish(PlanningResult(PlanStatus.PARTIAL, goal, plan, stats), tick, agent_id)
        return self._finish(PlanningResult(status, goal, None, stats), tick, agent_id)

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _entry(node: _PlanNode, order: Tuple[int, int], seq: int):
        """Wpis kopca: (f, g, głębokość, kolejność akcji, kolejność wstawienia, węzeł)."""
        return (round(node.f, _PRECISION), round(node.g, _PRECISION), node.depth, order, seq, node)

    @staticmethod
    def _partial_rank(node: _PlanNode, goal: Goal) -> Tuple[float, float, int]:
        """Ranking częściowych planów: ważone niespełnione warunki, potem g, potem długość."""
        return (goal.unsatisfied_weight(node.state), round(node.g, _PRECISION), node.depth)

    @staticmethod
    def _make_plan(node: _PlanNode, start: WorldState, goal: Goal, partial: bool) -> Plan:
        return Plan(
            actions=tuple(_reconstruct(node)),
            cost=node.g,
            goal=goal,
            start_state=start,
            final_state=node.state,
            partial=partial,
        )

    def _finish(self, result: PlanningResult, tick: int, agent_id: Optional[str]) -> PlanningResult:
        if self.logger:
            self.logger.log_plan_result(tick, agent_id, result)
        return result


def plan(
    start: WorldState,
    goal: Goal,
    registry: ActionRegistry,
    context: Optional[GroundingContext] = None,
    budget: Optional[SearchBudget] = None,
    heuristic: Optional[Heuristic] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> PlanningResult:
    """
    Skrót: jednorazowe planowanie bez tworzenia Planner.

    Example:
        >>> result = plan(start, goal, registry, ctx)
        >>> if result.found:
        ...     executor.start(result.plan)
    """
    return Planner(registry, heuristic=heuristic, budget=budget).plan(
        start, goal, context, should_cancel=should_cancel
    )
