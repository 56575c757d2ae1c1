"""
Egzekutor planu - wykonuje Plan krok po kroku na żywym świecie.

Planer pracuje na snapshocie sprzed planowania. Świat gry mógł się od tego
czasu zmienić, dlatego egzekutor PRZED każdym krokiem sprawdza warunki
wstępne akcji względem aktualnego świata podanego przez wywołującego.

PRZEBIEG KROKU:
═══════════════════════════════════════════════════════════════════

    1. Warunki wstępne kroku i sprawdzone na żywym świecie
       - niespełnione -> NEEDS_REPLAN, pozostałe kroki wstrzymane
         (nigdy nie pomijamy ani nie przestawiamy kroków)
    2. Wykonawca (kod gry) dostaje akcję do wykonania
       (ruch / atak / podniesienie) i odpowiada ActionOutcome:
       - DONE        -> krok zaliczony, przejście do i+1
       - IN_PROGRESS -> akcja trwa kilka tur, krok i zostaje
       - FAILED      -> FAILED (np. cel akcji już nie istnieje)
    3. Po ostatnim kroku -> COMPLETED

Egzekutor sam nie modyfikuje świata: StepResult.state to żywy świat
z nałożonymi efektami akcji - wywołujący (jedyny zapisujący w pętli gry)
decyduje, czy go zatwierdzić.

Przykład użycia:
    >>> executor = PlanExecutor(performer=game.perform, agent_id="u1")
    >>> executor.start(result.plan)
    >>> while True:
    ...     step = executor.step(game.snapshot())
    ...     if step.status is not StepStatus.SUCCEEDED:
    ...         break
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional, Protocol, Tuple, Union

from ..actions.instance import ActionInstance
from ..errors import ExecutorError
from ..events.event_logger import EventLogger, EventType
from ..planning.plan import Plan
from ..world.facts import FactSource, value_to_json
from ..world.world_state import WorldState
from .state_machine import ExecutorState, ExecutorStateMachine


class ActionOutcome(Enum):
    """Odpowiedź kodu gry na żądanie wykonania akcji."""

    DONE = auto()
    IN_PROGRESS = auto()
    FAILED = auto()


class StepStatus(Enum):
    """Wynik jednego wywołania ``step``."""

    SUCCEEDED = auto()
    RUNNING = auto()
    NEEDS_REPLAN = auto()
    FAILED = auto()
    COMPLETED = auto()


@dataclass(frozen=True)
class PreconditionViolation:
    """
    Niespełniony warunek wstępny wykryty w czasie wykonania.

    Attributes:
        key: Klucz faktu
        expected: Wartość wymagana przez akcję
        actual: Wartość w żywym świecie (None = brak faktu)
    """
    key: str
    expected: Any
    actual: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "expected": value_to_json(self.expected),
            "actual": value_to_json(self.actual) if self.actual is not None else None,
        }


@dataclass
class StepResult:
    """
    Wynik kroku.

    Attributes:
        status: Status kroku
        step_index: Indeks kroku w planie
        action: Wykonywana akcja (None dla COMPLETED bez akcji)
        state: Żywy świat z nałożonymi efektami (tylko SUCCEEDED)
        violations: Niespełnione warunki (tylko NEEDS_REPLAN)
        reason: Opis dla logów
        plan_completed: True gdy ten krok był ostatni
    """
    status: StepStatus
    step_index: int
    action: Optional[ActionInstance] = None
    state: Optional[WorldState] = None
    violations: Tuple[PreconditionViolation, ...] = ()
    reason: str = ""
    plan_completed: bool = False


class ActionPerformer(Protocol):
    """Kod gry wykonujący faktyczny skutek akcji."""

    def __call__(self, action: ActionInstance, world: WorldState) -> ActionOutcome:
        ...


World = Union[WorldState, FactSource]


def _as_state(world: World) -> WorldState:
    if isinstance(world, WorldState):
        return world
    return WorldState.from_sources(world)


class PlanExecutor:
    """
    Egzekutor jednego planu na raz.

    Attributes:
        performer: Wywoływany dla każdej akcji do wykonania
        agent_id: Agent (do logów)
        logger: Opcjonalny logger zdarzeń
        revalidate_running: Sprawdzaj warunki także dla akcji w toku
        plan (Optional[Plan]): Aktualny plan
        current_index (int): Indeks następnego/aktualnego kroku
    """

    def __init__(
        self,
        performer: ActionPerformer,
        agent_id: Optional[str] = None,
        logger: Optional[EventLogger] = None,
        revalidate_running: bool = False,
    ):
        self.performer = performer
        self.agent_id = agent_id
        self.logger = logger
        self.revalidate_running = revalidate_running

        self.machine = ExecutorStateMachine()
        self.plan: Optional[Plan] = None
        self.current_index: int = 0
        self.in_progress: bool = False
        self.last_violations: Tuple[PreconditionViolation, ...] = ()
        self.failure_reason: str = ""
        self.tick: int = 0

    # ─────────────────────────────────────────────────────────────────────────
    # WŁAŚCIWOŚCI
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> ExecutorState:
        return self.machine.current

    @property
    def current_action(self) -> Optional[ActionInstance]:
        if self.plan is None or self.current_index >= len(self.plan):
            return None
        return self.plan[self.current_index]

    @property
    def remaining_actions(self) -> Tuple[ActionInstance, ...]:
        if self.plan is None:
            return ()
        return self.plan.actions[self.current_index:]

    @property
    def is_active(self) -> bool:
        return self.machine.current == ExecutorState.EXECUTING

    # ─────────────────────────────────────────────────────────────────────────
    # CYKL ŻYCIA
    # ─────────────────────────────────────────────────────────────────────────

    def start(self, plan: Plan) -> None:
        """
        Przyjmuje plan (zastępuje poprzedni) i przechodzi do EXECUTING.
        """
        self.plan = plan
        self.current_index = 0
        self.in_progress = False
        self.last_violations = ()
        self.failure_reason = ""
        self.machine.transition_to(ExecutorState.EXECUTING)

    def abort(self) -> None:
        """Porzuca plan bez nakładania czegokolwiek (-> IDLE)."""
        self.plan = None
        self.current_index = 0
        self.in_progress = False
        self.machine.reset()

    def invalidate(self, reason: str = "invalidated") -> bool:
        """
        Unieważnia plan z zewnątrz (np. przegrana rezerwacja w drużynie).

        Returns:
            bool: True jeśli egzekutor wykonywał plan i przeszedł do NEEDS_REPLAN
        """
        if not self.machine.transition_to(ExecutorState.NEEDS_REPLAN):
            return False
        self.failure_reason = reason
        self.in_progress = False
        if self.logger:
            self.logger.log_step(
                self.tick, EventType.NEEDS_REPLAN, self.agent_id,
                self.current_index, self._action_name(), reason=reason,
            )
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # KROK
    # ─────────────────────────────────────────────────────────────────────────

    def step(self, world: World, tick: Optional[int] = None) -> StepResult:
        """
        Wykonuje (lub kontynuuje) bieżący krok planu.

        Args:
            world: Aktualny stan żywego świata (snapshot lub FactSource)
            tick: Tura gry - tylko do logów

        Returns:
            StepResult: Wynik kroku

        Raises:
            ExecutorError: Jeśli egzekutor nie ma planu (IDLE)
        """
        if tick is not None:
            self.tick = tick

        current = self.machine.current
        if current == ExecutorState.IDLE or self.plan is None:
            raise ExecutorError("Executor has no plan; call start(plan) first")
        if current.is_terminal():
            return self._terminal_result()

        # Wszystko wykonane (np. pusty plan)
        if self.current_index >= len(self.plan):
            self._complete()
            return StepResult(StepStatus.COMPLETED, self.current_index, reason="plan completed")

        live = _as_state(world)
        action = self.plan[self.current_index]

        if not self.in_progress or self.revalidate_running:
            violations = tuple(
                PreconditionViolation(key, expected, actual)
                for key, expected, actual in action.violations(live)
            )
            if violations:
                return self._needs_replan(action, violations)
            if not self.in_progress and self.logger:
                self.logger.log_step(
                    self.tick, EventType.STEP_STARTED, self.agent_id, self.current_index, action.name,
                )

        outcome = self.performer(action, live)

        if outcome == ActionOutcome.IN_PROGRESS:
            self.in_progress = True
            if self.logger:
                self.logger.log_step(
                    self.tick, EventType.STEP_RUNNING, self.agent_id, self.current_index, action.name,
                )
            return StepResult(StepStatus.RUNNING, self.current_index, action, reason="in progress")

        if outcome == ActionOutcome.FAILED:
            return self._fail(action, "action failed")

        if outcome != ActionOutcome.DONE:
            raise ExecutorError(f"Performer returned {outcome!r} for {action.name}")

        # Krok zaliczony
        index = self.current_index
        self.in_progress = False
        self.current_index += 1
        if self.logger:
            self.logger.log_step(self.tick, EventType.STEP_SUCCEEDED, self.agent_id, index, action.name)

        finished = self.current_index >= len(self.plan)
        if finished:
            self._complete()
        return StepResult(
            StepStatus.SUCCEEDED,
            index,
            action,
            state=action.apply(live),
            plan_completed=finished,
        )

    def run(self, world: WorldState, max_steps: int = 1000) -> Tuple[StepResult, WorldState]:
        """
        Wykonuje plan do końca na symulowanym świecie.

        Po każdym udanym kroku efekty są nakładane na ``world`` (kolejny
        snapshot). Przydatne w testach i symulacjach bez prawdziwej gry.

        Returns:
            Tuple[StepResult, WorldState]: Ostatni wynik i końcowy świat
        """
        result = StepResult(StepStatus.COMPLETED, self.current_index)
        for _ in range(max_steps):
            result = self.step(world)
            if result.status == StepStatus.SUCCEEDED:
                world = result.state
                if result.plan_completed:
                    break
            elif result.status != StepStatus.RUNNING:
                break
        return result, world

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    def _action_name(self) -> Optional[str]:
        action = self.current_action
        return action.name if action is not None else None

    def _complete(self) -> None:
        self.machine.transition_to(ExecutorState.COMPLETED)
        if self.logger:
            self.logger.log_step(
                self.tick, EventType.PLAN_COMPLETED, self.agent_id, self.current_index, None,
                cost=self.plan.cost if self.plan is not None else 0.0,
            )

    def _needs_replan(
        self,
        action: ActionInstance,
        violations: Tuple[PreconditionViolation, ...],
    ) -> StepResult:
        self.machine.transition_to(ExecutorState.NEEDS_REPLAN)
        self.last_violations = violations
        self.failure_reason = "precondition violated"
        self.in_progress = False
        if self.logger:
            self.logger.log_step(
                self.tick, EventType.NEEDS_REPLAN, self.agent_id, self.current_index, action.name,
                violations=[v.to_dict() for v in violations],
            )
        return StepResult(
            StepStatus.NEEDS_REPLAN,
            self.current_index,
            action,
            violations=violations,
            reason=self.failure_reason,
        )

    def _fail(self, action: ActionInstance, reason: str) -> StepResult:
        self.machine.transition_to(ExecutorState.FAILED)
        self.failure_reason = reason
        self.in_progress = False
        if self.logger:
            self.logger.log_step(
                self.tick, EventType.STEP_FAILED, self.agent_id, self.current_index, action.name,
                reason=reason,
            )
        return StepResult(StepStatus.FAILED, self.current_index, action, reason=reason)

    def _terminal_result(self) -> StepResult:
        """Ponowny step() w stanie końcowym - nic nie wykonuje, powtarza status."""
        current = self.machine.current
        if current == ExecutorState.COMPLETED:
            return StepResult(StepStatus.COMPLETED, self.current_index, reason="plan completed")
        if current == ExecutorState.FAILED:
            return StepResult(
                StepStatus.FAILED, self.current_index, self.current_action, reason=self.failure_reason,
            )
        return StepResult(
            StepStatus.NEEDS_REPLAN,
            self.current_index,
            self.current_action,
            violations=self.last_violations,
            reason=self.failure_reason,
        )

    def __repr__(self) -> str:
        total = len(self.plan) if self.plan is not None else 0
        return f"PlanExecutor({self.state.name}, step={self.current_index}/{total})"
