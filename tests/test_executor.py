"""
Testy dla egzekutora planu i maszyny stanów.

Testuje przejścia stanów, walidację warunków na żywym świecie,
akcje wieloturowe, porażki i logowanie kroków.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from goap.actions import ActionRegistry, GroundingContext, attack, move_to
from goap.core.hex_coord import HexCoord
from goap.errors import ExecutorError
from goap.events.event_logger import EventLogger, EventType
from goap.execution import (
    ActionOutcome, ExecutorState, ExecutorStateMachine, PlanExecutor, StepStatus,
)
from goap.goals.goal import Goal
from goap.planning import Plan, Planner
from goap.world.world_state import WorldState


A = HexCoord(0, 0)
B = HexCoord(2, 0)


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def world():
    """Agent u na A, ork na B z 2 HP."""
    return WorldState({
        "at(u)": A,
        "at(orc)": B,
        "alive(orc)": True,
        "health(orc)": 2,
    })


@pytest.fixture
def plan(world):
    """Plan: MoveTo(B), Attack(orc), Attack(orc)."""
    registry = ActionRegistry([move_to(), attack(damage=1)])
    ctx = GroundingContext(agent_id="u", domains={"positions": [A, B], "enemies": ["orc"]})
    return Planner(registry).plan(world, Goal({"alive(orc)": False}), ctx).unwrap()


def done(action, world):
    return ActionOutcome.DONE


class ScriptedPerformer:
    """Zwraca kolejne wyniki ze scenariusza, potem DONE."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def __call__(self, action, world):
        self.calls.append(action.name)
        if self.outcomes:
            return self.outcomes.pop(0)
        return ActionOutcome.DONE


# ═══════════════════════════════════════════════════════════════════════════
# TEST: MASZYNA STANÓW
# ═══════════════════════════════════════════════════════════════════════════

def test_state_machine_initial_idle():
    """Nowa maszyna jest w IDLE."""
    machine = ExecutorStateMachine()
    assert machine.current == ExecutorState.IDLE
    assert machine.previous is None


def test_state_machine_rejects_invalid_transition():
    """IDLE -> COMPLETED jest niedozwolone."""
    machine = ExecutorStateMachine()

    assert not machine.transition_to(ExecutorState.COMPLETED)
    assert machine.current == ExecutorState.IDLE

    assert machine.transition_to(ExecutorState.EXECUTING)
    assert machine.transition_to(ExecutorState.NEEDS_REPLAN)
    assert machine.previous == ExecutorState.EXECUTING
    assert not machine.transition_to(ExecutorState.COMPLETED)


def test_terminal_states():
    """COMPLETED, FAILED, NEEDS_REPLAN kończą plan."""
    assert ExecutorState.COMPLETED.is_terminal()
    assert ExecutorState.FAILED.is_terminal()
    assert ExecutorState.NEEDS_REPLAN.is_terminal()
    assert not ExecutorState.EXECUTING.is_terminal()
    assert ExecutorState.EXECUTING.can_step()


# ═══════════════════════════════════════════════════════════════════════════
# TEST: WYKONANIE
# ═══════════════════════════════════════════════════════════════════════════

def test_step_without_plan_raises(world):
    """step() w IDLE to błąd użycia."""
    executor = PlanExecutor(done)
    with pytest.raises(ExecutorError):
        executor.step(world)


def test_start_enters_executing(plan):
    """start(plan) -> EXECUTING, pierwszy krok gotowy."""
    executor = PlanExecutor(done)
    executor.start(plan)

    assert executor.state == ExecutorState.EXECUTING
    assert executor.current_action.name == "MoveTo((2, 0))"
    assert len(executor.remaining_actions) == 3


def test_steps_advance_and_complete(world, plan):
    """Kolejne kroki kończą plan stanem COMPLETED."""
    executor = PlanExecutor(done)
    executor.start(plan)

    first = executor.step(world)
    assert first.status == StepStatus.SUCCEEDED
    assert first.step_index == 0
    assert first.state.get("at(u)") == B
    assert not first.plan_completed

    second = executor.step(first.state)
    third = executor.step(second.state)

    assert third.status == StepStatus.SUCCEEDED
    assert third.plan_completed
    assert third.state.get("alive(orc)") is False
    assert executor.state == ExecutorState.COMPLETED

    again = executor.step(third.state)
    assert again.status == StepStatus.COMPLETED


def test_executor_does_not_mutate_world(world, plan):
    """Efekty trafiają do StepResult.state, nie do przekazanego świata."""
    executor = PlanExecutor(done)
    executor.start(plan)
    result = executor.step(world)

    assert world.get("at(u)") == A
    assert result.state is not world


def test_run_on_simulated_world(world, plan):
    """run() wykonuje plan do końca, nakładając efekty."""
    executor = PlanExecutor(done)
    executor.start(plan)

    last, final = executor.run(world)

    assert last.plan_completed
    assert final == plan.final_state
    assert executor.state == ExecutorState.COMPLETED


def test_empty_plan_completes_immediately(world):
    """Pusty plan kończy się przy pierwszym step()."""
    executor = PlanExecutor(done)
    executor.start(Plan.empty(world))

    result = executor.step(world)

    assert result.status == StepStatus.COMPLETED
    assert executor.state == ExecutorState.COMPLETED


# ═══════════════════════════════════════════════════════════════════════════
# TEST: WALIDACJA NA ŻYWYM ŚWIECIE
# ═══════════════════════════════════════════════════════════════════════════

def test_violated_precondition_needs_replan(world, plan):
    """Ork zginął z innej ręki - atak nie ma sensu."""
    performer = ScriptedPerformer()
    executor = PlanExecutor(performer)
    executor.start(plan)

    moved = executor.step(world).state
    live = moved.with_fact("alive(orc)", False)
    result = executor.step(live)

    assert result.status == StepStatus.NEEDS_REPLAN
    assert result.step_index == 1
    assert executor.state == ExecutorState.NEEDS_REPLAN
    assert len(result.violations) == 1
    violation = result.violations[0]
    assert violation.key == "alive(orc)"
    assert violation.expected is True
    assert violation.actual is False
    # Wykonawca nie dostał ataku
    assert performer.calls == ["MoveTo((2, 0))"]


def test_missing_fact_violation_reports_none(world, plan):
    """Brakujący fakt w żywym świecie -> actual = None."""
    executor = PlanExecutor(done)
    executor.start(plan)
    executor.step(world)

    result = executor.step(WorldState({"at(u)": B}))

    assert result.status == StepStatus.NEEDS_REPLAN
    assert result.violations[0].key == "alive(orc)"
    assert result.violations[0].actual is None


def test_needs_replan_is_sticky_until_new_plan(world, plan):
    """Po NEEDS_REPLAN kroki nie są pomijane ani przestawiane."""
    executor = PlanExecutor(done)
    executor.start(plan)
    moved = executor.step(world).state
    executor.step(moved.with_fact("alive(orc)", False))

    repeated = executor.step(moved)
    assert repeated.status == StepStatus.NEEDS_REPLAN
    assert repeated.step_index == 1

    executor.start(plan)
    assert executor.step(world).status == StepStatus.SUCCEEDED


# ═══════════════════════════════════════════════════════════════════════════
# TEST: AKCJE WIELOTUROWE I PORAŻKI
# ═══════════════════════════════════════════════════════════════════════════

def test_in_progress_action_stays_current(world, plan):
    """IN_PROGRESS -> RUNNING, indeks kroku się nie zmienia."""
    performer = ScriptedPerformer(ActionOutcome.IN_PROGRESS, ActionOutcome.IN_PROGRESS)
    executor = PlanExecutor(performer)
    executor.start(plan)

    assert executor.step(world).status == StepStatus.RUNNING
    assert executor.step(world).status == StepStatus.RUNNING
    finished = executor.step(world)

    assert finished.status == StepStatus.SUCCEEDED
    assert finished.step_index == 0
    assert performer.calls == ["MoveTo((2, 0))"] * 3


def test_running_action_not_revalidated_by_default(world, plan):
    """Akcja w toku nie jest ponownie walidowana (domyślnie)."""
    performer = ScriptedPerformer(ActionOutcome.DONE, ActionOutcome.IN_PROGRESS)
    executor = PlanExecutor(performer)
    executor.start(plan)
    moved = executor.step(world).state
    assert executor.step(moved).status == StepStatus.RUNNING

    # Ork zginął w trakcie trwającego ataku
    assert executor.step(moved.with_fact("alive(orc)", False)).status == StepStatus.SUCCEEDED


def test_running_action_revalidated_when_enabled(world, plan):
    """revalidate_running=True sprawdza warunki także w toku."""
    performer = ScriptedPerformer(ActionOutcome.DONE, ActionOutcome.IN_PROGRESS)
    executor = PlanExecutor(performer, revalidate_running=True)
    executor.start(plan)
    moved = executor.step(world).state
    assert executor.step(moved).status == StepStatus.RUNNING

    assert executor.step(moved.with_fact("alive(orc)", False)).status == StepStatus.NEEDS_REPLAN


def test_failed_action(world, plan):
    """FAILED z kodu gry -> FAILED egzekutora."""
    executor = PlanExecutor(ScriptedPerformer(ActionOutcome.FAILED))
    executor.start(plan)

    result = executor.step(world)

    assert result.status == StepStatus.FAILED
    assert executor.state == ExecutorState.FAILED
    assert executor.step(world).status == StepStatus.FAILED


# ═══════════════════════════════════════════════════════════════════════════
# TEST: STEROWANIE Z ZEWNĄTRZ
# ═══════════════════════════════════════════════════════════════════════════

def test_invalidate_forces_replan(world, plan):
    """invalidate() -> NEEDS_REPLAN (np. przegrana rezerwacja)."""
    executor = PlanExecutor(done)
    executor.start(plan)

    assert executor.invalidate("lost reservation")
    assert executor.state == ExecutorState.NEEDS_REPLAN
    result = executor.step(world)
    assert result.status == StepStatus.NEEDS_REPLAN
    assert result.reason == "lost reservation"


def test_invalidate_idle_is_noop():
    """Nie ma czego unieważniać bez planu."""
    executor = PlanExecutor(done)
    assert not executor.invalidate()
    assert executor.state == ExecutorState.IDLE


def test_abort_returns_to_idle(world, plan):
    """abort() porzuca plan."""
    executor = PlanExecutor(done)
    executor.start(plan)
    executor.abort()

    assert executor.state == ExecutorState.IDLE
    assert executor.current_action is None
    with pytest.raises(ExecutorError):
        executor.step(world)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: LOGOWANIE I ŹRÓDŁA FAKTÓW
# ═══════════════════════════════════════════════════════════════════════════

def test_executor_logs_steps(world, plan):
    """Start, sukces każdego kroku i zakończenie planu."""
    logger = EventLogger()
    executor = PlanExecutor(done, agent_id="u", logger=logger)
    executor.start(plan)
    executor.run(world)

    assert len(logger.get_events_by_type(EventType.STEP_STARTED)) == 3
    assert len(logger.get_events_by_type(EventType.STEP_SUCCEEDED)) == 3
    assert len(logger.get_events_by_type(EventType.PLAN_COMPLETED)) == 1
    assert all(e.agent_id == "u" for e in logger.events)


def test_executor_logs_violations(world, plan):
    """NEEDS_REPLAN zawiera listę naruszeń."""
    logger = EventLogger()
    executor = PlanExecutor(done, agent_id="u", logger=logger)
    executor.start(plan)
    moved = executor.step(world).state
    executor.step(moved.with_fact("at(u)", A))

    [event] = logger.get_events_by_type(EventType.NEEDS_REPLAN)
    assert event.data["violations"] == [{"key": "at(u)", "expected": [2, 0], "actual": [0, 0]}]


def test_step_accepts_fact_source(plan):
    """Żywy świat może być encją wystawiającą fakty."""

    class LiveWorld:
        def to_facts(self):
            return {"at(u)": A, "at(orc)": B, "alive(orc)": True, "health(orc)": 2}

    executor = PlanExecutor(done)
    executor.start(plan)

    assert executor.step(LiveWorld()).status == StepStatus.SUCCEEDED
