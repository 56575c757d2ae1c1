"""
Testy dla planera A*.

Testuje optymalność, determinizm, budżety, cele miękkie,
anulowanie oraz błędy konfiguracji zgłaszane przez planer.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from goap.actions import (
    ActionRegistry, ActionTemplate, Condition, Effect, GroundingContext, attack, move_to,
)
from goap.core.hex_coord import HexCoord
from goap.errors import BudgetExceeded, InvalidGrounding, NegativeCost, NoPlanFound, PlanningCancelled
from goap.events.event_logger import EventLogger, EventType
from goap.goals.goal import Goal
from goap.planning import (
    Plan, Planner, PlanStatus, SearchBudget, plan, position_distance_heuristic, zero_heuristic,
)
from goap.world.world_state import WorldState


A = HexCoord(0, 0)
B = HexCoord(3, 0)


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def start():
    """Agent u na A."""
    return WorldState({"at(u)": A, "alive(u)": True})


@pytest.fixture
def move_registry():
    return ActionRegistry([move_to()])


@pytest.fixture
def move_context():
    return GroundingContext(agent_id="u", domains={"positions": [A, B]})


@pytest.fixture
def duel():
    """Agent i ork na tym samym polu, ork ma 2 HP."""
    return WorldState({
        "at(u)": A,
        "at(orc)": A,
        "alive(orc)": True,
        "health(orc)": 2,
    })


@pytest.fixture
def duel_context():
    return GroundingContext(agent_id="u", domains={"enemies": ["orc"]})


def flag_template(template_id: str, key: str, cost: float = 1.0, requires=None) -> ActionTemplate:
    """Helper: szablon bez parametrów ustawiający jeden fakt na True."""
    preconditions = [Condition(requires, True)] if requires else []
    return ActionTemplate(
        id=template_id,
        preconditions=preconditions,
        effects=[Effect(key, True)],
        base_cost=cost,
    )


# ═══════════════════════════════════════════════════════════════════════════
# TEST: PODSTAWY
# ═══════════════════════════════════════════════════════════════════════════

def test_goal_already_satisfied_gives_empty_plan(start, move_registry, move_context):
    """Spełniony cel = pusty plan o koszcie 0."""
    result = Planner(move_registry).plan(start, Goal({"at(u)": A}), move_context)

    assert result.status == PlanStatus.FOUND
    assert len(result.plan) == 0
    assert result.plan.cost == 0.0
    assert result.stats.expansions == 0


def test_move_to_plan_costs_distance(start, move_registry, move_context):
    """MoveTo(B) kosztuje tyle, ile wynosi odległość A -> B."""
    result = Planner(move_registry).plan(start, Goal({"at(u)": B}), move_context)

    assert result.found
    assert result.plan.names() == ["MoveTo((3, 0))"]
    assert result.plan.cost == 3.0


def test_direct_move_preferred_over_equal_cost_detour(start, move_registry):
    """Przy równym koszcie wygrywa krótszy plan."""
    ctx = GroundingContext(
        agent_id="u",
        domains={"positions": [A, HexCoord(1, 0), HexCoord(2, 0), B]},
    )
    result = Planner(move_registry).plan(start, Goal({"at(u)": B}), ctx)

    assert result.plan.names() == ["MoveTo((3, 0))"]
    assert result.plan.cost == 3.0


def test_multi_step_attack_plan(start):
    """Podejście do orka i dwa ataki."""
    state = start.with_facts({"at(orc)": B, "alive(orc)": True, "health(orc)": 2})
    registry = ActionRegistry([move_to(), attack(damage=1)])
    ctx = GroundingContext(agent_id="u", domains={"positions": [A, B], "enemies": ["orc"]})

    result = Planner(registry).plan(state, Goal({"alive(orc)": False}), ctx)

    assert result.found
    assert result.plan.names() == ["MoveTo((3, 0))", "Attack(orc)", "Attack(orc)"]
    assert result.plan.cost == 5.0
    assert result.plan.final_state.get("health(orc)") == 0


def test_cheaper_longer_plan_wins():
    """A* zwraca plan o minimalnym koszcie, nie minimalnej długości."""
    registry = ActionRegistry([
        flag_template("Shortcut", "goal", cost=5.0),
        flag_template("Step1", "a"),
        flag_template("Step2", "goal", requires="a"),
    ])
    result = Planner(registry).plan(WorldState(), Goal({"goal": True}))

    assert result.plan.names() == ["Step1()", "Step2()"]
    assert result.plan.cost == 2.0


def test_replay_reaches_final_state(start):
    """Nałożenie efektów planu na start daje stan końcowy spełniający cel."""
    state = start.with_facts({"at(orc)": B, "alive(orc)": True, "health(orc)": 2})
    registry = ActionRegistry([move_to(), attack(damage=1)])
    ctx = GroundingContext(agent_id="u", domains={"positions": [A, B], "enemies": ["orc"]})
    goal = Goal({"alive(orc)": False})

    found = Planner(registry).plan(state, goal, ctx).unwrap()

    assert found.replay() == found.final_state
    assert found.replay(state) == found.final_state
    assert goal.is_satisfied(found.replay(state))
    assert found.is_valid_from(state)


def test_plan_cost_is_sum_of_action_costs(start):
    """Koszt planu = suma kosztów akcji."""
    state = start.with_facts({"at(orc)": B, "alive(orc)": True, "health(orc)": 2})
    registry = ActionRegistry([move_to(base_cost=0.5), attack(damage=1, base_cost=2.0)])
    ctx = GroundingContext(agent_id="u", domains={"positions": [A, B], "enemies": ["orc"]})

    found = Planner(registry).plan(state, Goal({"alive(orc)": False}), ctx).unwrap()

    assert found.cost == sum(action.cost for action in found)
    assert found.cost == 3.5 + 2.0 + 2.0


# ═══════════════════════════════════════════════════════════════════════════
# TEST: DETERMINIZM I TIE-BREAK
# ═══════════════════════════════════════════════════════════════════════════

def test_planning_is_deterministic(start):
    """Te same wejścia = ten sam plan i te same statystyki."""
    state = start.with_facts({"at(orc)": B, "alive(orc)": True, "health(orc)": 3})
    registry = ActionRegistry([move_to(), attack(damage=1)])
    ctx = GroundingContext(
        agent_id="u",
        domains={"positions": [A, HexCoord(1, 0), HexCoord(2, 0), B], "enemies": ["orc"]},
    )
    goal = Goal({"alive(orc)": False})

    first = Planner(registry).plan(state, goal, ctx)
    second = Planner(registry).plan(state, goal, ctx)

    assert first.plan.names() == second.plan.names()
    assert first.plan.cost == second.plan.cost
    assert first.stats.to_dict() == second.stats.to_dict()


def test_tie_break_follows_registration_order():
    """Dwie akcje o równym koszcie - wygrywa wcześniej zarejestrowana."""
    left = flag_template("Left", "done")
    right = flag_template("Right", "done")
    goal = Goal({"done": True})

    assert Planner(ActionRegistry([left, right])).plan(WorldState(), goal).plan.names() == ["Left()"]
    assert Planner(ActionRegistry([right, left])).plan(WorldState(), goal).plan.names() == ["Right()"]


def test_cycles_terminate():
    """Akcje cofające swoje efekty nie zapętlają wyszukiwania."""
    registry = ActionRegistry([
        ActionTemplate(id="Open", effects=[Effect("door", True)]),
        ActionTemplate(id="Close", effects=[Effect("door", False)]),
    ])
    result = Planner(registry).plan(WorldState({"door": False}), Goal({"treasure": True}))

    assert result.status == PlanStatus.NO_PLAN_FOUND
    assert result.stats.expansions == 2


# ═══════════════════════════════════════════════════════════════════════════
# TEST: PORAŻKI I BUDŻET
# ═══════════════════════════════════════════════════════════════════════════

def test_unreachable_goal(start, move_registry, move_context):
    """Brak akcji dającej holding(u) -> NO_PLAN_FOUND."""
    result = Planner(move_registry).plan(start, Goal({"holding(u)": "sword"}), move_context)

    assert result.status == PlanStatus.NO_PLAN_FOUND
    assert result.plan is None
    assert not result.ok

    with pytest.raises(NoPlanFound) as exc_info:
        result.unwrap()
    assert exc_info.value.result is result


def test_expansion_budget_exceeded(duel, duel_context):
    """Limit rozwinięć przerywa wyszukiwanie z BUDGET_EXCEEDED."""
    registry = ActionRegistry([attack(damage=1)])
    planner = Planner(registry, budget=SearchBudget(max_expansions=1))

    result = planner.plan(duel, Goal({"alive(orc)": False}), duel_context)

    assert result.status == PlanStatus.BUDGET_EXCEEDED
    assert result.stats.expansions == 1
    with pytest.raises(BudgetExceeded):
        result.unwrap()


def test_budget_per_call_overrides_default(duel, duel_context):
    """Budżet podany w wywołaniu ma pierwszeństwo."""
    registry = ActionRegistry([attack(damage=1)])
    planner = Planner(registry, budget=SearchBudget(max_expansions=1))

    result = planner.plan(duel, Goal({"alive(orc)": False}), duel_context, budget=SearchBudget())

    assert result.found
    assert len(result.plan) == 2


def test_depth_limit(duel, duel_context):
    """Plan dłuższy niż max_depth nie zostanie znaleziony."""
    registry = ActionRegistry([attack(damage=1)])
    goal = Goal({"alive(orc)": False})

    shallow = Planner(registry, budget=SearchBudget(max_depth=1)).plan(duel, goal, duel_context)
    assert shallow.status == PlanStatus.BUDGET_EXCEEDED
    assert shallow.stats.depth_pruned == 1

    deep = Planner(registry, budget=SearchBudget(max_depth=2)).plan(duel, goal, duel_context)
    assert deep.found


def step_template(template_id: str, source: str, target: str, cost: float) -> ActionTemplate:
    """Helper: przejście p=source -> p=target."""
    return ActionTemplate(
        id=template_id,
        preconditions=[Condition("p", source)],
        effects=[Effect("p", target)],
        base_cost=cost,
    )


def test_depth_limit_keeps_shallower_costlier_path():
    """
    Tani, ale głęboki dojazd do X nie blokuje droższego i płytszego.

    S -a-> A -b-> B -c-> X (koszt 3, głębokość 3), S -jump-> X (koszt 10),
    X -fin-> G. Przy max_depth=3 zmieści się tylko [jump, fin].
    """
    registry = ActionRegistry([
        step_template("a", "S", "A", 1.0),
        step_template("b", "A", "B", 1.0),
        step_template("c", "B", "X", 1.0),
        step_template("jump", "S", "X", 10.0),
        step_template("fin", "X", "G", 1.0),
    ])
    start = WorldState({"p": "S"})
    goal = Goal({"p": "G"})

    capped = Planner(registry, heuristic=zero_heuristic).plan(
        start, goal, budget=SearchBudget(max_expansions=None, max_depth=3),
    )
    assert capped.found
    assert capped.plan.names() == ["jump()", "fin()"]
    assert capped.plan.cost == pytest.approx(11.0)

    unlimited = Planner(registry, heuristic=zero_heuristic).plan(start, goal, budget=SearchBudget.unlimited())
    assert unlimited.plan.names() == ["a()", "b()", "c()", "fin()"]
    assert unlimited.plan.cost == pytest.approx(4.0)


def test_soft_goal_returns_partial_plan(duel, duel_context):
    """Miękki cel: najlepszy częściowy plan zamiast porażki."""
    registry = ActionRegistry([attack(damage=1)])
    goal = Goal({"alive(orc)": False, "holding(u)": "sword"}, soft=True)

    result = Planner(registry).plan(duel, goal, duel_context)

    assert result.status == PlanStatus.PARTIAL
    assert result.ok
    assert not result.found
    assert result.plan.partial
    assert result.plan.names() == ["Attack(orc)", "Attack(orc)"]
    assert result.unwrap() is result.plan


def test_soft_goal_fully_reachable_is_found(duel, duel_context):
    """Miękki cel osiągalny w całości = zwykły FOUND."""
    registry = ActionRegistry([attack(damage=1)])
    result = Planner(registry).plan(duel, Goal({"alive(orc)": False}, soft=True), duel_context)

    assert result.status == PlanStatus.FOUND
    assert not result.plan.partial


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ANULOWANIE
# ═══════════════════════════════════════════════════════════════════════════

def test_cancel_before_first_expansion(duel, duel_context):
    """should_cancel sprawdzane między rozwinięciami."""
    registry = ActionRegistry([attack(damage=1)])
    result = Planner(registry).plan(
        duel, Goal({"alive(orc)": False}), duel_context, should_cancel=lambda: True,
    )

    assert result.status == PlanStatus.CANCELLED
    assert result.stats.expansions == 0
    with pytest.raises(PlanningCancelled):
        result.unwrap()


def test_cancel_mid_search(duel, duel_context):
    """Anulowanie po pierwszym rozwinięciu."""
    calls = []

    def should_cancel():
        calls.append(1)
        return len(calls) > 1

    registry = ActionRegistry([attack(damage=1)])
    result = Planner(registry).plan(duel, Goal({"alive(orc)": False}), duel_context, should_cancel=should_cancel)

    assert result.status == PlanStatus.CANCELLED
    assert result.stats.expansions == 1


# ═══════════════════════════════════════════════════════════════════════════
# TEST: BŁĘDY KONFIGURACJI
# ═══════════════════════════════════════════════════════════════════════════

def test_invalid_grounding_propagates(start, move_registry):
    """Brak domeny to defekt treści - wyjątek, nie wynik."""
    with pytest.raises(InvalidGrounding):
        Planner(move_registry).plan(start, Goal({"at(u)": B}), GroundingContext(agent_id="u"))


def test_negative_cost_propagates(start):
    """Ujemny koszt kontekstowy przerywa planowanie."""
    registry = ActionRegistry([
        ActionTemplate(id="Cheat", effects=[Effect("won", True)], cost_fn=lambda b, s: -1.0),
    ])
    with pytest.raises(NegativeCost):
        Planner(registry).plan(start, Goal({"won": True}))


# ═══════════════════════════════════════════════════════════════════════════
# TEST: HEURYSTYKI, LOGGER, SKRÓTY
# ═══════════════════════════════════════════════════════════════════════════

def test_custom_heuristics_keep_optimal_cost(start, move_registry):
    """Dopuszczalna heurystyka nie zmienia kosztu planu."""
    ctx = GroundingContext(agent_id="u", domains={"positions": [A, HexCoord(1, 0), HexCoord(2, 0), B]})
    goal = Goal({"at(u)": B})

    dijkstra = Planner(move_registry, heuristic=zero_heuristic).plan(start, goal, ctx)
    guided = Planner(move_registry, heuristic=position_distance_heuristic("at(u)")).plan(start, goal, ctx)

    assert dijkstra.plan.cost == guided.plan.cost == 3.0


def test_planner_logs_events(duel, duel_context):
    """Planer loguje żądanie i wynik; rozwinięcia tylko z trace_expansions."""
    logger = EventLogger()
    registry = ActionRegistry([attack(damage=1)])
    result = Planner(registry, logger=logger, trace_expansions=True).plan(
        duel, Goal({"alive(orc)": False}), duel_context, tick=7,
    )

    assert len(logger.get_events_by_type(EventType.PLAN_REQUESTED)) == 1
    found = logger.get_events_by_type(EventType.PLAN_FOUND)
    assert len(found) == 1
    assert found[0].tick == 7
    assert found[0].agent_id == "u"
    assert found[0].data["actions"] == ["Attack(orc)", "Attack(orc)"]
    assert len(logger.get_events_by_type(EventType.NODE_EXPANDED)) == result.stats.expansions


def test_plan_instances_over_fixed_actions():
    """Wyszukiwanie nad gotową listą instancji."""
    registry = ActionRegistry([flag_template("Open", "door"), flag_template("Enter", "inside", requires="door")])
    instances = registry.ground(WorldState(), None, applicable_only=False)

    result = Planner(registry).plan_instances(WorldState(), Goal({"inside": True}), instances)

    assert result.plan.names() == ["Open()", "Enter()"]


def test_module_level_plan_shortcut(start, move_registry, move_context):
    """Funkcja plan() = Planner(...).plan(...)."""
    result = plan(start, Goal({"at(u)": B}), move_registry, move_context)
    assert isinstance(result.plan, Plan)
    assert result.plan.cost == 3.0
