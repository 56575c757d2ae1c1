#!/usr/bin/env python3
"""
GOAP Planner - Entry Point
═══════════════════════════════════════════════════════════════════════════

Uruchamia przykładowy scenariusz: planowanie + wykonanie planu na
symulowanym świecie (efekty akcji nakładane po każdym kroku).

Użycie:
    python main.py                         # Scenariusz "attack"
    python main.py --scenario move         # Sam ruch
    python main.py --scenario team         # Dwóch agentów, jeden przedmiot
    python main.py --max-expansions 200    # Mniejszy budżet
    python main.py --verbose               # Statystyki zdarzeń
    python main.py --save output/plan.json # Zapis logu zdarzeń

Wynik:
    - Wypisuje plan i przebieg wykonania na konsolę
    - Opcjonalnie zapisuje pełny log zdarzeń do JSON
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict

# Dodaj katalog projektu do path
sys.path.insert(0, str(Path(__file__).parent))

from goap.core.hex_coord import HexCoord
from goap.core.config_loader import ConfigLoader
from goap.actions import ActionRegistry, GroundingContext, attack, move_to, pickup
from goap.events.event_logger import EventLogger, EventType
from goap.execution import ActionOutcome, PlanExecutor, StepStatus
from goap.goals import Goal
from goap.planning import Planner, PlanningResult, SearchBudget
from goap.team import TeamCoordinator, plan_for_team
from goap.world import WorldState


def perform(action, world):
    """Symulowany kod gry - każda akcja kończy się w jednej turze."""
    return ActionOutcome.DONE


def print_result(result: PlanningResult) -> None:
    stats = result.stats
    print(f"Status: {result.status.name} ({stats.expansions} rozwinięć, {stats.generated} węzłów)")
    if result.plan is not None:
        print(f"Koszt: {result.plan.cost:g}")
        for i, action in enumerate(result.plan, 1):
            print(f"  {i}. {action.name} (koszt {action.cost:g})")


def execute(plan, start: WorldState, agent_id: str, logger: EventLogger, revalidate_running: bool = False) -> WorldState:
    """Wykonuje plan krok po kroku i wypisuje przebieg."""
    executor = PlanExecutor(perform, agent_id=agent_id, logger=logger, revalidate_running=revalidate_running)
    executor.start(plan)
    world = start
    tick = 0
    while True:
        tick += 1
        step = executor.step(world, tick=tick)
        if step.status == StepStatus.SUCCEEDED:
            world = step.state
            print(f"  [tick {tick}] {agent_id}: {step.action.name} OK")
            if step.plan_completed:
                print(f"  [tick {tick}] {agent_id}: plan wykonany")
                break
        elif step.status == StepStatus.RUNNING:
            continue
        else:
            print(f"  [tick {tick}] {agent_id}: {step.status.name} {step.reason}")
            break
    return world


# ─────────────────────────────────────────────────────────────────────────────
# SCENARIUSZE
# ─────────────────────────────────────────────────────────────────────────────

def scenario_move(planner: Planner, logger: EventLogger, config: Dict[str, Any]) -> WorldState:
    start = WorldState({"at(knight)": HexCoord(0, 0), "alive(knight)": True})
    target = HexCoord(3, -1)
    ctx = GroundingContext(
        agent_id="knight",
        domains={"positions": [HexCoord(1, 0), HexCoord(2, 0), target], "enemies": [], "items": []},
    )
    print(f"knight @ {start.get('at(knight)')} -> {target}")
    result = planner.plan(start, Goal({"at(knight)": target}, name="reach"), ctx)
    print_result(result)
    if not result.found:
        return start
    print()
    return execute(result.plan, start, "knight", logger, config["executor"]["revalidate_running"])


def scenario_attack(planner: Planner, logger: EventLogger, config: Dict[str, Any]) -> WorldState:
    start = WorldState({
        "at(knight)": HexCoord(0, 0),
        "alive(knight)": True,
        "at(orc)": HexCoord(2, 1),
        "alive(orc)": True,
        "health(orc)": 2,
    })

    def enemy_positions(state):
        return [state.get("at(orc)")]

    ctx = GroundingContext(
        agent_id="knight",
        domains={"positions": enemy_positions, "enemies": ["orc"], "items": []},
    )
    print("knight @ (0, 0), orc @ (2, 1) z 2 HP")
    result = planner.plan(start, Goal({"alive(orc)": False}, name="kill orc"), ctx)
    print_result(result)
    if not result.found:
        return start
    print()
    return execute(result.plan, start, "knight", logger, config["executor"]["revalidate_running"])


def scenario_team(planner: Planner, logger: EventLogger, config: Dict[str, Any]) -> WorldState:
    sword_at = HexCoord(1, 1)
    start = WorldState({
        "at(a)": HexCoord(0, 0),
        "at(b)": HexCoord(2, 0),
        "at(sword)": sword_at,
        "item_available(sword)": True,
    })
    domains = {"positions": [sword_at, HexCoord(3, 0)], "enemies": [], "items": ["sword"]}
    contexts = {agent: GroundingContext(agent_id=agent, domains=domains) for agent in ("a", "b")}
    goals = {
        "a": [Goal({"holding(a)": "sword"}, name="grab sword")],
        "b": [
            Goal({"holding(b)": "sword"}, name="grab sword"),
            Goal({"at(b)": HexCoord(3, 0)}, name="flank"),
        ],
    }

    print("Planowanie sekwencyjne (a, potem b):")
    budget = SearchBudget(
        max_expansions=config["team"]["max_expansions_per_agent"],
        max_depth=planner.budget.max_depth,
    )
    team = plan_for_team(start, planner.registry, goals, ["a", "b"], contexts, budget, logger=logger)
    for agent, result in team.results.items():
        plan = team.plans.get(agent)
        goal_name = plan.goal.name if plan is not None else "-"
        print(f"  {agent}: {result.status.name if result else 'NO_GOALS'} [{goal_name}] {plan.names() if plan else ''}")

    # Równoległe plany o ten sam miecz - rozstrzyga priorytet
    print()
    print("Rezerwacje (plany równoległe, b ma wyższy priorytet):")
    coordinator = TeamCoordinator(priority={"a": 1, "b": 0}.get, logger=logger)
    executors = {}
    for agent in ("a", "b"):
        result = planner.plan(start, goals[agent][0], contexts[agent])
        executors[agent] = PlanExecutor(perform, agent_id=agent, logger=logger)
        executors[agent].start(result.unwrap())
        coordinator.propose(agent, result.plan, executors[agent])
    allocation = coordinator.resolve(tick=0)
    print(f"  przyjęte: {list(allocation.accepted)}, unieważnione: {list(allocation.invalidated)}")
    print(f"  item:sword -> {coordinator.holder('item:sword')}")
    for agent, executor in executors.items():
        print(f"  {agent}: {executor.state.name}")
    return team.final_state


SCENARIOS = {
    "move": scenario_move,
    "attack": scenario_attack,
    "team": scenario_team,
}


def main():
    """Główna funkcja."""
    parser = argparse.ArgumentParser(
        description="GOAP Planner Demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        default="attack",
        help="Scenariusz do uruchomienia (domyślnie: attack)"
    )
    parser.add_argument(
        "--max-expansions",
        type=int,
        default=None,
        help="Limit rozwinięć A* (domyślnie z data/defaults.yaml)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Szczegółowy output"
    )
    parser.add_argument(
        "--save",
        metavar="PATH",
        default=None,
        help="Zapisz log zdarzeń do pliku JSON"
    )

    args = parser.parse_args()

    print("=" * 60)
    print("GOAP PLANNER")
    print("=" * 60)
    print(f"Scenariusz: {args.scenario}")
    print()

    # Załaduj konfigurację
    loader = ConfigLoader(str(Path(__file__).parent / "data"))
    overrides = {"max_expansions": args.max_expansions} if args.max_expansions is not None else None
    planner_config = loader.load_planner_config(overrides)
    if args.verbose:
        planner_config["trace_expansions"] = True

    logger = EventLogger(scenario=args.scenario)
    registry = ActionRegistry([move_to(), attack(damage=1), pickup()])
    planner = Planner.from_config(registry, planner_config, logger=logger)

    config = {
        "executor": loader.load_executor_config(),
        "team": loader.load_team_config(),
    }
    final_state = SCENARIOS[args.scenario](planner, logger, config)

    print()
    print("-" * 60)
    print("STAN KOŃCOWY")
    print("-" * 60)
    for key, value in final_state.items():
        print(f"  {key} = {value}")

    if args.save:
        logger.save(args.save)
        print()
        print(f"📄 Log zapisany: {args.save}")

    # Verbose: pokaż statystyki
    if args.verbose:
        print()
        print("-" * 60)
        print("STATYSTYKI ZDARZEŃ")
        print("-" * 60)
        for event_type in EventType:
            count = len(logger.get_events_by_type(event_type))
            if count > 0:
                print(f"  {event_type.name}: {count}")

    print()
    print("Gotowe!")

    return 0


if __name__ == "__main__":
    sys.exit(main())
