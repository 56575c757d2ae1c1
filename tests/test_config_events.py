"""
Testy dla ConfigLoader i EventLogger.

Testuje merge konfiguracji YAML z wartościami wbudowanymi
oraz serializację logu zdarzeń do JSON.
"""

import pytest
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from goap.actions import ActionRegistry, GroundingContext, attack
from goap.core.config_loader import BUILTIN_DEFAULTS, ConfigLoader
from goap.core.hex_coord import HexCoord
from goap.events.event_logger import EventLogger, EventType, PlanningEvent
from goap.goals.goal import Goal
from goap.planning import Planner, SearchBudget
from goap.world.world_state import WorldState


DATA_PATH = Path(__file__).parent.parent / "data"


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def loader():
    """Loader na katalogu data/ projektu."""
    return ConfigLoader(str(DATA_PATH))


@pytest.fixture
def custom_loader(tmp_path):
    """Loader na pliku z częściowym nadpisaniem."""
    (tmp_path / "defaults.yaml").write_text(
        "planner:\n  max_depth: 4\nexecutor:\n  revalidate_running: true\n",
        encoding="utf-8",
    )
    return ConfigLoader(str(tmp_path))


# ═══════════════════════════════════════════════════════════════════════════
# TEST: CONFIG LOADER
# ═══════════════════════════════════════════════════════════════════════════

def test_project_defaults(loader):
    """data/defaults.yaml ma standardowe wartości."""
    planner = loader.load_planner_config()

    assert planner["max_expansions"] == 5000
    assert planner["max_depth"] == 12
    assert planner["trace_expansions"] is False
    assert loader.load_team_config()["max_expansions_per_agent"] == 2000


def test_partial_file_merged_with_builtin(custom_loader):
    """Brakujące klucze pochodzą z BUILTIN_DEFAULTS."""
    planner = custom_loader.load_planner_config()

    assert planner["max_depth"] == 4
    assert planner["max_expansions"] == BUILTIN_DEFAULTS["planner"]["max_expansions"]
    assert custom_loader.load_executor_config()["revalidate_running"] is True


def test_missing_file_uses_builtin(tmp_path):
    """Brak pliku = same wartości wbudowane."""
    loader = ConfigLoader(str(tmp_path / "nowhere"))
    assert loader.get_defaults() == BUILTIN_DEFAULTS


def test_overrides_do_not_leak(loader):
    """Overrides dotyczą tylko zwróconej kopii."""
    tuned = loader.load_planner_config({"max_expansions": 10})

    assert tuned["max_expansions"] == 10
    assert loader.load_planner_config()["max_expansions"] == 5000


def test_reload_rereads_file(tmp_path):
    """reload() czyści cache."""
    path = tmp_path / "defaults.yaml"
    path.write_text("planner:\n  max_depth: 3\n", encoding="utf-8")
    loader = ConfigLoader(str(tmp_path))
    assert loader.load_planner_config()["max_depth"] == 3

    path.write_text("planner:\n  max_depth: 7\n", encoding="utf-8")
    assert loader.load_planner_config()["max_depth"] == 3
    loader.reload()
    assert loader.load_planner_config()["max_depth"] == 7


def test_deep_merge_nested():
    """Zagnieżdżone słowniki są łączone, nie zastępowane."""
    merged = ConfigLoader._deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}, "b": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 4}


def test_search_budget_from_config(custom_loader):
    """SearchBudget z sekcji planner."""
    budget = SearchBudget.from_config(custom_loader.load_planner_config())
    assert budget == SearchBudget(max_expansions=5000, max_depth=4)


def test_planner_from_config(loader):
    """Planner.from_config ustawia budżet i śledzenie rozwinięć."""
    registry = ActionRegistry([attack()])
    planner = Planner.from_config(registry, loader.load_planner_config({"trace_expansions": True}))

    assert planner.budget.max_depth == 12
    assert planner.trace_expansions


# ═══════════════════════════════════════════════════════════════════════════
# TEST: EVENT LOGGER
# ═══════════════════════════════════════════════════════════════════════════

def test_event_to_dict_skips_empty_fields():
    """Puste agent_id/target_id/data nie trafiają do JSON."""
    event = PlanningEvent(tick=1, event_type=EventType.PLAN_REQUESTED)
    assert event.to_dict() == {"tick": 1, "type": "PLAN_REQUESTED"}


def test_logger_queries():
    """Filtrowanie po typie, agencie i ticku."""
    logger = EventLogger()
    logger.log_event(0, EventType.STEP_STARTED, agent_id="a")
    logger.log_event(0, EventType.STEP_SUCCEEDED, agent_id="a")
    logger.log_event(1, EventType.STEP_STARTED, agent_id="b")

    assert logger.get_event_count() == 3
    assert len(logger.get_events_by_type(EventType.STEP_STARTED)) == 2
    assert len(logger.get_events_for_agent("a")) == 2
    assert len(logger.get_events_in_tick(1)) == 1
    assert logger.summary() == {"STEP_STARTED": 2, "STEP_SUCCEEDED": 1}

    logger.clear()
    assert logger.get_event_count() == 0


def test_planning_log_is_json_serializable():
    """Pełny log planowania (z pozycjami hex) serializuje się do JSON."""
    logger = EventLogger(source="test", scenario="duel")
    state = WorldState({"at(u)": HexCoord(0, 0), "at(orc)": HexCoord(0, 0), "alive(orc)": True})
    ctx = GroundingContext(agent_id="u", domains={"enemies": ["orc"]})
    Planner(ActionRegistry([attack()]), logger=logger).plan(
        state, Goal({"alive(orc)": False, "at(u)": HexCoord(0, 0)}), ctx,
    )

    data = json.loads(logger.to_json())

    assert data["metadata"]["source"] == "test"
    assert data["metadata"]["scenario"] == "duel"
    assert data["summary"] == {"PLAN_REQUESTED": 1, "PLAN_FOUND": 1}
    assert data["events"][0]["data"]["goal"]["conditions"]["at(u)"] == [0, 0]


def test_save_creates_directories(tmp_path):
    """save() tworzy brakujące katalogi."""
    logger = EventLogger()
    logger.log_event(0, EventType.PLAN_COMPLETED, agent_id="u")
    path = tmp_path / "out" / "log.json"

    logger.save(str(path))

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["events"][0]["type"] == "PLAN_COMPLETED"
