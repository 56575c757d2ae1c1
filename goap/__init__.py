"""
GOAP - planowanie akcji zorientowane na cele dla gier taktycznych na siatce hex.

Planer A* szuka najtańszej sekwencji akcji prowadzącej od snapshotu
świata do stanu spełniającego cel; egzekutor wykonuje ją krok po kroku,
sprawdzając warunki na żywym świecie.

Przykład użycia:
    >>> from goap import ActionRegistry, GroundingContext, Goal, HexCoord, Planner, WorldState, move_to
    >>> registry = ActionRegistry([move_to()])
    >>> start = WorldState({"at(u)": HexCoord(0, 0)})
    >>> ctx = GroundingContext(agent_id="u", domains={"positions": [HexCoord(2, 0)]})
    >>> Planner(registry).plan(start, Goal({"at(u)": HexCoord(2, 0)}), ctx).unwrap()
    Plan(MoveTo((2, 0)), cost=2.0)
"""

from .core import HexCoord, hexes_in_range, ConfigLoader
from .world import WorldState, FactSource, fact_key
from .goals import (
    Goal,
    StrategicGoal,
    KillAllEnemies,
    Protect,
    ReachArea,
    SiegeCastle,
    parse_strategic_goal,
    select_strategic_goal,
)
from .actions import (
    ActionTemplate,
    ActionInstance,
    Parameter,
    Condition,
    Effect,
    Ref,
    FactOf,
    GroundingContext,
    ActionRegistry,
    move_to,
    attack,
    pickup,
    default_templates,
)
from .planning import Planner, SearchBudget, Plan, PlanningResult, PlanStatus, plan
from .execution import PlanExecutor, ActionOutcome, StepStatus, StepResult, ExecutorState
from .team import TeamCoordinator, plan_for_team
from .events import EventLogger, EventType
from .errors import (
    GoapError,
    ConfigurationError,
    InvalidGrounding,
    NegativeCost,
    DuplicateTemplate,
    PlanningFailure,
    NoPlanFound,
    BudgetExceeded,
    PlanningCancelled,
    ExecutorError,
)

__version__ = "0.1.0"
