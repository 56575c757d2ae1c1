"""
Planning router - planowanie GOAP na stockowych szablonach akcji.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List, Dict, Any, Optional
from pathlib import Path

from goap.actions import ActionRegistry, GroundingContext, attack, move_to, pickup
from goap.core.config_loader import ConfigLoader
from goap.core.hex_coord import HexCoord
from goap.errors import ConfigurationError
from goap.goals import Goal, parse_strategic_goal, select_strategic_goal
from goap.planning import Planner, SearchBudget
from goap.world import WorldState


router = APIRouter()

DATA_PATH = Path(__file__).parent.parent.parent / "data"
_loader = ConfigLoader(str(DATA_PATH))


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST/RESPONSE MODELS
# ═══════════════════════════════════════════════════════════════════════════

class Domains(BaseModel):
    """Kandydaci parametrów szablonów."""
    positions: List[List[int]] = []  # [[q, r], ...]
    enemies: List[str] = []
    items: List[str] = []


class PlanRequest(BaseModel):
    """Request do planowania."""
    agent_id: str
    facts: Dict[str, Any]  # wartości [q, r] to pozycje hex
    goal: Dict[str, Any]
    goal_name: str = ""
    soft: bool = False
    weights: Optional[Dict[str, float]] = None
    domains: Domains = Domains()
    attack_damage: int = 1
    attack_range: int = 0
    max_expansions: Optional[int] = None
    max_depth: Optional[int] = None


class StrategicRequest(BaseModel):
    """Request do rozkładu celu strategicznego na cel na tę turę."""
    unit_id: str
    facts: Dict[str, Any]
    goals: List[str]  # np. ["KillAllEnemies:5", "ReachArea:3,0:rally"]


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def _to_fact_value(value: Any) -> Any:
    """JSON -> wartość faktu (lista dwóch liczb = HexCoord)."""
    if isinstance(value, list):
        return HexCoord.parse(value)
    return value


def _to_state(facts: Dict[str, Any]) -> WorldState:
    try:
        return WorldState({key: _to_fact_value(value) for key, value in facts.items()})
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid fact: {e}")


def _budget(request: PlanRequest) -> SearchBudget:
    config = _loader.load_planner_config()
    if request.max_expansions is not None:
        config["max_expansions"] = request.max_expansions
    if request.max_depth is not None:
        config["max_depth"] = request.max_depth
    return SearchBudget.from_config(config)


# ═══════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/templates")
async def get_templates() -> List[Dict[str, Any]]:
    """Zwraca listę stockowych szablonów akcji."""
    registry = ActionRegistry([move_to(), attack(), pickup()])
    return [
        {
            "id": template.id,
            "parameters": [p.name for p in template.parameters],
            "base_cost": template.base_cost,
            "claims": list(template.claims),
        }
        for template in registry
    ]


@router.post("/plan")
async def create_plan(request: PlanRequest) -> Dict[str, Any]:
    """
    Planuje sekwencję akcji dla agenta.

    Args:
        request: Fakty świata, cel i domeny parametrów

    Returns:
        Wynik planowania (status, plan, statystyki)
    """
    start = _to_state(request.facts)
    try:
        goal = Goal(
            {key: _to_fact_value(value) for key, value in request.goal.items()},
            name=request.goal_name,
            weights=request.weights,
            soft=request.soft,
        )
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid goal: {e}")

    try:
        positions = [HexCoord.parse(p) for p in request.domains.positions]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid position: {e}")

    context = GroundingContext(
        agent_id=request.agent_id,
        domains={
            "positions": positions,
            "enemies": list(request.domains.enemies),
            "items": list(request.domains.items),
        },
    )

    try:
        registry = ActionRegistry([
            move_to(),
            attack(damage=request.attack_damage, range_=request.attack_range),
            pickup(),
        ])
        result = Planner(registry, budget=_budget(request)).plan(start, goal, context)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    response = result.to_dict()
    response["actions"] = result.plan.names() if result.plan is not None else []
    return response


@router.post("/strategic")
async def decompose_strategic(request: StrategicRequest) -> Dict[str, Any]:
    """
    Wybiera cel strategiczny i rozkłada go na cel na bieżącą turę.

    Returns:
        Wybrany cel strategiczny i cel krótkoterminowy (albo null)
    """
    state = _to_state(request.facts)
    goals = []
    for text in request.goals:
        parsed = parse_strategic_goal(text)
        if parsed is None:
            raise HTTPException(status_code=400, detail=f"Unknown strategic goal: {text}")
        goals.append(parsed)

    selected = select_strategic_goal(goals, state, request.unit_id)
    if selected is None:
        return {"selected": None, "goal": None}
    short_term = selected.decompose(state, request.unit_id)
    return {
        "selected": selected.to_string(),
        "goal": short_term.to_dict() if short_term is not None else None,
    }
