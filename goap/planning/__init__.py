"""
Planning module - planer A* i typy wyników.

Zawiera:
- Planner, plan, SearchBudget: Wyszukiwanie A* w przestrzeni stanów
- Plan, PlanningResult, PlanStatus, SearchStats: Wyniki
- UnsatisfiedCountHeuristic, position_distance_heuristic, max_of: Heurystyki
"""

from .plan import Plan, PlanningResult, PlanStatus, SearchStats
from .heuristics import (
    Heuristic,
    UnsatisfiedCountHeuristic,
    zero_heuristic,
    position_distance_heuristic,
    max_of,
    default_heuristic,
)
from .planner import Planner, SearchBudget, plan

__all__ = [
    "Planner", "SearchBudget", "plan",
    "Plan", "PlanningResult", "PlanStatus", "SearchStats",
    "Heuristic", "UnsatisfiedCountHeuristic", "zero_heuristic",
    "position_distance_heuristic", "max_of", "default_heuristic",
]
