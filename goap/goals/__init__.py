"""
Goals module - cele planowania.

Zawiera:
- Goal: Koniunkcja warunków na faktach (twarda lub miękka)
- StrategicGoal i podklasy: Cele długoterminowe rozkładane na Goal
"""

from .goal import Goal
from .strategic import (
    StrategicGoal,
    KillAllEnemies,
    Protect,
    ReachArea,
    SiegeCastle,
    parse_strategic_goal,
    select_strategic_goal,
    reach_position_goal,
)

__all__ = [
    "Goal",
    "StrategicGoal", "KillAllEnemies", "Protect", "ReachArea", "SiegeCastle",
    "parse_strategic_goal", "select_strategic_goal", "reach_position_goal",
]
