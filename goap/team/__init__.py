"""
Team module - koordynacja planów wielu agentów.

Zawiera:
- TeamCoordinator: Rezerwacje zasobów i rozstrzyganie konfliktów
- plan_for_team: Sekwencyjne planowanie drużyny na wspólnym stanie
"""

from .coordinator import TeamCoordinator, TeamAllocation, TeamPlan, Reservation, plan_for_team

__all__ = ["TeamCoordinator", "TeamAllocation", "TeamPlan", "Reservation", "plan_for_team"]
