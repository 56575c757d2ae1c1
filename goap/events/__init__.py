"""
Events module - logowanie zdarzeń planowania do formatu JSON.

Zawiera:
- PlanningEvent: Dataclass reprezentująca zdarzenie
- EventType: Enum typów zdarzeń
- EventLogger: Klasa logująca zdarzenia
"""

from .event_logger import PlanningEvent, EventType, EventLogger

__all__ = ["PlanningEvent", "EventType", "EventLogger"]
