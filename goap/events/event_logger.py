"""
System logowania zdarzeń planowania i wykonania do formatu JSON.

Każde istotne zdarzenie (żądanie planu, wynik wyszukiwania, krok
egzekutora, rezerwacja zasobu) jest zapisywane z pełnym kontekstem.
Log można później przejrzeć albo odtworzyć w narzędziu debugującym.

TYPY ZDARZEŃ:
═══════════════════════════════════════════════════════════════════

    PLAN_REQUESTED
    ─────────────────────────────────────────────────────────────
    Start wyszukiwania.
    Data: goal, budget, facts (liczba faktów)

    PLAN_FOUND / PLAN_PARTIAL
    ─────────────────────────────────────────────────────────────
    Znaleziony plan (pełny lub częściowy dla miękkiego celu).
    Data: actions, cost, stats

    PLAN_FAILED / PLAN_CANCELLED
    ─────────────────────────────────────────────────────────────
    Brak planu (NO_PLAN_FOUND / BUDGET_EXCEEDED) lub anulowanie.
    Data: status, stats

    NODE_EXPANDED (opcjonalne - do debug)
    ─────────────────────────────────────────────────────────────
    Rozwinięcie węzła A*.
    Data: g, h, depth, state_hash

    STEP_STARTED / STEP_SUCCEEDED / STEP_RUNNING / STEP_FAILED
    ─────────────────────────────────────────────────────────────
    Krok egzekutora.
    Data: step, action

    NEEDS_REPLAN
    ─────────────────────────────────────────────────────────────
    Świat rozjechał się z planem albo plan unieważniono.
    Data: step, violations / reason

    PLAN_COMPLETED
    ─────────────────────────────────────────────────────────────
    Wszystkie kroki wykonane.

    RESERVATION_GRANTED / RESERVATION_REVOKED
    ─────────────────────────────────────────────────────────────
    Rozstrzygnięcie rezerwacji zasobu w drużynie.
    Data: resource, winner

FORMAT LOGU:
═══════════════════════════════════════════════════════════════════

{
    "metadata": {"version": "1.0", "source": "goap", "timestamp": "..."},
    "events": [
        {"tick": 0, "type": "PLAN_REQUESTED", "agent_id": "u1", "data": {...}},
        {"tick": 0, "type": "PLAN_FOUND", "agent_id": "u1", "data": {...}},
        ...
    ],
    "summary": {"PLAN_REQUESTED": 1, "PLAN_FOUND": 1}
}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional
import json


class EventType(Enum):
    """Typ zdarzenia planowania/wykonania."""

    # Planer
    PLAN_REQUESTED = auto()
    PLAN_FOUND = auto()
    PLAN_PARTIAL = auto()
    PLAN_FAILED = auto()
    PLAN_CANCELLED = auto()
    NODE_EXPANDED = auto()  # opcjonalne - do debug

    # Egzekutor
    STEP_STARTED = auto()
    STEP_SUCCEEDED = auto()
    STEP_RUNNING = auto()
    STEP_FAILED = auto()
    NEEDS_REPLAN = auto()
    PLAN_COMPLETED = auto()

    # Drużyna
    RESERVATION_GRANTED = auto()
    RESERVATION_REVOKED = auto()


@dataclass
class PlanningEvent:
    """
    Pojedyncze zdarzenie.

    Attributes:
        tick (int): Tura/tick gry podany przez wywołującego
        event_type (EventType): Typ zdarzenia
        agent_id (Optional[str]): Agent, którego dotyczy zdarzenie
        target_id (Optional[str]): Cel akcji / zasób (jeśli dotyczy)
        data (Dict): Dodatkowe dane specyficzne dla typu zdarzenia
    """
    tick: int
    event_type: EventType
    agent_id: Optional[str] = None
    target_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serializuje zdarzenie do słownika."""
        result: Dict[str, Any] = {
            "tick": self.tick,
            "type": self.event_type.name,
        }

        if self.agent_id:
            result["agent_id"] = self.agent_id
        if self.target_id:
            result["target_id"] = self.target_id
        if self.data:
            result["data"] = self.data

        return result


class EventLogger:
    """
    Logger zdarzeń planowania.

    Zbiera zdarzenia w pamięci i może je zapisać do pliku JSON.
    Planer, egzekutor i koordynator drużyny przyjmują opcjonalny logger -
    bez niego nic nie jest zbierane.

    Example:
        >>> logger = EventLogger()
        >>> planner = Planner(registry, logger=logger)
        >>> planner.plan(state, goal, context)
        >>> logger.save("output/plan_log.json")
    """

    def __init__(self, source: str = "goap", **metadata: Any):
        """
        Args:
            source: Nazwa źródła (np. id scenariusza)
            **metadata: Dodatkowe metadane zapisywane w nagłówku logu
        """
        self.events: List[PlanningEvent] = []
        self.metadata: Dict[str, Any] = {
            "version": "1.0",
            "source": source,
            "timestamp": datetime.now().isoformat(),
        }
        self.metadata.update(metadata)

    # ─────────────────────────────────────────────────────────────────────────
    # LOGOWANIE OGÓLNE
    # ─────────────────────────────────────────────────────────────────────────

    def log(self, event: PlanningEvent) -> None:
        """Dodaje zdarzenie do logu."""
        self.events.append(event)

    def log_event(
        self,
        tick: int,
        event_type: EventType,
        agent_id: Optional[str] = None,
        target_id: Optional[str] = None,
        **data: Any,
    ) -> PlanningEvent:
        """
        Tworzy i loguje zdarzenie.

        Returns:
            PlanningEvent: Utworzone zdarzenie
        """
        event = PlanningEvent(
            tick=tick,
            event_type=event_type,
            agent_id=agent_id,
            target_id=target_id,
            data=dict(data),
        )
        self.log(event)
        return event

    # ─────────────────────────────────────────────────────────────────────────
    # POMOCNICZE METODY LOGOWANIA
    # ─────────────────────────────────────────────────────────────────────────

    def log_plan_requested(
        self,
        tick: int,
        agent_id: Optional[str],
        goal: Dict[str, Any],
        budget: Dict[str, Any],
        fact_count: int,
    ) -> None:
        """Loguje start wyszukiwania."""
        self.log_event(
            tick,
            EventType.PLAN_REQUESTED,
            agent_id=agent_id,
            goal=goal,
            budget=budget,
            facts=fact_count,
        )

    def log_plan_result(self, tick: int, agent_id: Optional[str], result: Any) -> None:
        """Loguje wynik planowania (PlanningResult)."""
        status = result.status.name
        if status == "FOUND":
            event_type = EventType.PLAN_FOUND
        elif status == "PARTIAL":
            event_type = EventType.PLAN_PARTIAL
        elif status == "CANCELLED":
            event_type = EventType.PLAN_CANCELLED
        else:
            event_type = EventType.PLAN_FAILED

        data: Dict[str, Any] = {"status": status, "stats": result.stats.to_dict()}
        if result.plan is not None:
            data["actions"] = result.plan.names()
            data["cost"] = round(result.plan.cost, 3)
        self.log_event(tick, event_type, agent_id=agent_id, **data)

    def log_expansion(
        self,
        tick: int,
        agent_id: Optional[str],
        g: float,
        h: float,
        depth: int,
        state_hash: str,
    ) -> None:
        """Loguje rozwinięcie węzła."""
        self.log_event(
            tick,
            EventType.NODE_EXPANDED,
            agent_id=agent_id,
            g=round(g, 3),
            h=round(h, 3),
            depth=depth,
            state_hash=state_hash,
        )

    def log_step(
        self,
        tick: int,
        event_type: EventType,
        agent_id: Optional[str],
        step: int,
        action: Optional[str],
        **data: Any,
    ) -> None:
        """Loguje zdarzenie kroku egzekutora."""
        self.log_event(tick, event_type, agent_id=agent_id, step=step, action=action, **data)

    def log_reservation(
        self,
        tick: int,
        event_type: EventType,
        agent_id: str,
        resource: str,
        winner: Optional[str] = None,
    ) -> None:
        """Loguje przyznanie/odebranie rezerwacji."""
        data: Dict[str, Any] = {}
        if winner is not None:
            data["winner"] = winner
        self.log_event(tick, event_type, agent_id=agent_id, target_id=resource, **data)

    # ─────────────────────────────────────────────────────────────────────────
    # SERIALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializuje cały log do słownika.

        Returns:
            Dict: Pełny log w formacie dla JSON
        """
        return {
            "metadata": self.metadata,
            "events": [e.to_dict() for e in self.events],
            "summary": self.summary(),
        }

    def save(self, filepath: str) -> None:
        """Zapisuje log do pliku JSON (tworzy katalogi)."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Zwraca log jako string JSON (indent=None = compact)."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    # ─────────────────────────────────────────────────────────────────────────
    # STATYSTYKI
    # ─────────────────────────────────────────────────────────────────────────

    def summary(self) -> Dict[str, int]:
        """Liczba zdarzeń per typ (tylko typy, które wystąpiły)."""
        counts: Dict[str, int] = {}
        for event in self.events:
            counts[event.event_type.name] = counts.get(event.event_type.name, 0) + 1
        return counts

    def get_event_count(self) -> int:
        """Zwraca liczbę zdarzeń."""
        return len(self.events)

    def get_events_by_type(self, event_type: EventType) -> List[PlanningEvent]:
        """Filtruje zdarzenia po typie."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_for_agent(self, agent_id: str) -> List[PlanningEvent]:
        """Filtruje zdarzenia dla agenta."""
        return [e for e in self.events if e.agent_id == agent_id]

    def get_events_in_tick(self, tick: int) -> List[PlanningEvent]:
        """Filtruje zdarzenia w ticku."""
        return [e for e in self.events if e.tick == tick]

    def clear(self) -> None:
        self.events.clear()
