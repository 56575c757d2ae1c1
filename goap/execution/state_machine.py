"""
Maszyna stanów egzekutora planu.

Egzekutor ma JEDEN aktualny stan, który określa co robi z planem.

STANY:
═══════════════════════════════════════════════════════════════════

    IDLE (Bezczynność)
    ─────────────────────────────────────────────────────────────
    Brak planu. Wejście: utworzenie egzekutora, abort().
    Wyjście: -> EXECUTING (start(plan))

    EXECUTING (Wykonywanie)
    ─────────────────────────────────────────────────────────────
    Kolejne kroki planu. Przed każdym krokiem warunki wstępne są
    sprawdzane względem ŻYWEGO świata.
    Wyjście:
        -> COMPLETED (wszystkie kroki wykonane)
        -> NEEDS_REPLAN (warunek wstępny niespełniony / unieważnienie)
        -> FAILED (nieodwracalna porażka akcji, np. cel zniknął)
        -> IDLE (abort)

    COMPLETED / FAILED / NEEDS_REPLAN
    ─────────────────────────────────────────────────────────────
    Stany końcowe DLA DANEGO PLANU. Wywołujący musi podać nowy plan.
    Wyjście: -> EXECUTING (start(nowy plan)), -> IDLE (abort/reset)

DIAGRAM TRANZYCJI:
═══════════════════════════════════════════════════════════════════

        ┌──────────┐   start    ┌─────────────┐
        │   IDLE   │───────────►│  EXECUTING  │
        └──────────┘            └──────┬──────┘
             ▲                         │
             │ abort      ┌────────────┼─────────────┐
             │            ▼            ▼             ▼
             │     ┌───────────┐ ┌──────────┐ ┌──────────────┐
             └─────│ COMPLETED │ │  FAILED  │ │ NEEDS_REPLAN │
                   └───────────┘ └──────────┘ └──────────────┘
                         │  start(nowy plan) -> EXECUTING  │
"""

from __future__ import annotations
from enum import Enum, auto
from typing import Dict, FrozenSet, Optional


class ExecutorState(Enum):
    """Stan egzekutora."""

    IDLE = auto()
    EXECUTING = auto()
    COMPLETED = auto()
    FAILED = auto()
    NEEDS_REPLAN = auto()

    def is_terminal(self) -> bool:
        """Czy plan się skończył (sukcesem lub nie)."""
        return self in (ExecutorState.COMPLETED, ExecutorState.FAILED, ExecutorState.NEEDS_REPLAN)

    def can_step(self) -> bool:
        return self == ExecutorState.EXECUTING

    def __str__(self) -> str:
        return self.name


_TERMINAL_EXITS = frozenset({ExecutorState.EXECUTING, ExecutorState.IDLE})

ALLOWED_TRANSITIONS: Dict[ExecutorState, FrozenSet[ExecutorState]] = {
    ExecutorState.IDLE: frozenset({ExecutorState.EXECUTING}),
    ExecutorState.EXECUTING: frozenset({
        ExecutorState.EXECUTING,  # zastąpienie planu nowym
        ExecutorState.COMPLETED,
        ExecutorState.FAILED,
        ExecutorState.NEEDS_REPLAN,
        ExecutorState.IDLE,
    }),
    ExecutorState.COMPLETED: _TERMINAL_EXITS,
    ExecutorState.FAILED: _TERMINAL_EXITS,
    ExecutorState.NEEDS_REPLAN: _TERMINAL_EXITS,
}


class ExecutorStateMachine:
    """
    Pilnuje dozwolonych tranzycji egzekutora.

    Attributes:
        current (ExecutorState): Aktualny stan
        previous (Optional[ExecutorState]): Poprzedni stan
    """

    def __init__(self, initial: ExecutorState = ExecutorState.IDLE):
        self.current: ExecutorState = initial
        self.previous: Optional[ExecutorState] = None

    def can_transition(self, new_state: ExecutorState) -> bool:
        return new_state in ALLOWED_TRANSITIONS[self.current]

    def transition_to(self, new_state: ExecutorState) -> bool:
        """
        Przechodzi do nowego stanu.

        Returns:
            bool: True jeśli tranzycja dozwolona (i wykonana)
        """
        if not self.can_transition(new_state):
            return False
        self.previous = self.current
        self.current = new_state
        return True

    def reset(self) -> None:
        """Powrót do IDLE."""
        self.previous = self.current
        self.current = ExecutorState.IDLE

    def __repr__(self) -> str:
        return f"ExecutorStateMachine({self.current.name})"
