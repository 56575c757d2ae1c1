"""
Execution module - wykonywanie planów na żywym świecie.

Zawiera:
- PlanExecutor: Egzekutor planu krok po kroku
- ExecutorState, ExecutorStateMachine: Stany egzekutora
- ActionOutcome, StepStatus, StepResult, PreconditionViolation: Wyniki kroków
"""

from .state_machine import ExecutorState, ExecutorStateMachine, ALLOWED_TRANSITIONS
from .executor import (
    PlanExecutor,
    ActionPerformer,
    ActionOutcome,
    StepStatus,
    StepResult,
    PreconditionViolation,
)

__all__ = [
    "PlanExecutor", "ActionPerformer", "ActionOutcome", "StepStatus", "StepResult",
    "PreconditionViolation", "ExecutorState", "ExecutorStateMachine", "ALLOWED_TRANSITIONS",
]
