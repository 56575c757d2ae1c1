"""
Hierarchia wyjątków planera GOAP.

PODZIAŁ:
═══════════════════════════════════════════════════════════════════

    ConfigurationError (FATALNE)
    ─────────────────────────────────────────────────────────────
    Błąd w definicji treści (szablony akcji, domeny parametrów).
    Zgłaszany natychmiast - nigdy nie jest cicho pomijany.
        - InvalidGrounding: parametr nie daje się rozwiązać
        - NegativeCost: funkcja kosztu zwróciła wartość < 0
        - DuplicateTemplate: dwa szablony o tym samym id w rejestrze

    PlanningFailure (NORMALNY WYNIK)
    ─────────────────────────────────────────────────────────────
    Wyszukiwanie nie znalazło planu. Planer zwraca je jako wartość
    (PlanningResult); wyjątki poniżej rzuca tylko PlanningResult.unwrap().
        - NoPlanFound: cel nieosiągalny w przeszukanej przestrzeni
        - BudgetExceeded: przerwano przed wyczerpaniem przestrzeni
        - PlanningCancelled: wywołujący anulował wyszukiwanie

    ExecutorError
    ─────────────────────────────────────────────────────────────
    Niepoprawne użycie egzekutora (np. step() bez planu).

Naruszenie warunków wstępnych w trakcie wykonania NIE jest wyjątkiem -
to rekord PreconditionViolation w StepResult (patrz execution.executor).
"""

from __future__ import annotations
from typing import Any, Optional


class GoapError(Exception):
    """Bazowa klasa wszystkich błędów pakietu."""


# ─────────────────────────────────────────────────────────────────────────────
# BŁĘDY KONFIGURACJI
# ─────────────────────────────────────────────────────────────────────────────

class ConfigurationError(GoapError):
    """Defekt treści/konfiguracji - fatalny."""


class InvalidGrounding(ConfigurationError):
    """
    Parametr szablonu nie mógł zostać rozwiązany.

    Attributes:
        template_id: Id szablonu
        parameter: Nazwa nierozwiązanego parametru/zmiennej
    """

    def __init__(self, template_id: str, parameter: str, reason: str = ""):
        self.template_id = template_id
        self.parameter = parameter
        message = f"Template '{template_id}': cannot resolve '{parameter}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class NegativeCost(ConfigurationError):
    """Koszt akcji (bazowy lub kontekstowy) jest ujemny."""

    def __init__(self, template_id: str, cost: float, bindings: Optional[Any] = None):
        self.template_id = template_id
        self.cost = cost
        self.bindings = bindings
        where = f" for bindings {bindings}" if bindings else ""
        super().__init__(f"Template '{template_id}' produced negative cost {cost}{where}")


class DuplicateTemplate(ConfigurationError):
    """Rejestr zawiera już szablon o tym id."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template '{template_id}' is already registered")


# ─────────────────────────────────────────────────────────────────────────────
# NIEPOWODZENIA PLANOWANIA
# ─────────────────────────────────────────────────────────────────────────────

class PlanningFailure(GoapError):
    """Planer nie zwrócił planu (wynik odzyskiwalny)."""

    def __init__(self, message: str, result: Any = None):
        self.result = result
        super().__init__(message)


class NoPlanFound(PlanningFailure):
    """Cel nieosiągalny - przestrzeń stanów wyczerpana."""


class BudgetExceeded(PlanningFailure):
    """Przekroczono limit rozwinięć lub głębokości."""


class PlanningCancelled(PlanningFailure):
    """Wyszukiwanie anulowane przez wywołującego."""


# ─────────────────────────────────────────────────────────────────────────────
# EGZEKUTOR
# ─────────────────────────────────────────────────────────────────────────────

class ExecutorError(GoapError):
    """Niepoprawne użycie egzekutora planu."""
