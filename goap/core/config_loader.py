"""
Loader konfiguracji planera z automatycznym uzupełnianiem wartości domyślnych.

Konfiguracja żyje w pliku YAML (``data/defaults.yaml``):

    planner:
        max_expansions: 5000
        max_depth: 12
        trace_expansions: false
    executor:
        revalidate_running: false
    team:
        max_expansions_per_agent: 2000

Logika merge:
    1. Zacznij od wbudowanych BUILTIN_DEFAULTS
    2. Nadpisz wartościami z defaults.yaml (jeśli plik istnieje)
    3. Nadpisz overrides podanymi przez wywołującego

Dzięki temu brak pliku nie jest błędem - planer zawsze ma sensowne limity.

Użycie:
    >>> loader = ConfigLoader("data/")
    >>> loader.load_planner_config({"max_depth": 4})["max_depth"]
    4
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import copy

import yaml


BUILTIN_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "planner": {
        "max_expansions": 5000,
        "max_depth": 12,
        "trace_expansions": False,
    },
    "executor": {
        "revalidate_running": False,
    },
    "team": {
        "max_expansions_per_agent": 2000,
    },
}


class ConfigLoader:
    """
    Ładuje konfigurację z pliku YAML z automatycznym merge defaults.

    Attributes:
        data_path (Path): Ścieżka do folderu z defaults.yaml
        _defaults (Dict): Cache wczytanych (i zmergowanych) defaults
    """

    def __init__(self, data_path: str = "data/", filename: str = "defaults.yaml"):
        """
        Args:
            data_path: Ścieżka do folderu z plikami YAML
            filename: Nazwa pliku z wartościami domyślnymi
        """
        self.data_path = Path(data_path)
        self.filename = filename
        self._defaults: Optional[Dict[str, Any]] = None

    # ─────────────────────────────────────────────────────────────────────────
    # WCZYTYWANIE PLIKÓW
    # ─────────────────────────────────────────────────────────────────────────

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Wczytuje plik YAML, zwraca {} gdy pliku nie ma.

        Raises:
            yaml.YAMLError: Jeśli plik istnieje, ale jest niepoprawny
        """
        filepath = self.data_path / self.filename
        if not filepath.exists():
            return {}
        with open(filepath, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def get_defaults(self) -> Dict[str, Any]:
        """
        Zwraca pełną konfigurację (builtin + plik).

        Cache'uje wynik - kolejne wywołania są szybkie.
        """
        if self._defaults is None:
            self._defaults = self._deep_merge(BUILTIN_DEFAULTS, self._load_yaml())
        return self._defaults

    def _section(self, name: str, overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        section = copy.deepcopy(self.get_defaults().get(name, {}))
        if overrides:
            section = self._deep_merge(section, overrides)
        return section

    def load_planner_config(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Sekcja ``planner`` z nałożonymi overrides."""
        return self._section("planner", overrides)

    def load_executor_config(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Sekcja ``executor`` z nałożonymi overrides."""
        return self._section("executor", overrides)

    def load_team_config(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Sekcja ``team`` z nałożonymi overrides."""
        return self._section("team", overrides)

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _deep_merge(base: Dict, override: Dict) -> Dict:
        """
        Głęboko łączy dwa słowniki.

        Override nadpisuje wartości w base, nested dicts są merge'owane
        rekurencyjnie.
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def reload(self) -> None:
        """Czyści cache i wymusza ponowne wczytanie pliku."""
        self._defaults = None
