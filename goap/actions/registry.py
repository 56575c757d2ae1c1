"""
Rejestr szablonów akcji - niemutowalny obiekt konfiguracji.

Rejestr tworzy się raz (przy starcie procesu) i przekazuje przez referencję
do każdego wywołania planera. Nie jest globalnym singletonem: dwa rejestry
mogą istnieć obok siebie (np. w testach), a "dodanie" szablonu zwraca
NOWY rejestr.

Walidacja przy rejestracji:
    - duplikat id -> DuplicateTemplate
    - base_cost < 0 -> NegativeCost

Przykład:
    >>> registry = ActionRegistry([move_to(), attack(damage=30)])
    >>> registry.index_of("Attack")
    1
"""

from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import DuplicateTemplate, NegativeCost
from ..world.world_state import WorldState
from .grounding import GroundingContext, ground_all
from .instance import ActionInstance
from .template import ActionTemplate


class ActionRegistry:
    """
    Uporządkowany, niemutowalny zbiór szablonów.

    Kolejność rejestracji jest częścią reguły tie-break planera.

    Attributes:
        _templates (Tuple[ActionTemplate, ...]): Szablony w kolejności rejestracji
        _index (Dict[str, int]): id -> pozycja
    """

    __slots__ = ("_templates", "_index")

    def __init__(self, templates: Iterable[ActionTemplate] = ()):
        ordered: List[ActionTemplate] = []
        index: Dict[str, int] = {}
        for template in templates:
            if template.id in index:
                raise DuplicateTemplate(template.id)
            if not template.base_cost >= 0:
                raise NegativeCost(template.id, template.base_cost)
            index[template.id] = len(ordered)
            ordered.append(template)
        self._templates: Tuple[ActionTemplate, ...] = tuple(ordered)
        self._index = index

    def with_template(self, template: ActionTemplate) -> ActionRegistry:
        """Nowy rejestr z dopisanym szablonem (na końcu)."""
        return ActionRegistry(self._templates + (template,))

    def with_templates(self, templates: Iterable[ActionTemplate]) -> ActionRegistry:
        return ActionRegistry(self._templates + tuple(templates))

    # ─────────────────────────────────────────────────────────────────────────
    # DOSTĘP
    # ─────────────────────────────────────────────────────────────────────────

    def get(self, template_id: str) -> Optional[ActionTemplate]:
        index = self._index.get(template_id)
        return None if index is None else self._templates[index]

    def index_of(self, template_id: str) -> int:
        """
        Raises:
            KeyError: Jeśli szablonu nie ma w rejestrze
        """
        return self._index[template_id]

    @property
    def templates(self) -> Tuple[ActionTemplate, ...]:
        return self._templates

    @property
    def min_base_cost(self) -> float:
        """Najniższy koszt bazowy - dolne ograniczenie kosztu dowolnej akcji."""
        if not self._templates:
            return 0.0
        return min(t.base_cost for t in self._templates)

    @property
    def max_effect_width(self) -> int:
        """Najwięcej faktów zmienianych przez jedną akcję."""
        if not self._templates:
            return 0
        return max(t.effect_width for t in self._templates)

    # ─────────────────────────────────────────────────────────────────────────
    # GROUNDING
    # ─────────────────────────────────────────────────────────────────────────

    def ground(
        self,
        state: WorldState,
        context: Optional[GroundingContext] = None,
        applicable_only: bool = True,
    ) -> List[ActionInstance]:
        """Gruntuje wszystkie szablony względem stanu (domyślnie tylko wykonalne)."""
        return ground_all(self._templates, state, context, applicable_only)

    def __iter__(self) -> Iterator[ActionTemplate]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._index

    def __repr__(self) -> str:
        return f"ActionRegistry({', '.join(t.id for t in self._templates)})"
