"""
Actions module - szablony akcji, grounding i rejestr.

Zawiera:
- ActionTemplate, Parameter, Condition, Effect, Ref, FactOf: Opis szablonu
- ActionInstance: Akcja z związanymi parametrami
- GroundingContext, ground_template, ground_all: Grounding
- ActionRegistry: Niemutowalny rejestr szablonów
- move_to, attack, pickup: Gotowe szablony gry taktycznej
"""

from .template import ActionTemplate, Parameter, Condition, Effect, Ref, FactOf, placeholders
from .instance import ActionInstance
from .grounding import GroundingContext, ground_template, ground_all
from .registry import ActionRegistry
from .library import move_to, attack, pickup, default_templates, hex_distance

__all__ = [
    "ActionTemplate", "Parameter", "Condition", "Effect", "Ref", "FactOf", "placeholders",
    "ActionInstance",
    "GroundingContext", "ground_template", "ground_all",
    "ActionRegistry",
    "move_to", "attack", "pickup", "default_templates", "hex_distance",
]
