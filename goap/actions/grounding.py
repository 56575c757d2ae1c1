"""
Grounding - wiązanie parametrów szablonów z konkretnymi wartościami.

Jak działa grounding:
    1. Dla każdego parametru pobierz domenę z GroundingContext
       (lista wartości lub funkcja stan -> wartości)
    2. Przejdź po iloczynie kartezjańskim domen (w kolejności domen)
    3. Dla każdego wiązania:
       a. guard(bindings, state) == False -> pomiń
       b. rozwiąż wzorce kluczy i wartości warunków
          - wartość niemożliwa do wyznaczenia -> pomiń wiązanie
       c. rozwiąż efekty (None = efekt pominięty)
       d. policz koszt = base_cost + cost_fn(bindings, state)
    4. Zwróć instancje w deterministycznej kolejności

Przypadki brzegowe:
    - Pusta domena: zero instancji (no-op, nie błąd)
    - Brak domeny w kontekście: InvalidGrounding
    - Wzorzec odwołuje się do nieznanej nazwy: InvalidGrounding
    - Wartość nie jest dozwolonym typem faktu: InvalidGrounding
    - cost_fn < 0: NegativeCost
"""

from __future__ import annotations
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import InvalidGrounding, NegativeCost
from ..world.facts import is_fact_value
from ..world.world_state import WorldState
from .instance import ActionInstance
from .template import ActionTemplate, FactOf, Ref, ValueSpec


Domain = Union[Sequence[Any], Callable[[WorldState], Iterable[Any]]]

# Znacznik "wartości nie da się wyznaczyć" - odrzuca wiązanie
_UNRESOLVED = object()


@dataclass(frozen=True)
class GroundingContext:
    """
    Kontekst agenta, dla którego gruntujemy szablony.

    Attributes:
        agent_id: Id agenta (zmienna ``{agent}`` we wzorcach)
        team: Drużyna agenta (zmienna ``{team}``)
        domains: Nazwa domeny -> kandydaci (sekwencja lub funkcja stanu)
        variables: Dodatkowe zmienne dostępne we wzorcach i Ref

    Example:
        >>> ctx = GroundingContext(
        ...     agent_id="u1",
        ...     domains={"positions": [HexCoord(0, 0), HexCoord(1, 0)]},
        ... )
    """
    agent_id: Optional[str] = None
    team: Optional[str] = None
    domains: Mapping[str, Domain] = field(default_factory=dict)
    variables: Mapping[str, Any] = field(default_factory=dict)

    def base_bindings(self) -> Dict[str, Any]:
        """Zmienne kontekstu widoczne dla każdego szablonu."""
        result: Dict[str, Any] = {}
        if self.agent_id is not None:
            result["agent"] = self.agent_id
        if self.team is not None:
            result["team"] = self.team
        result.update(self.variables)
        return result

    def domain_values(self, template_id: str, domain_name: str, state: WorldState) -> List[Any]:
        """
        Kandydaci domeny dla danego stanu.

        Raises:
            InvalidGrounding: Jeśli kontekst nie zna tej domeny
        """
        if domain_name not in self.domains:
            raise InvalidGrounding(template_id, domain_name, "no such domain in grounding context")
        domain = self.domains[domain_name]
        if callable(domain):
            return list(domain(state))
        return list(domain)

    def with_domains(self, **domains: Domain) -> GroundingContext:
        merged = dict(self.domains)
        merged.update(domains)
        return GroundingContext(self.agent_id, self.team, merged, self.variables)


# ─────────────────────────────────────────────────────────────────────────────
# ROZWIĄZYWANIE WZORCÓW
# ─────────────────────────────────────────────────────────────────────────────

def _resolve_key(template: ActionTemplate, pattern: str, bindings: Mapping[str, Any]) -> str:
    try:
        return pattern.format_map(bindings)
    except KeyError as exc:
        raise InvalidGrounding(template.id, str(exc.args[0]), f"in key pattern {pattern!r}") from exc
    except (IndexError, ValueError) as exc:
        raise InvalidGrounding(template.id, pattern, "malformed key pattern") from exc


def _resolve_value(
    template: ActionTemplate,
    spec: ValueSpec,
    bindings: Mapping[str, Any],
    state: WorldState,
) -> Any:
    """Zwraca wartość, None (callable odmówił) albo _UNRESOLVED (brak faktu)."""
    if isinstance(spec, Ref):
        if spec.name not in bindings:
            raise InvalidGrounding(template.id, spec.name, "unknown reference")
        return bindings[spec.name]
    if isinstance(spec, FactOf):
        key = _resolve_key(template, spec.key, bindings)
        if key not in state:
            return _UNRESOLVED
        return state.get(key)
    if callable(spec) and not isinstance(spec, type):
        return spec(bindings, state)
    return spec


def _check_value(template: ActionTemplate, key: str, value: Any) -> None:
    if not is_fact_value(value):
        raise InvalidGrounding(template.id, key, f"value {value!r} is not a fact value")


def _bind(
    template: ActionTemplate,
    template_index: int,
    binding_index: int,
    bindings: Dict[str, Any],
    state: WorldState,
    context: GroundingContext,
) -> Optional[ActionInstance]:
    """Buduje instancję dla jednego wiązania albo None gdy wiązanie odpada."""
    if template.guard is not None and not template.guard(bindings, state):
        return None

    preconditions: List[Tuple[str, Any]] = []
    for condition in template.preconditions:
        key = _resolve_key(template, condition.key, bindings)
        value = _resolve_value(template, condition.value, bindings, state)
        if value is None or value is _UNRESOLVED:
            return None
        _check_value(template, key, value)
        preconditions.append((key, value))

    effects: List[Tuple[str, Any]] = []
    for effect in template.effects:
        key = _resolve_key(template, effect.key, bindings)
        value = _resolve_value(template, effect.value, bindings, state)
        if value is _UNRESOLVED:
            return None
        if value is None:
            continue
        _check_value(template, key, value)
        effects.append((key, value))

    extra = 0.0
    if template.cost_fn is not None:
        extra = template.cost_fn(bindings, state)
        if not extra >= 0:
            raise NegativeCost(template.id, extra, _param_items(template, bindings))

    claims = tuple(_resolve_key(template, pattern, bindings) for pattern in template.claims)

    return ActionInstance(
        template_id=template.id,
        bindings=_param_items(template, bindings),
        preconditions=tuple(preconditions),
        effects=tuple(effects),
        cost=float(template.base_cost + extra),
        agent=context.agent_id,
        claims=claims,
        duration=template.duration,
        order=(template_index, binding_index),
    )


def _param_items(template: ActionTemplate, bindings: Mapping[str, Any]) -> Tuple[Tuple[str, Any], ...]:
    return tuple((name, bindings[name]) for name in template.parameter_names)


# ─────────────────────────────────────────────────────────────────────────────
# API
# ─────────────────────────────────────────────────────────────────────────────

def ground_template(
    template: ActionTemplate,
    state: WorldState,
    context: Optional[GroundingContext] = None,
    template_index: int = 0,
    applicable_only: bool = False,
) -> List[ActionInstance]:
    """
    Gruntuje jeden szablon względem stanu.

    Args:
        template: Szablon do ugruntowania
        state: Stan, względem którego rozwiązujemy FactOf/callable
        context: Kontekst agenta (domeny, zmienne)
        template_index: Pozycja szablonu w rejestrze (tie-break)
        applicable_only: Zwróć tylko instancje spełnione w ``state``

    Returns:
        List[ActionInstance]: Instancje w kolejności (domena1, domena2, ...)

    Raises:
        InvalidGrounding: Nierozwiązywalny parametr/zmienna
        NegativeCost: Ujemny koszt kontekstowy
    """
    context = context or GroundingContext()
    base = context.base_bindings()
    for name in template.referenced_names():
        if name not in base and name not in template.parameter_names:
            raise InvalidGrounding(template.id, name, "not a parameter or context variable")

    domains = [
        context.domain_values(template.id, param.domain_name, state)
        for param in template.parameters
    ]

    instances: List[ActionInstance] = []
    for binding_index, combo in enumerate(product(*domains)):
        bindings = dict(base)
        bindings.update(zip(template.parameter_names, combo))
        instance = _bind(template, template_index, binding_index, bindings, state, context)
        if instance is None:
            continue
        if applicable_only and not instance.is_applicable(state):
            continue
        instances.append(instance)
    return instances


def ground_all(
    templates: Iterable[ActionTemplate],
    state: WorldState,
    context: Optional[GroundingContext] = None,
    applicable_only: bool = False,
) -> List[ActionInstance]:
    """Gruntuje wszystkie szablony w kolejności rejestracji."""
    result: List[ActionInstance] = []
    for index, template in enumerate(templates):
        result.extend(ground_template(template, state, context, index, applicable_only))
    return result
