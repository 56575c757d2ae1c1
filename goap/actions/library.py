"""
Gotowe szablony akcji dla gry taktycznej na siatce hex.

Planer nie zna ras, sprite'ów ani wzorów na obrażenia - te szablony
opisują akcje WYŁĄCZNIE w języku faktów. Faktyczny ruch/atak/podniesienie
wykonuje kod gry, kiedy egzekutor da sygnał.

KONWENCJA FAKTÓW:
═══════════════════════════════════════════════════════════════════

    at(<id>)              HexCoord   pozycja jednostki / przedmiotu
    alive(<id>)           bool       czy jednostka żyje
    health(<id>)          int        punkty życia
    in_combat(<id>)       bool       czy agent walczy
    item_available(<id>)  bool       czy przedmiot leży na planszy
    holding(<id>)         str        id trzymanego przedmiotu

SZABLONY:
═══════════════════════════════════════════════════════════════════

    MoveTo(target)        domena "positions"
        efekt: at(agent) = target
        koszt: base_cost + odległość(aktualna pozycja, target)

    Attack(enemy)         domena "enemies"
        warunki: alive(enemy) = True, at(agent) = at(enemy)
        efekty:  health(enemy) -= damage, alive(enemy) = False gdy hp <= 0,
                 in_combat(agent) = True

    Attack(enemy, stand)  gdy range_ > 0: dodatkowy parametr "stand"
        (domena "positions"), tylko hexy w zasięgu od wroga,
        warunek at(agent) = stand

    Pickup(item)          domena "items"
        warunki: at(agent) = at(item), item_available(item) = True
        efekty:  holding(agent) = item, item_available(item) = False
        rezerwacja: "item:<item>"
"""

from __future__ import annotations
from typing import Any, Callable, Mapping, Optional

from ..core.hex_coord import HexCoord
from ..world.facts import fact_key
from ..world.world_state import WorldState
from .template import ActionTemplate, Condition, Effect, FactOf, Parameter, Ref


DistanceFn = Callable[[Any, Any], float]


def hex_distance(a: Any, b: Any) -> float:
    """
    Odległość między pozycjami.

    HexCoord -> dystans hex; inne wartości (symboliczne pozycje) -> 0 gdy
    równe, 1 w przeciwnym razie.
    """
    if isinstance(a, HexCoord) and isinstance(b, HexCoord):
        return float(a.distance(b))
    return 0.0 if a == b else 1.0


# ─────────────────────────────────────────────────────────────────────────────
# MOVE
# ─────────────────────────────────────────────────────────────────────────────

def move_to(
    base_cost: float = 0.0,
    domain: str = "positions",
    distance: DistanceFn = hex_distance,
    require_alive: bool = False,
    template_id: str = "MoveTo",
) -> ActionTemplate:
    """
    Szablon ruchu na pozycję z domeny.

    Wiązania "ruch na miejsce" (target == aktualna pozycja) są odrzucane,
    tak samo gdy agent nie ma faktu pozycji.

    Args:
        base_cost: Stały koszt ruchu
        domain: Nazwa domeny pozycji docelowych
        distance: Funkcja odległości (koszt kontekstowy)
        require_alive: Dodaj warunek alive(agent) = True
    """
    def current_position(bindings: Mapping[str, Any], state: WorldState) -> Any:
        return state.get(fact_key("at", bindings["agent"]))

    def guard(bindings: Mapping[str, Any], state: WorldState) -> bool:
        current = current_position(bindings, state)
        return current is not None and current != bindings["target"]

    def cost(bindings: Mapping[str, Any], state: WorldState) -> float:
        return distance(current_position(bindings, state), bindings["target"])

    preconditions = [Condition("alive({agent})", True)] if require_alive else []

    return ActionTemplate(
        id=template_id,
        parameters=[Parameter("target", domain=domain)],
        preconditions=preconditions,
        effects=[Effect("at({agent})", Ref("target"))],
        base_cost=base_cost,
        cost_fn=cost,
        guard=guard,
    )


# ─────────────────────────────────────────────────────────────────────────────
# ATTACK
# ─────────────────────────────────────────────────────────────────────────────

def attack(
    damage: int = 1,
    base_cost: float = 1.0,
    range_: int = 0,
    domain: str = "enemies",
    positions_domain: str = "positions",
    template_id: str = "Attack",
) -> ActionTemplate:
    """
    Szablon ataku na wroga z domeny.

    Gdy wróg ma fakt health - atak odejmuje ``damage`` (min 0) i zabija
    dopiero przy 0. Bez faktu health atak od razu zabija.

    Args:
        damage: Obrażenia jednego ataku
        base_cost: Koszt ataku
        range_: 0 = walka wręcz (ta sama pozycja), >0 = zasięg w hexach
        domain: Domena id wrogów
        positions_domain: Domena pozycji do strzału (tylko range_ > 0)
    """
    def new_health(bindings: Mapping[str, Any], state: WorldState) -> Optional[int]:
        health = state.get(fact_key("health", bindings["enemy"]))
        if not isinstance(health, int) or isinstance(health, bool):
            return None
        return max(0, health - damage)

    def killed(bindings: Mapping[str, Any], state: WorldState) -> Optional[bool]:
        remaining = new_health(bindings, state)
        if remaining is None or remaining <= 0:
            return False
        return None

    parameters = [Parameter("enemy", domain=domain)]
    guard = None
    if range_ > 0:
        parameters.append(Parameter("stand", domain=positions_domain))
        position_condition = Condition("at({agent})", Ref("stand"))

        def guard(bindings: Mapping[str, Any], state: WorldState) -> bool:
            enemy_pos = state.get(fact_key("at", bindings["enemy"]))
            stand = bindings["stand"]
            if not isinstance(enemy_pos, HexCoord) or not isinstance(stand, HexCoord):
                return False
            return stand.distance(enemy_pos) <= range_
    else:
        position_condition = Condition("at({agent})", FactOf("at({enemy})"))

    return ActionTemplate(
        id=template_id,
        parameters=parameters,
        preconditions=[Condition("alive({enemy})", True), position_condition],
        effects=[
            Effect("health({enemy})", new_health),
            Effect("alive({enemy})", killed),
            Effect("in_combat({agent})", True),
        ],
        base_cost=base_cost,
        guard=guard,
    )


# ─────────────────────────────────────────────────────────────────────────────
# PICKUP
# ─────────────────────────────────────────────────────────────────────────────

def pickup(
    base_cost: float = 1.0,
    domain: str = "items",
    template_id: str = "Pickup",
) -> ActionTemplate:
    """Szablon podniesienia przedmiotu leżącego na pozycji agenta."""
    return ActionTemplate(
        id=template_id,
        parameters=[Parameter("item", domain=domain)],
        preconditions=[
            Condition("at({agent})", FactOf("at({item})")),
            Condition("item_available({item})", True),
        ],
        effects=[
            Effect("holding({agent})", Ref("item")),
            Effect("item_available({item})", False),
        ],
        base_cost=base_cost,
        claims=["item:{item}"],
    )


def default_templates(attack_damage: int = 1):
    """Standardowy zestaw: MoveTo, Attack, Pickup (w tej kolejności)."""
    return [move_to(), attack(damage=attack_damage), pickup()]
