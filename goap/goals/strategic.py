"""
Cele strategiczne (długoterminowe) rozkładane na cele krótkoterminowe.

Cel strategiczny trwa wiele tur. W każdej turze ``decompose`` zwraca
jeden zwykły Goal, który planer potrafi osiągnąć w tej turze.

CELE:
═══════════════════════════════════════════════════════════════════

    KillAllEnemies(search_radius)        priorytet 65
    ─────────────────────────────────────────────────────────────
    Są wrogowie w pobliżu -> in_combat(unit) = True.
    Osiągnięty gdy nearby_enemies(unit) == 0 (lub brak faktu).

    SiegeCastle(castle_id)               priorytet 55
    ─────────────────────────────────────────────────────────────
    Daleko (> 2 hexy) -> podejdź; blisko -> under_siege(castle) = True;
    oblężenie trwa -> castle_hp(castle) = 0.
    Osiągnięty gdy castle_hp <= 0 albo captured(castle) = True.

    Protect(targets, reason)             priorytet 50
    ─────────────────────────────────────────────────────────────
    Idź do najbliższego celu; na miejscu walcz, jeśli są wrogowie,
    inaczej trzymaj pozycję. Osiągnięty gdy stoi na którymś celu.

    ReachArea(area_centers, reason)      priorytet 30
    ─────────────────────────────────────────────────────────────
    Idź do najbliższego centrum. Osiągnięty w promieniu 3 hexów.

Dojście do pozycji dalszej niż 3 hexy jest dzielone na punkt pośredni
(krok na każdej osi przycięty do 3).

FORMAT TEKSTOWY:
═══════════════════════════════════════════════════════════════════

    KillAllEnemies:10 / KillAllEnemies:unlimited
    Protect:5,3;6,4:defend_base
    ReachArea:10,10;15,15:capture_zone
    SiegeCastle:fortress_01
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..core.hex_coord import HexCoord
from ..world.facts import fact_key
from ..world.world_state import WorldState
from .goal import Goal


# Dalsze cele ruchu dzielimy na odcinki o tej długości
WAYPOINT_STEP = 3
AREA_RADIUS = 3
SIEGE_DISTANCE = 2


def _position(state: WorldState, unit_id: str) -> Optional[HexCoord]:
    value = state.get(fact_key("at", unit_id))
    return value if isinstance(value, HexCoord) else None


def _nearby_enemies(state: WorldState, unit_id: str) -> Optional[int]:
    value = state.get(fact_key("nearby_enemies", unit_id))
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _engage(unit_id: str) -> Goal:
    return Goal.single(fact_key("in_combat", unit_id), True, name=f"engage:{unit_id}")


def reach_position_goal(state: WorldState, unit_id: str, target: HexCoord) -> Optional[Goal]:
    """
    Cel dojścia do pozycji - wprost albo przez punkt pośredni.

    Returns:
        Optional[Goal]: None gdy jednostka nie ma pozycji
    """
    current = _position(state, unit_id)
    if current is None:
        return None
    if current.distance(target) > WAYPOINT_STEP:
        target = current.step_towards(target, WAYPOINT_STEP)
    return Goal.single(fact_key("at", unit_id), target, name=f"reach:{target.q},{target.r}")


def _closest(current: HexCoord, candidates: Sequence[HexCoord]) -> HexCoord:
    # min() zwraca pierwszy przy remisie - kolejność z definicji celu
    return min(candidates, key=current.distance)


def _format_coords(coords: Sequence[HexCoord]) -> str:
    return ";".join(f"{c.q},{c.r}" for c in coords)


def _parse_coords(text: str) -> Tuple[HexCoord, ...]:
    return tuple(HexCoord.parse(part) for part in text.split(";"))


class StrategicGoal(ABC):
    """Bazowa klasa celów długoterminowych."""

    priority: float = 0.0

    @abstractmethod
    def decompose(self, state: WorldState, unit_id: str) -> Optional[Goal]:
        """Cel na bieżącą turę (None = nic do zrobienia / brak danych)."""

    @abstractmethod
    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        """Czy cel długoterminowy został osiągnięty."""

    @abstractmethod
    def to_string(self) -> str:
        """Postać tekstowa (odwracalna przez parse_strategic_goal)."""

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class KillAllEnemies(StrategicGoal):
    """Wyeliminuj wrogów w okolicy (None = bez limitu zasięgu)."""
    search_radius: Optional[int] = None
    priority = 65.0

    def decompose(self, state: WorldState, unit_id: str) -> Optional[Goal]:
        enemies = _nearby_enemies(state, unit_id)
        if enemies is not None and enemies > 0:
            return _engage(unit_id)
        return None

    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        enemies = _nearby_enemies(state, unit_id)
        return enemies is None or enemies == 0

    def to_string(self) -> str:
        radius = "unlimited" if self.search_radius is None else str(self.search_radius)
        return f"KillAllEnemies:{radius}"


@dataclass(frozen=True)
class Protect(StrategicGoal):
    """Broń wskazanych pozycji."""
    targets: Tuple[HexCoord, ...]
    reason: str = ""
    priority = 50.0

    def decompose(self, state: WorldState, unit_id: str) -> Optional[Goal]:
        if not self.targets:
            return None
        current = _position(state, unit_id)
        if current is None:
            return None

        closest = _closest(current, self.targets)
        if current.distance(closest) > 0:
            return reach_position_goal(state, unit_id, closest)

        enemies = _nearby_enemies(state, unit_id)
        if enemies is not None and enemies > 0:
            return _engage(unit_id)

        # Trzymaj pozycję
        return Goal.single(fact_key("at", unit_id), current, name=f"hold:{current.q},{current.r}")

    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        current = _position(state, unit_id)
        if current is None or not self.targets:
            return False
        return any(current.distance(t) == 0 for t in self.targets)

    def to_string(self) -> str:
        return f"Protect:{_format_coords(self.targets)}:{self.reason}"


@dataclass(frozen=True)
class ReachArea(StrategicGoal):
    """Dotrzyj w okolice któregoś z centrów."""
    area_centers: Tuple[HexCoord, ...]
    reason: str = ""
    priority = 30.0

    def decompose(self, state: WorldState, unit_id: str) -> Optional[Goal]:
        if not self.area_centers:
            return None
        current = _position(state, unit_id)
        if current is None:
            return None
        return reach_position_goal(state, unit_id, _closest(current, self.area_centers))

    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        current = _position(state, unit_id)
        if current is None or not self.area_centers:
            return False
        return any(current.distance(c) <= AREA_RADIUS for c in self.area_centers)

    def to_string(self) -> str:
        return f"ReachArea:{_format_coords(self.area_centers)}:{self.reason}"


@dataclass(frozen=True)
class SiegeCastle(StrategicGoal):
    """Oblegaj i zdobądź zamek."""
    castle_id: str
    priority = 55.0

    def decompose(self, state: WorldState, unit_id: str) -> Optional[Goal]:
        castle_pos = state.get(fact_key("castle_at", self.castle_id))
        current = _position(state, unit_id)
        if not isinstance(castle_pos, HexCoord) or current is None:
            return None

        siege_key = fact_key("under_siege", self.castle_id)
        under_siege = state.matches(siege_key, True)

        if under_siege:
            hp_key = fact_key("castle_hp", self.castle_id)
            hp = state.get(hp_key)
            if isinstance(hp, int) and not isinstance(hp, bool) and hp > 0:
                return Goal.single(hp_key, 0, name=f"breach:{self.castle_id}")
            return None
        if current.distance(castle_pos) <= SIEGE_DISTANCE:
            return Goal.single(siege_key, True, name=f"siege:{self.castle_id}")
        return reach_position_goal(state, unit_id, castle_pos)

    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        hp = state.get(fact_key("castle_hp", self.castle_id))
        if isinstance(hp, int) and not isinstance(hp, bool) and hp <= 0:
            return True
        return state.matches(fact_key("captured", self.castle_id), True)

    def to_string(self) -> str:
        return f"SiegeCastle:{self.castle_id}"


# ─────────────────────────────────────────────────────────────────────────────
# PARSOWANIE I WYBÓR
# ─────────────────────────────────────────────────────────────────────────────

def parse_strategic_goal(text: str) -> Optional[StrategicGoal]:
    """
    Odtwarza cel z postaci tekstowej.

    Returns:
        Optional[StrategicGoal]: None dla nieznanego/uszkodzonego tekstu

    Example:
        >>> parse_strategic_goal("SiegeCastle:fortress_01")
        SiegeCastle(castle_id='fortress_01')
    """
    kind, sep, body = text.partition(":")
    if not sep:
        return None
    try:
        if kind == "KillAllEnemies":
            return KillAllEnemies(None if body == "unlimited" else int(body))
        if kind in ("Protect", "ReachArea"):
            coords, sep, reason = body.partition(":")
            if not sep:
                return None
            if kind == "Protect":
                return Protect(_parse_coords(coords), reason)
            return ReachArea(_parse_coords(coords), reason)
        if kind == "SiegeCastle":
            return SiegeCastle(body)
    except ValueError:
        return None
    return None


def select_strategic_goal(
    goals: Sequence[StrategicGoal],
    state: WorldState,
    unit_id: str,
) -> Optional[StrategicGoal]:
    """
    Najpilniejszy nieosiągnięty cel (najwyższy priorytet, remis -> kolejność listy).
    """
    best: Optional[StrategicGoal] = None
    for goal in goals:
        if goal.is_achieved(state, unit_id):
            continue
        if best is None or goal.priority > best.priority:
            best = goal
    return best
