"""
System współrzędnych hexagonalnych (Axial Coordinates) dla faktów pozycyjnych.

Planer nie zna siatki ani renderingu - pozycje są dla niego zwykłymi
wartościami faktów (np. ``at(unit_7) = HexCoord(2, 1)``). Ten moduł daje
tylko to, czego potrzebują szablony akcji i cele strategiczne:
odległość (do kosztów i heurystyk), sąsiadów oraz pierścienie/spirale
(do budowania domen parametrów typu "wszystkie hexy w zasięgu").

Używamy Axial Coordinates (q, r) gdzie:
- q = kolumna (oś pozioma)
- r = wiersz (oś ukośna)
- s = -q - r (trzecia współrzędna cube)

Odległość między hexami:
    distance = (|dq| + |dr| + |ds|) / 2

Przykład użycia:
    >>> a = HexCoord(0, 0)
    >>> b = HexCoord(2, 1)
    >>> a.distance(b)
    3
    >>> HexCoord.parse("2,1") == b
    True
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple, Union


# Kierunki sąsiadów w układzie axial (pointy-top)
# Kolejność: E, SE, SW, W, NW, NE
HEX_DIRECTIONS: List[Tuple[int, int]] = [
    (+1, 0),   # E
    (0, +1),   # SE
    (-1, +1),  # SW
    (-1, 0),   # W
    (0, -1),   # NW
    (+1, -1),  # NE
]


@dataclass(frozen=True, order=True)
class HexCoord:
    """
    Współrzędna hexagonalna w systemie axial (q, r).

    Klasa jest niemutowalna (frozen=True) i porządkowalna (order=True),
    dzięki czemu może być wartością faktu, kluczem słownika i elementem
    kanonicznego (posortowanego) klucza stanu.

    Attributes:
        q (int): Współrzędna kolumny
        r (int): Współrzędna wiersza
    """
    q: int
    r: int

    # ─────────────────────────────────────────────────────────────────────────
    # KONSTRUKCJA
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def parse(cls, value: Union[str, Sequence[int], "HexCoord"]) -> HexCoord:
        """
        Tworzy HexCoord z tekstu "q,r" albo z pary [q, r].

        Args:
            value: "2,1", "(2, 1)", [2, 1] lub gotowy HexCoord

        Returns:
            HexCoord: Sparsowana współrzędna

        Raises:
            ValueError: Jeśli wartość nie opisuje pary liczb całkowitych
        """
        if isinstance(value, HexCoord):
            return value
        if isinstance(value, str):
            parts = value.strip().strip("()").split(",")
        else:
            parts = list(value)
        if len(parts) != 2:
            raise ValueError(f"Invalid hex coordinate: {value!r}")
        try:
            return cls(int(str(parts[0]).strip()), int(str(parts[1]).strip()))
        except ValueError as exc:
            raise ValueError(f"Invalid hex coordinate: {value!r}") from exc

    # ─────────────────────────────────────────────────────────────────────────
    # WŁAŚCIWOŚCI
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def s(self) -> int:
        """Trzecia współrzędna w systemie cube (q + r + s = 0)."""
        return -self.q - self.r

    @property
    def axial(self) -> Tuple[int, int]:
        """Współrzędne axial jako krotka (q, r)."""
        return (self.q, self.r)

    # ─────────────────────────────────────────────────────────────────────────
    # ODLEGŁOŚĆ
    # ─────────────────────────────────────────────────────────────────────────

    def distance(self, other: HexCoord) -> int:
        """
        Oblicza odległość między dwoma hexami (liczba kroków).

        Jest to dolne ograniczenie kosztu ruchu o jednostkowym koszcie kroku,
        więc nadaje się na dopuszczalną (admissible) heurystykę.

        Example:
            >>> HexCoord(0, 0).distance(HexCoord(2, 1))
            3
        """
        dq = abs(self.q - other.q)
        dr = abs(self.r - other.r)
        ds = abs(self.s - other.s)
        return (dq + dr + ds) // 2

    # ─────────────────────────────────────────────────────────────────────────
    # SĄSIEDZI, RING I SPIRAL
    # ─────────────────────────────────────────────────────────────────────────

    def neighbors(self) -> List[HexCoord]:
        """Zwraca 6 sąsiednich hexów w kolejności E, SE, SW, W, NW, NE."""
        return [HexCoord(self.q + dq, self.r + dr) for dq, dr in HEX_DIRECTIONS]

    def neighbor(self, direction: int) -> HexCoord:
        """
        Zwraca sąsiada w określonym kierunku.

        Raises:
            IndexError: Jeśli direction nie jest w zakresie 0-5
        """
        dq, dr = HEX_DIRECTIONS[direction]
        return HexCoord(self.q + dq, self.r + dr)

    def ring(self, radius: int) -> List[HexCoord]:
        """
        Zwraca hexy dokładnie w odległości ``radius`` od centrum.

        Note:
            - radius=0 zwraca [self]
            - radius=n zwraca 6*n hexów (dla n > 0)
        """
        if radius == 0:
            return [self]

        results: List[HexCoord] = []
        current = HexCoord(
            self.q + HEX_DIRECTIONS[4][0] * radius,
            self.r + HEX_DIRECTIONS[4][1] * radius,
        )
        for direction in range(6):
            for _ in range(radius):
                results.append(current)
                current = current.neighbor(direction)
        return results

    def spiral(self, radius: int) -> Iterator[HexCoord]:
        """Generator hexów warstwami: centrum, ring(1), ring(2), ..."""
        for r in range(radius + 1):
            yield from self.ring(r)

    def step_towards(self, other: HexCoord, max_step: int) -> HexCoord:
        """
        Przesuwa się w stronę celu, ograniczając krok na każdej osi.

        Każda składowa (dq, dr) jest przycinana do ``max_step`` - tak samo
        liczone są pośrednie punkty trasy celów strategicznych.

        Example:
            >>> HexCoord(0, 0).step_towards(HexCoord(10, 1), 3)
            HexCoord(q=3, r=1)
        """
        dq = other.q - self.q
        dr = other.r - self.r
        step_q = max(-max_step, min(max_step, dq))
        step_r = max(-max_step, min(max_step, dr))
        return HexCoord(self.q + step_q, self.r + step_r)

    # ─────────────────────────────────────────────────────────────────────────
    # REPREZENTACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_list(self) -> List[int]:
        """Serializacja do JSON jako [q, r]."""
        return [self.q, self.r]

    def __repr__(self) -> str:
        return f"HexCoord(q={self.q}, r={self.r})"

    def __str__(self) -> str:
        return f"({self.q}, {self.r})"


def hexes_in_range(center: HexCoord, range_: int) -> List[HexCoord]:
    """
    Zwraca wszystkie hexy w zasięgu od centrum (włącznie z centrum).

    Typowe źródło domeny parametru "pozycja docelowa" dla szablonu ruchu.
    Kolejność jest deterministyczna (spirala od centrum).

    Example:
        >>> len(hexes_in_range(HexCoord(0, 0), 1))
        7
    """
    return list(center.spiral(range_))
