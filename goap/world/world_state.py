"""
Niemutowalny snapshot świata - mapa klucz faktu -> wartość.

WorldState jest typem wartościowym:
    - żadna operacja nie modyfikuje istniejącego obiektu
    - ``with_fact``/``with_facts`` zwracają NOWY snapshot
    - równość i hash zależą tylko od zawartości (nie od kolejności wstawiania)

Planer tworzy jeden snapshot na każdy rozwinięty węzeł, dlatego kopia
jest płytka (dict faktów), a kanoniczny klucz liczony leniwie i cache'owany.

Przykład użycia:
    >>> s = WorldState({"at(u)": "A", "has_weapon(u)": False})
    >>> s2 = s.with_fact("at(u)", "B")
    >>> s.get("at(u)"), s2.get("at(u)")
    ('A', 'B')
    >>> s.diff(s2)
    {'at(u)': ('A', 'B')}
"""

from __future__ import annotations
import hashlib
from operator import itemgetter
from typing import (
    Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union, TYPE_CHECKING,
)

from .facts import FactSource, FactValue, fact_equals, validate_fact, value_tag, value_to_json

if TYPE_CHECKING:
    from ..goals.goal import Goal


FactPairs = Union[Mapping[str, FactValue], Iterable[Tuple[str, FactValue]]]

CanonicalKey = Tuple[Tuple[str, str, Any], ...]


def _iter_pairs(facts: FactPairs) -> Iterator[Tuple[str, FactValue]]:
    if isinstance(facts, Mapping):
        return iter(facts.items())
    return iter(facts)


class WorldState:
    """
    Niemutowalny zbiór faktów.

    Attributes:
        _facts (Dict[str, FactValue]): Fakty (nigdy nie modyfikowane po utworzeniu)
        _canonical (Optional[CanonicalKey]): Cache kanonicznego klucza
    """

    __slots__ = ("_facts", "_canonical")

    def __init__(self, facts: Optional[FactPairs] = None):
        """
        Args:
            facts: Słownik lub iterowalne pary (klucz, wartość)

        Raises:
            TypeError: Jeśli któryś fakt ma niedozwolony typ
        """
        data: Dict[str, FactValue] = {}
        if facts is not None:
            for key, value in _iter_pairs(facts):
                validate_fact(key, value)
                data[key] = value
        self._facts = data
        self._canonical: Optional[CanonicalKey] = None

    @classmethod
    def _derive(cls, data: Dict[str, FactValue]) -> WorldState:
        """Tworzy snapshot z już zwalidowanego słownika (bez kopiowania)."""
        state = cls.__new__(cls)
        state._facts = data
        state._canonical = None
        return state

    @classmethod
    def from_sources(cls, *sources: FactSource, extra: Optional[FactPairs] = None) -> WorldState:
        """
        Buduje snapshot z encji wystawiających fakty.

        Późniejsze źródła nadpisują wcześniejsze przy kolizji kluczy.
        """
        data: Dict[str, FactValue] = {}
        for source in sources:
            for key, value in source.to_facts().items():
                validate_fact(key, value)
                data[key] = value
        if extra is not None:
            for key, value in _iter_pairs(extra):
                validate_fact(key, value)
                data[key] = value
        return cls._derive(data)

    # ─────────────────────────────────────────────────────────────────────────
    # ODCZYT
    # ─────────────────────────────────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        """Zwraca wartość faktu lub ``default`` (None) gdy faktu brak."""
        return self._facts.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._facts

    def matches(self, key: str, value: FactValue) -> bool:
        """Czy fakt ``key`` istnieje i ma dokładnie wartość ``value``."""
        return key in self._facts and fact_equals(self._facts[key], value)

    def keys(self):
        return self._facts.keys()

    def items(self):
        return self._facts.items()

    def to_dict(self) -> Dict[str, FactValue]:
        """Kopia faktów jako zwykły słownik."""
        return dict(self._facts)

    def __contains__(self, key: object) -> bool:
        return key in self._facts

    def __len__(self) -> int:
        return len(self._facts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._facts)

    # ─────────────────────────────────────────────────────────────────────────
    # NOWE SNAPSHOTY
    # ─────────────────────────────────────────────────────────────────────────

    def with_fact(self, key: str, value: FactValue) -> WorldState:
        """Nowy snapshot z nadpisanym (lub dodanym) faktem."""
        validate_fact(key, value)
        if key in self._facts and fact_equals(self._facts[key], value):
            return self
        data = dict(self._facts)
        data[key] = value
        return WorldState._derive(data)

    def with_facts(self, facts: FactPairs) -> WorldState:
        """
        Nowy snapshot z nadpisanymi faktami.

        Wszystkie fakty są nakładane naraz - nie ma stanów pośrednich.
        Gdy nic się nie zmienia, zwraca ``self``.
        """
        data: Optional[Dict[str, FactValue]] = None
        for key, value in _iter_pairs(facts):
            validate_fact(key, value)
            current = self._facts if data is None else data
            if key in current and fact_equals(current[key], value):
                continue
            if data is None:
                data = dict(self._facts)
            data[key] = value
        if data is None:
            return self
        return WorldState._derive(data)

    # ─────────────────────────────────────────────────────────────────────────
    # CELE
    # ─────────────────────────────────────────────────────────────────────────

    def satisfies(self, goal: "Goal") -> bool:
        """Czy snapshot spełnia wszystkie warunki celu."""
        return goal.is_satisfied(self)

    def unsatisfied_count(self, goal: "Goal") -> int:
        """Liczba niespełnionych warunków celu (heurystyka, ranking soft-goal)."""
        return len(goal.unsatisfied_conditions(self))

    # ─────────────────────────────────────────────────────────────────────────
    # KANONICZNA POSTAĆ
    # ─────────────────────────────────────────────────────────────────────────

    def canonical_key(self) -> CanonicalKey:
        """
        Klucz niezależny od kolejności wstawiania faktów.

        Posortowane trójki (klucz, znacznik typu, wartość). Znacznik typu
        rozróżnia True od 1.
        """
        if self._canonical is None:
            self._canonical = tuple(
                (key, value_tag(value), value)
                for key, value in sorted(self._facts.items(), key=itemgetter(0))
            )
        return self._canonical

    def canonical_hash(self) -> str:
        """
        Stabilny skrót (SHA-1) kanonicznej postaci.

        W przeciwieństwie do ``hash()`` nie zależy od PYTHONHASHSEED,
        więc jest stały między procesami.
        """
        digest = hashlib.sha1()
        for key, tag, value in self.canonical_key():
            digest.update(f"{key}\x1f{tag}\x1f{value!r}\x1e".encode("utf-8"))
        return digest.hexdigest()

    def diff(self, other: WorldState) -> Dict[str, Tuple[Any, Any]]:
        """
        Różnice między snapshotami: klucz -> (wartość tutaj, wartość w other).

        Brakujący fakt jest reprezentowany przez None.
        """
        result: Dict[str, Tuple[Any, Any]] = {}
        for key in sorted(set(self._facts) | set(other._facts)):
            mine = self._facts.get(key)
            theirs = other._facts.get(key)
            if key in self._facts and key in other._facts and fact_equals(mine, theirs):
                continue
            result[key] = (mine, theirs)
        return result

    def to_json_dict(self) -> Dict[str, Any]:
        """Fakty w postaci nadającej się do json.dump."""
        return {key: value_to_json(value) for key, value in sorted(self._facts.items())}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorldState):
            return NotImplemented
        return self.canonical_key() == other.canonical_key()

    def __hash__(self) -> int:
        return hash(self.canonical_key())

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in sorted(self._facts.items()))
        return f"WorldState({inner})"
