"""
Identifier interning.

Every name in the design database (cells, nets, ports, attribute keys,
resource name components) is an IdString: a small handle into a
process-wide string pool. Two IdStrings are equal iff their indices are
equal, and a handle stays valid for the lifetime of the process.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Union


class _IdStringPool:
    """Bidirectional string <-> index table. Index 0 is the empty string."""

    def __init__(self):
        self._strings: list[str] = [""]
        self._index: dict[str, int] = {"": 0}

    def intern(self, s: str) -> int:
        idx = self._index.get(s)
        if idx is None:
            idx = len(self._strings)
            self._strings.append(s)
            self._index[s] = idx
        return idx

    def lookup(self, idx: int) -> str:
        return self._strings[idx]

    def __contains__(self, s: str) -> bool:
        return s in self._index

    def __len__(self) -> int:
        return len(self._strings)


_pool = _IdStringPool()


@dataclass(frozen=True, order=True)
class IdString:
    """
    Opaque interned identifier.

    Attributes:
        index: Position in the process-wide pool (0 is the empty sentinel).
    """
    index: int = 0

    @classmethod
    def intern(cls, s: str) -> IdString:
        """Return the handle for `s`, interning it on first use."""
        return cls(_pool.intern(s))

    @property
    def empty(self) -> bool:
        return self.index == 0

    def __bool__(self) -> bool:
        return self.index != 0

    def __str__(self) -> str:
        return _pool.lookup(self.index)

    def __repr__(self) -> str:
        return f"IdString({str(self)!r})"


NameLike = Union[str, IdString]


def to_id(name: NameLike) -> IdString:
    """Coerce a string or IdString into an IdString."""
    if isinstance(name, IdString):
        return name
    return IdString.intern(name)


@dataclass(frozen=True)
class IdStringList:
    """
    Hierarchical resource name, e.g. ``X1/Y2/LUT0``.

    Architectures name bels, wires and pips with these so that the
    individual components are interned once and shared.
    """
    ids: tuple[IdString, ...] = ()

    @classmethod
    def of(cls, parts: Iterable[NameLike]) -> IdStringList:
        return cls(tuple(to_id(p) for p in parts))

    @classmethod
    def parse(cls, s: str, sep: str = "/") -> IdStringList:
        """Split a path-style external name into its components."""
        if not s:
            return cls()
        return cls.of(s.split(sep))

    def __len__(self) -> int:
        return len(self.ids)

    def __getitem__(self, i: int) -> IdString:
        return self.ids[i]

    def join(self, sep: str = "/") -> str:
        return sep.join(str(i) for i in self.ids)

    def __str__(self) -> str:
        return self.join()

    def __repr__(self) -> str:
        return f"IdStringList({str(self)!r})"
