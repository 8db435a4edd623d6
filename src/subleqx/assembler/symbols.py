"""
Subleqx Symbol Table
====================

Maps label names to the bit addresses they were defined at. The table is
filled during pass 1 and only read during pass 2; it is owned by the
CodeGenerator and handed to the ExpressionEvaluator by reference.
"""

from dataclasses import dataclass
from typing import Iterator, Optional
import re

from subleqx.errors import (
    AssemblySyntaxError,
    DuplicateLabelError,
    SourceLocation,
)


# Label names: a letter or underscore, then letters, digits or underscores
LABEL_PATTERN = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")


def is_valid_label(name: str) -> bool:
    """Check a name against the label grammar."""
    return LABEL_PATTERN.fullmatch(name) is not None


# =============================================================================
# Symbol Table Entry
# =============================================================================

@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name
        address: Absolute bit address (base address + offset)
        location: Where the label was defined
    """
    name: str
    address: int
    location: Optional[SourceLocation] = None


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Label name to address mapping.

    Usage:
        table = SymbolTable()
        table.define("loop", 40, location)
        table.address_of("loop")   # 40
        "loop" in table            # True
    """

    def __init__(self):
        self._symbols: dict[str, Symbol] = {}

    def define(
        self,
        name: str,
        address: int,
        location: Optional[SourceLocation] = None,
    ) -> Symbol:
        """
        Define a label.

        Raises:
            AssemblySyntaxError: If the name is not a valid label
            DuplicateLabelError: If the label is already defined
        """
        if not is_valid_label(name):
            raise AssemblySyntaxError(f"invalid label name '{name}'", location)

        existing = self._symbols.get(name)
        if existing is not None:
            raise DuplicateLabelError(
                name,
                location=location,
                original_location=existing.location,
            )

        symbol = Symbol(name=name, address=address, location=location)
        self._symbols[name] = symbol
        return symbol

    def get(self, name: str) -> Optional[Symbol]:
        """Look up a symbol, returning None when undefined."""
        return self._symbols.get(name)

    def address_of(self, name: str) -> int:
        """
        Return the address of a defined label.

        Raises:
            KeyError: If the label is not defined
        """
        return self._symbols[name].address

    def find_similar(self, name: str, limit: int = 3) -> list[str]:
        """
        Find defined labels with names close to the given one.

        Used for "did you mean" hints. A label is similar when it differs
        only by case, or when its length differs by at most one and the
        edit distance is at most two.
        """
        name_lower = name.lower()
        similar = []

        for candidate in self._symbols:
            candidate_lower = candidate.lower()
            if (
                candidate_lower == name_lower or
                abs(len(candidate) - len(name)) <= 1 and
                _edit_distance(name_lower, candidate_lower) <= 2
            ):
                similar.append(candidate)

        return similar[:limit]

    def as_dict(self) -> dict[str, int]:
        """Return a plain name -> address mapping."""
        return {name: sym.address for name, sym in self._symbols.items()}

    def clear(self) -> None:
        self._symbols.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1]
                )))
        distances = new_distances

    return distances[-1]
