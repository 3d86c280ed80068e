"""Order-preserving edits on a sequence of persisted media references.

Every function returns a new list and leaves its input untouched.  Position 0
of the result is what downstream consumers treat as the primary image.
"""
from __future__ import annotations

from typing import List, Optional, Sequence


def _check_index(references: Sequence[str], index: int) -> None:
    if not 0 <= index < len(references):
        raise IndexError(f"reference index {index} out of range (size={len(references)})")


def move_left(references: Sequence[str], index: int) -> List[str]:
    result = list(references)
    if len(result) < 2 or index == 0:
        return result
    _check_index(result, index)
    result[index - 1], result[index] = result[index], result[index - 1]
    return result


def move_right(references: Sequence[str], index: int) -> List[str]:
    result = list(references)
    if len(result) < 2 or index == len(result) - 1:
        return result
    _check_index(result, index)
    result[index], result[index + 1] = result[index + 1], result[index]
    return result


def drag_reposition(references: Sequence[str], from_index: int, to_index: int) -> List[str]:
    result = list(references)
    if from_index == to_index:
        return result
    _check_index(result, from_index)
    _check_index(result, to_index)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


def remove_by_value(references: Sequence[str], reference: str) -> List[str]:
    return [ref for ref in references if ref != reference]


def insert(references: Sequence[str], reference: str, index: Optional[int] = None) -> List[str]:
    """Insert *reference* at *index* (append when omitted)."""

    result = list(references)
    if index is None:
        result.append(reference)
        return result
    if not 0 <= index <= len(result):
        raise IndexError(f"insert index {index} out of range (size={len(result)})")
    result.insert(index, reference)
    return result


def primary(references: Sequence[str]) -> Optional[str]:
    return references[0] if references else None
