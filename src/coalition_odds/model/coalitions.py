"""
Coalition naming and enumeration of smaller alternative coalitions.

A coalition is identified by its canonical name: the sorted party ids
joined by a separator, so ``["fdp", "cdu"]`` and ``["cdu", "fdp"]`` both
become ``"cdu_fdp"``.
"""
from itertools import combinations
from typing import List, Sequence, Union

from coalition_odds.model.errors import ValidationError
from coalition_odds.settings import COLLAPSE

Coalition = Union[str, Sequence[str]]


def validate_coalition(coalition: Sequence[str]) -> List[str]:
    """Return the coalition's parties, rejecting empty or repeated entries."""
    if isinstance(coalition, str) or not isinstance(coalition, Sequence):
        raise ValidationError(f"coalition must be a sequence of party ids, got {coalition!r}")
    parties = list(coalition)
    if not parties:
        raise ValidationError("coalition must contain at least one party")
    if any(not isinstance(p, str) or not p for p in parties):
        raise ValidationError(f"party ids must be non-empty strings: {parties}")
    if len(set(parties)) != len(parties):
        raise ValidationError(f"coalition lists a party more than once: {parties}")
    return parties


def canonical_name(coalition: Sequence[str], collapse: str = COLLAPSE) -> str:
    return collapse.join(sorted(validate_coalition(coalition)))


def paste_coalitions(coalitions: Sequence[Sequence[str]], collapse: str = COLLAPSE) -> List[str]:
    """
    Canonical names for a catalogue of coalitions.

    Raises:
        ValidationError: if the catalogue is empty or two coalitions share a name
    """
    if not coalitions:
        raise ValidationError("at least one coalition is required")
    names = [canonical_name(c, collapse=collapse) for c in coalitions]
    seen = set()
    for name in names:
        if name in seen:
            raise ValidationError(f"coalition {name!r} is listed more than once")
        seen.add(name)
    return names


def split_coalition(coalition: Coalition, pattern: str = COLLAPSE) -> List[str]:
    if isinstance(coalition, str):
        if not coalition:
            raise ValidationError("coalition name must not be empty")
        return coalition.split(pattern)
    return sorted(validate_coalition(coalition))


def proper_subsets(coalition: Coalition, pattern: str = COLLAPSE, collapse: str = COLLAPSE) -> List[str]:
    """
    Names of every smaller alternative coalition.

    All combinations of size ``1 .. k-1`` of the ``k`` parties, by increasing
    size and in :func:`itertools.combinations` order within a size. For
    ``"a_b_c"`` this is ``["a", "b", "c", "a_b", "a_c", "b_c"]``.

    Args:
        coalition: Canonical coalition name or a sequence of parties in
            any order
        pattern: Separator used to split a coalition name
        collapse: Separator used to join subset names
    """
    parties = split_coalition(coalition, pattern=pattern)
    return [
        collapse.join(subset)
        for size in range(1, len(parties))
        for subset in combinations(parties, size)
    ]
