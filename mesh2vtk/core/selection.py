"""
Energy and time group selection.

Filters given on the command line are resolved against the group bounds a
mesh declares. Groups in meshtal files are labelled by their upper bound, so
absolute values are matched to the first group whose upper bound is greater
than or equal to the value.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from . import constants
from .constants import TOTAL_KEYWORD
from .data_classes import GroupBound, Mesh, SelectionSpec
from .errors import SelectionError


class FilterKind(enum.Enum):
    """How the tokens of a :class:`GroupFilter` are interpreted."""

    ALL = "all"
    TOTAL = "total"
    INDEX = "index"
    VALUE = "value"


@dataclass(frozen=True)
class GroupFilter:
    """Filter request for one axis (energy or time)."""

    kind: FilterKind = FilterKind.ALL
    tokens: Tuple[str, ...] = ()

    @classmethod
    def everything(cls) -> "GroupFilter":
        return cls(FilterKind.ALL)

    @classmethod
    def total_only(cls) -> "GroupFilter":
        return cls(FilterKind.TOTAL)

    @classmethod
    def indices(cls, *tokens) -> "GroupFilter":
        return cls(FilterKind.INDEX, tuple(str(t) for t in tokens))

    @classmethod
    def values(cls, *tokens) -> "GroupFilter":
        return cls(FilterKind.VALUE, tuple(str(t) for t in tokens))

    @classmethod
    def from_arguments(
        cls,
        tokens: Optional[Sequence[str]],
        total: bool = False,
        absolute: bool = False,
    ) -> "GroupFilter":
        """Build a filter from command line style inputs.

        ``total`` takes precedence, an empty token list means no filter, and
        ``absolute`` switches from index to value matching.
        """
        if total:
            return cls.total_only()
        if not tokens:
            return cls.everything()
        if absolute:
            return cls.values(*tokens)
        return cls.indices(*tokens)


def _total_index(bounds: Sequence[GroupBound]) -> Optional[int]:
    for idx, bound in enumerate(bounds):
        if bound.is_total:
            return idx
    return None


def _is_total(token: str) -> bool:
    return token.strip().lower() == TOTAL_KEYWORD


def _append_unique(indices: List[int], idx: int) -> None:
    if idx not in indices:
        indices.append(idx)


def _require_total(bounds: Sequence[GroupBound], axis: str) -> int:
    total = _total_index(bounds)
    if total is None:
        raise SelectionError(f"The mesh has no 'Total' {axis} group")
    return total


def _all_indices(bounds: Sequence[GroupBound]) -> List[int]:
    total = _total_index(bounds)
    indices = [idx for idx in range(len(bounds)) if idx != total]
    if total is not None:
        indices.append(total)
    return indices


def _resolve_indices(bounds: Sequence[GroupBound], tokens: Sequence[str], axis: str) -> List[int]:
    n_groups = len(bounds)
    valid = f"expected an integer in 0-{n_groups - 1} or '{TOTAL_KEYWORD}'"
    indices: List[int] = []
    for token in tokens:
        if _is_total(token):
            _append_unique(indices, _require_total(bounds, axis))
            continue
        try:
            idx = int(token)
        except ValueError:
            raise SelectionError(f"Invalid {axis} group index {token!r}, {valid}") from None
        if not 0 <= idx < n_groups:
            raise SelectionError(f"{axis.capitalize()} group index {idx} out of range, {valid}")
        _append_unique(indices, idx)
    return indices


def _resolve_values(bounds: Sequence[GroupBound], tokens: Sequence[str], axis: str) -> List[int]:
    positions = [idx for idx, bound in enumerate(bounds) if not bound.is_total]
    uppers = np.array([bounds[idx].upper for idx in positions], dtype=float)
    indices: List[int] = []
    for token in tokens:
        if _is_total(token):
            _append_unique(indices, _require_total(bounds, axis))
            continue
        try:
            value = float(token)
        except ValueError:
            raise SelectionError(
                f"Invalid {axis} value {token!r}, expected a number or '{TOTAL_KEYWORD}'"
            ) from None
        if not np.isfinite(value):
            raise SelectionError(f"Invalid {axis} value {token!r}, must be finite")
        if uppers.size == 0:
            raise SelectionError(
                f"The mesh has no bounded {axis} groups to match {value:g} against"
            )
        # first bound >= value, ties select the bound itself
        pos = int(np.searchsorted(uppers, value, side="left"))
        if pos >= uppers.size:
            raise SelectionError(
                f"{axis.capitalize()} value {value:g} exceeds the maximum {axis} bound {uppers[-1]:g}"
            )
        _append_unique(indices, positions[pos])
    return indices


def resolve_groups(bounds: Sequence[GroupBound], request: GroupFilter, axis: str = "energy") -> List[int]:
    """Resolve a filter request into group indices for a single axis.

    Parameters
    ----------
    bounds : sequence of GroupBound
        Groups declared by the mesh for this axis.
    request : GroupFilter
        What the user asked for.
    axis : str
        'energy' or 'time', used in messages only.

    Returns
    -------
    list of int
        Duplicate-free indices in request order (ascending with Total last
        when no filter is given).

    Raises
    ------
    SelectionError
        For invalid tokens, out of range indices or values, a missing Total
        group, or an empty result.
    """
    if request.kind is FilterKind.ALL:
        indices = _all_indices(bounds)
    elif request.kind is FilterKind.TOTAL:
        indices = [_require_total(bounds, axis)]
    elif request.kind is FilterKind.INDEX:
        indices = _resolve_indices(bounds, request.tokens, axis)
    elif request.kind is FilterKind.VALUE:
        indices = _resolve_values(bounds, request.tokens, axis)
    else:
        raise SelectionError(f"Unhandled {axis} filter kind {request.kind!r}")

    if not indices:
        raise SelectionError(f"No {axis} groups selected")
    if constants.DEBUG:
        print(f"[debug] {axis} filter {request.kind.value} {list(request.tokens)} -> {indices}")
    return indices


def resolve_selection(
    mesh: Mesh,
    energy: Optional[GroupFilter] = None,
    time: Optional[GroupFilter] = None,
) -> SelectionSpec:
    """Resolve energy and time filters independently against ``mesh``."""
    energies = resolve_groups(mesh.energy_bounds, energy or GroupFilter.everything(), "energy")
    times = resolve_groups(mesh.time_bounds, time or GroupFilter.everything(), "time")
    return SelectionSpec(tuple(energies), tuple(times))
