"""
Reader for MCNP meshtal files in column output (COL and CF layouts).

Only the tally requested is parsed. The result table is read with pandas and
every row is placed into the package voxel order using the voxel-centre
coordinates, so the row order of the file does not matter.
"""

from __future__ import annotations

import io
import os
import re
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from . import constants
from .data_classes import Geometry, Group, GroupBound, Mesh, MeshFormat, bounds_from_edges
from .errors import MeshtalError

_TALLY_RE = re.compile(r"^\s*Mesh Tally Number\s+(\d+)", re.IGNORECASE)
_ORIGIN_RE = re.compile(r"origin at\s+([^\s,]+)[\s,]+([^\s,]+)[\s,]+([^\s,]+)", re.IGNORECASE)

# 1.00+002 -> 1.00E+002 (exponent printed without the E)
_MISSING_E_RE = re.compile(r"(?<=\d)([+-]\d{3})(?![\d.])")
# 1.00E+00-2.00E+00 -> 1.00E+00 -2.00E+00
_RUN_ON_RE = re.compile(r"(?<=\d)(?=[+-]\d*\.)")

_BOUNDARY_KEYS = {
    "x direction": "axis1",
    "r direction": "axis1",
    "y direction": "axis2",
    "z direction": "z",
    "theta direction": "axis3",
    "energy bin boundaries": "energy",
    "time bin boundaries": "time",
}

# multi-word table headers
_HEADER_ALIASES = (
    (("rel", "error"), "error"),
    (("rslt", "*", "vol"), "rslt_vol"),
)
_HEADER_NAMES = {
    "energy": "energy",
    "time": "time",
    "x": "c1",
    "y": "c2",
    "z": "z",
    "r": "c1",
    "th": "c3",
    "theta": "c3",
    "result": "result",
    "volume": "volume",
}


def repair_numbers(line: str) -> str:
    """Split run-on numbers and restore exponents missing their 'E'."""
    line = _MISSING_E_RE.sub(r"E\1", line)
    return _RUN_ON_RE.sub(" ", line)


def _floats(text: str) -> List[float]:
    try:
        return [float(token) for token in repair_numbers(text).split()]
    except ValueError as exc:
        raise MeshtalError(f"Cannot read numbers from {text.strip()!r}") from exc


def _tally_section(lines: Sequence[str], tally_id: int) -> List[str]:
    start = None
    for idx, line in enumerate(lines):
        match = _TALLY_RE.match(line)
        if match is None:
            continue
        if start is not None:
            return list(lines[start:idx])
        if int(match.group(1)) == tally_id:
            start = idx
    if start is None:
        raise MeshtalError(f"Mesh tally {tally_id} not found")
    return list(lines[start:])


def _parse_header(header: str) -> List[str]:
    tokens = header.lower().split()
    columns = []
    idx = 0
    while idx < len(tokens):
        for words, name in _HEADER_ALIASES:
            if tuple(tokens[idx:idx + len(words)]) == words:
                columns.append(name)
                idx += len(words)
                break
        else:
            name = _HEADER_NAMES.get(tokens[idx])
            if name is None:
                raise MeshtalError(f"Unsupported meshtal table layout: {header.strip()!r}")
            columns.append(name)
            idx += 1
    # the second z is the rectangular axis-3, a single z is cylindrical axis-2
    if "c3" in columns:
        columns = ["c2" if c == "z" else c for c in columns]
    else:
        columns = ["c3" if c == "z" else c for c in columns]
    for required in ("c1", "c2", "c3", "result", "error"):
        if required not in columns:
            raise MeshtalError(f"Meshtal table has no '{required}' column: {header.strip()!r}")
    return columns


def _group_indices(labels: pd.Series, bounds: List[GroupBound], axis: str) -> np.ndarray:
    """Map the energy/time column of the table onto group indices."""
    total = len(bounds) - 1 if bounds[-1].is_total else None
    uppers = np.array([b.upper for b in bounds if not b.is_total], dtype=float)
    mapping: Dict[str, int] = {}
    for label in labels.astype(str).unique():
        if label.strip().lower() == constants.TOTAL_KEYWORD:
            if total is None:
                raise MeshtalError(f"Meshtal lists a Total {axis} group the bounds do not declare")
            mapping[label] = total
            continue
        value = float(repair_numbers(label))
        if uppers.size == 0:
            # a single bin is labelled Total
            mapping[label] = 0
            continue
        pos = int(np.argmin(np.abs(uppers - value)))
        if not np.isclose(uppers[pos], value, rtol=1e-3, atol=0.0):
            raise MeshtalError(f"{axis.capitalize()} label {label} matches no {axis} bound")
        mapping[label] = pos
    return labels.astype(str).map(mapping).to_numpy(dtype=np.int64)


def _bin_indices(centres: np.ndarray, bounds: np.ndarray) -> np.ndarray:
    idx = np.searchsorted(bounds, centres, side="right") - 1
    return np.clip(idx, 0, bounds.size - 2)


def read_meshtal(file_path: str, tally_id: int) -> Mesh:
    """Read one mesh tally from a meshtal file.

    Parameters
    ----------
    file_path : str
        Path to the meshtal file.
    tally_id : int
        Mesh tally number, e.g. 104 for FMESH104.

    Returns
    -------
    Mesh
        Parsed mesh with results in package voxel order.

    Raises
    ------
    MeshtalError
        When the tally is missing or the layout is not COL/CF.
    """
    if not os.path.isfile(file_path):
        raise MeshtalError(f"Meshtal file '{file_path}' does not exist")

    with open(file_path, "r", encoding="utf-8", errors="ignore") as f:
        lines = f.read().splitlines()
    section = _tally_section(lines, int(tally_id))

    particle = section[1].split()[0].lower() if len(section) > 1 and section[1].split() else "unknown"
    geometry = Geometry.RECTANGULAR
    origin = np.zeros(3)
    edges: Dict[str, List[float]] = {}
    header_idx: Optional[int] = None
    current: Optional[str] = None

    for idx, line in enumerate(section[2:], start=2):
        stripped = line.strip()
        lowered = stripped.lower()
        if not stripped:
            current = None
            continue
        if "result" in lowered.split():
            header_idx = idx
            break
        if lowered.startswith("cylinder origin"):
            geometry = Geometry.CYLINDRICAL
            match = _ORIGIN_RE.search(stripped)
            if match:
                origin = np.array(_floats(" ".join(match.groups())))
            continue
        if ":" in stripped:
            key = lowered.split(":", 1)[0]
            key = re.sub(r"\s*\(.*\)", "", key).strip()
            current = _BOUNDARY_KEYS.get(key)
            if key.startswith("r direction") or key.startswith("theta direction"):
                geometry = Geometry.CYLINDRICAL
            if current is not None:
                edges[current] = _floats(stripped.split(":", 1)[1])
            continue
        if current is not None:
            # wrapped boundary list
            edges[current].extend(_floats(stripped))

    if header_idx is None:
        raise MeshtalError(f"Mesh tally {tally_id} has no result table")

    if geometry is Geometry.RECTANGULAR:
        axes = ("axis1", "axis2", "z")
    else:
        axes = ("axis1", "z", "axis3")
    for key in axes:
        if key not in edges:
            raise MeshtalError(f"Mesh tally {tally_id} is missing its {key} boundaries")
    axis1, axis2, axis3 = (np.array(edges[key]) for key in axes)

    energy_bounds = bounds_from_edges(edges["energy"]) if "energy" in edges else [GroupBound.total()]
    time_bounds = bounds_from_edges(edges["time"]) if "time" in edges else [GroupBound.total()]

    columns = _parse_header(section[header_idx])
    mesh_format = MeshFormat.CF if "volume" in columns else MeshFormat.COL
    rows = []
    for line in section[header_idx + 1:]:
        if not line.strip():
            break
        rows.append(repair_numbers(line))
    if not rows:
        raise MeshtalError(f"Mesh tally {tally_id} has an empty result table")

    table = pd.read_csv(io.StringIO("\n".join(rows)), sep=r"\s+", header=None, names=columns)

    shape = (axis1.size - 1, axis2.size - 1, axis3.size - 1)
    n_voxels = shape[0] * shape[1] * shape[2]
    i = _bin_indices(table["c1"].to_numpy(dtype=float), axis1)
    j = _bin_indices(table["c2"].to_numpy(dtype=float), axis2)
    k = _bin_indices(table["c3"].to_numpy(dtype=float), axis3)
    voxel = i + j * shape[0] + k * shape[0] * shape[1]

    if "energy" in table:
        e_idx = _group_indices(table["energy"], energy_bounds, "energy")
    else:
        e_idx = np.full(len(table), len(energy_bounds) - 1, dtype=np.int64)
    if "time" in table:
        t_idx = _group_indices(table["time"], time_bounds, "time")
    else:
        t_idx = np.full(len(table), len(time_bounds) - 1, dtype=np.int64)

    results = table["result"].to_numpy(dtype=float)
    errors = table["error"].to_numpy(dtype=float)
    groups: List[Group] = []
    for (e, t), rows_idx in pd.Series(np.arange(len(table))).groupby([e_idx, t_idx]):
        rows_idx = rows_idx.to_numpy()
        if rows_idx.size != n_voxels or np.unique(voxel[rows_idx]).size != n_voxels:
            raise MeshtalError(
                f"Mesh tally {tally_id} group ({e}, {t}) has {rows_idx.size} rows, "
                f"expected one per voxel ({n_voxels})"
            )
        values = np.empty(n_voxels)
        errs = np.empty(n_voxels)
        values[voxel[rows_idx]] = results[rows_idx]
        errs[voxel[rows_idx]] = errors[rows_idx]
        groups.append(Group(int(e), int(t), values, errs))

    mesh = Mesh(
        id=int(tally_id),
        geometry=geometry,
        axis1=axis1,
        axis2=axis2,
        axis3=axis3,
        energy_bounds=energy_bounds,
        time_bounds=time_bounds,
        groups=groups,
        format=mesh_format,
        origin=origin,
        particle=particle,
    )
    if constants.DEBUG:
        print(f"[debug] Read {len(table)} rows for mesh tally {tally_id} from {file_path}")
    return mesh
