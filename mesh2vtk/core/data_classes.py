"""
Data classes for mesh tallies, reconstructed geometry and VTK datasets.

Voxel order
-----------
Every per-voxel array in the package uses the same enumeration::

    v = i + j * n1 + k * n1 * n2

where ``i, j, k`` are the bin indices along axis-1, axis-2 and axis-3 and
``n1, n2`` the voxel counts along the first two axes. Axis-1 varies fastest
and axis-3 slowest. For rectangular meshes the axes are (x, y, z), for
cylindrical meshes (r, z, theta). This is also the cell order of VTK
rectilinear grids, so rectangular results need no reordering on output.
"""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import ConsistencyError, GeometryError


class Geometry(enum.Enum):
    """Mesh geometry kind."""

    RECTANGULAR = "rectangular"
    CYLINDRICAL = "cylindrical"

    @property
    def axis_names(self) -> Tuple[str, str, str]:
        if self is Geometry.RECTANGULAR:
            return ("x", "y", "z")
        if self is Geometry.CYLINDRICAL:
            return ("r", "z", "theta")
        raise ValueError(f"Unhandled geometry {self!r}")


class MeshFormat(enum.Enum):
    """MCNP mesh tally output layout the mesh was read from."""

    COL = "col"
    CF = "cf"
    IJ = "ij"
    IK = "ik"
    JK = "jk"
    CUV = "cuv"


@dataclass(frozen=True)
class GroupBound:
    """Upper bound of an energy (MeV) or time (shakes) group.

    ``upper`` is None for the synthetic 'Total' group.
    """

    upper: Optional[float] = None

    @classmethod
    def total(cls) -> "GroupBound":
        return cls(None)

    @property
    def is_total(self) -> bool:
        return self.upper is None

    @property
    def label(self) -> str:
        return "Total" if self.upper is None else f"{self.upper:.5e}"


def bounds_from_edges(edges: Sequence[float]) -> List[GroupBound]:
    """Convert bin edges into group bounds the way meshtal files label them.

    ``n`` edges give ``n - 1`` bins labelled by their upper edge, followed by
    a Total group. A single bin is itself the Total.
    """
    edges = [float(e) for e in edges]
    if len(edges) < 2:
        raise ValueError(f"At least two bin edges are required, got {len(edges)}")
    if len(edges) == 2:
        return [GroupBound.total()]
    return [GroupBound(upper) for upper in edges[1:]] + [GroupBound.total()]


@dataclass
class Group:
    """Results for one (energy, time) group, one entry per voxel."""

    energy_index: int
    time_index: int
    values: np.ndarray
    errors: Optional[np.ndarray] = None

    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=float).ravel()
        if self.errors is not None:
            self.errors = np.asarray(self.errors, dtype=float).ravel()
            if self.errors.size != self.values.size:
                raise GeometryError(
                    f"Group ({self.energy_index}, {self.time_index}) has "
                    f"{self.values.size} values but {self.errors.size} errors"
                )

    @property
    def key(self) -> Tuple[int, int]:
        return (self.energy_index, self.time_index)


def _as_boundaries(values: Sequence[float], name: str) -> np.ndarray:
    bounds = np.asarray(values, dtype=float).ravel()
    if bounds.size < 2:
        raise GeometryError(f"{name} needs at least two boundaries, got {bounds.size}")
    if not np.all(np.isfinite(bounds)):
        raise GeometryError(f"{name} boundaries must be finite")
    if np.any(np.diff(bounds) <= 0.0):
        raise GeometryError(f"{name} boundaries must be strictly increasing: {bounds.tolist()}")
    return bounds


def _check_group_bounds(bounds: Sequence[GroupBound], name: str) -> List[GroupBound]:
    bounds = list(bounds)
    if not bounds:
        raise ConsistencyError(f"Mesh declares no {name} groups")
    for idx, bound in enumerate(bounds):
        if bound.is_total and idx != len(bounds) - 1:
            raise ConsistencyError(f"The {name} 'Total' group must be the last group")
    uppers = [b.upper for b in bounds if not b.is_total]
    if any(b >= a for a, b in zip(uppers[1:], uppers[:-1])):
        raise ConsistencyError(f"{name} group bounds must be strictly increasing: {uppers}")
    return bounds


@dataclass
class Mesh:
    """A parsed mesh tally.

    Attributes
    ----------
    id : int
        Mesh tally number, e.g. 104 for FMESH104.
    geometry : Geometry
        Rectangular or cylindrical.
    axis1, axis2, axis3 : np.ndarray
        Bin boundaries. (x, y, z) for rectangular meshes, (r, z, theta) for
        cylindrical meshes with theta in revolutions.
    energy_bounds, time_bounds : list of GroupBound
        Declared groups per axis, 'Total' last when present.
    groups : list of Group
        Results, arrays in the voxel order documented in this module.
    format : MeshFormat
        Output layout of the source file.
    origin : np.ndarray
        Cylinder origin. Rectangular boundaries are absolute already.
    particle : str
        Tallied particle, informational only.
    cuv : dict or None
        Opaque cell-under-voxel data carried through to the output.
    """

    id: int
    geometry: Geometry
    axis1: np.ndarray
    axis2: np.ndarray
    axis3: np.ndarray
    energy_bounds: List[GroupBound]
    time_bounds: List[GroupBound]
    groups: List[Group]
    format: MeshFormat = MeshFormat.COL
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    particle: str = "neutron"
    cuv: Optional[Dict[str, np.ndarray]] = None
    _lookup: Dict[Tuple[int, int], Group] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self):
        names = self.geometry.axis_names
        self.axis1 = _as_boundaries(self.axis1, names[0])
        self.axis2 = _as_boundaries(self.axis2, names[1])
        self.axis3 = _as_boundaries(self.axis3, names[2])
        self.origin = np.asarray(self.origin, dtype=float).ravel()
        if self.origin.size != 3:
            raise GeometryError(f"Mesh origin must have 3 components, got {self.origin.size}")

        if self.geometry is Geometry.CYLINDRICAL:
            span = self.axis3[-1] - self.axis3[0]
            if span > 1.0 + 1e-9:
                raise GeometryError(f"Theta bins span {span} revolutions, more than one full turn")

        self.energy_bounds = _check_group_bounds(self.energy_bounds, "energy")
        self.time_bounds = _check_group_bounds(self.time_bounds, "time")

        n_voxels = self.n_voxels
        self._lookup = {}
        for group in self.groups:
            if not 0 <= group.energy_index < len(self.energy_bounds):
                raise ConsistencyError(f"Group energy index {group.energy_index} is not declared")
            if not 0 <= group.time_index < len(self.time_bounds):
                raise ConsistencyError(f"Group time index {group.time_index} is not declared")
            if group.values.size != n_voxels:
                raise GeometryError(
                    f"Group {group.key} has {group.values.size} voxels, "
                    f"bin boundaries define {n_voxels}"
                )
            self._lookup[group.key] = group

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Voxel counts along (axis-1, axis-2, axis-3)."""
        return (self.axis1.size - 1, self.axis2.size - 1, self.axis3.size - 1)

    @property
    def n_voxels(self) -> int:
        n1, n2, n3 = self.shape
        return n1 * n2 * n3

    @property
    def boundaries(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        return (self.axis1, self.axis2, self.axis3)

    @property
    def n_energy_groups(self) -> int:
        return len(self.energy_bounds)

    @property
    def n_time_groups(self) -> int:
        return len(self.time_bounds)

    def voxel_index(self, i: int, j: int, k: int) -> int:
        n1, n2, _ = self.shape
        return i + j * n1 + k * n1 * n2

    def find_group(self, energy_index: int, time_index: int) -> Optional[Group]:
        return self._lookup.get((energy_index, time_index))

    def summary(self) -> str:
        """Human readable description, printed in debug mode."""
        names = self.geometry.axis_names
        lines = [
            f"Mesh tally {self.id} ({self.particle}, {self.geometry.value}, {self.format.value.upper()})",
        ]
        for name, bounds in zip(names, self.boundaries):
            lines.append(
                f"  {name:>5}: {bounds.size - 1} bins, {bounds[0]:.5g} to {bounds[-1]:.5g}"
            )
        lines.append(f"  energy groups: {', '.join(b.label for b in self.energy_bounds)}")
        lines.append(f"  time groups:   {', '.join(b.label for b in self.time_bounds)}")
        lines.append(f"  voxels: {self.n_voxels}, groups with results: {len(self.groups)}")
        return "\n".join(lines)


@dataclass(frozen=True)
class SelectionSpec:
    """Resolved energy and time indices to convert."""

    energies: Tuple[int, ...]
    times: Tuple[int, ...]

    @property
    def pairs(self) -> List[Tuple[int, int]]:
        """(energy, time) pairs, energy-major."""
        return list(itertools.product(self.energies, self.times))

    def __len__(self) -> int:
        return len(self.energies) * len(self.times)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self.pairs)


def _freeze(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class GeometryMesh:
    """Spatial reconstruction of a mesh, shared by all its datasets.

    Attributes
    ----------
    geometry : Geometry
        Kind of the source mesh.
    boundaries : tuple of np.ndarray
        Source bin boundaries, used for native rectilinear output.
    vertices : np.ndarray, shape (n_vertices, 3)
        Unique Cartesian vertex coordinates.
    cells : np.ndarray, shape (n_cells, 8)
        Hexahedra as vertex indices in VTK_HEXAHEDRON order.
    cell_voxels : np.ndarray, shape (n_cells,)
        Source voxel of every cell.
    resolution : int
        Angular subdivision applied (always 1 for rectangular meshes).
    """

    geometry: Geometry
    boundaries: Tuple[np.ndarray, np.ndarray, np.ndarray]
    vertices: np.ndarray
    cells: np.ndarray
    cell_voxels: np.ndarray
    resolution: int = 1

    def __post_init__(self):
        for array in (self.vertices, self.cells, self.cell_voxels, *self.boundaries):
            _freeze(array)

    @property
    def n_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def n_cells(self) -> int:
        return int(self.cells.shape[0])

    @property
    def n_voxels(self) -> int:
        return int(self.n_cells // self.resolution)

    def cells_for_voxel(self, voxel: int) -> np.ndarray:
        """Indices of the cells generated for ``voxel``."""
        start = voxel * self.resolution
        return np.arange(start, start + self.resolution)

    def replicate(self, voxel_data: np.ndarray) -> np.ndarray:
        """Map a per-voxel array onto cells."""
        voxel_data = np.asarray(voxel_data)
        if voxel_data.size != self.n_voxels:
            raise GeometryError(
                f"Expected {self.n_voxels} voxel entries, got {voxel_data.size}"
            )
        if self.resolution == 1:
            return voxel_data.copy()
        return voxel_data[self.cell_voxels]


@dataclass(frozen=True)
class Dataset:
    """One (energy, time) group ready to be written."""

    geometry: GeometryMesh
    energy_index: int
    time_index: int
    energy_label: str
    time_label: str
    values: np.ndarray
    errors: Optional[np.ndarray] = None

    def __post_init__(self):
        _freeze(self.values)
        if self.errors is not None:
            _freeze(self.errors)

    @property
    def pair(self) -> Tuple[int, int]:
        return (self.energy_index, self.time_index)

    @property
    def has_errors(self) -> bool:
        return self.errors is not None

    @property
    def n_cells(self) -> int:
        return int(self.values.size)
