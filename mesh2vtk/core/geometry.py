"""
Reconstruction of mesh tally geometry as hexahedral cells.

Rectangular meshes map directly onto an axis-aligned grid. Cylindrical meshes
have no native VTK equivalent, so every (r, z, theta) voxel is converted into
one or more Cartesian hexahedra. Theta bins can be split into several
sub-bins to round off coarse angular discretisations; this only changes how
the mesh looks, every sub-cell carries the result of its voxel unchanged.
"""

from __future__ import annotations

import math
from numbers import Integral
from typing import Dict, List, Sequence, Tuple

import numpy as np

from . import constants
from .constants import CYL_CORNER_OFFSETS, FULL_REVOLUTION_TOL, HEX_CORNER_OFFSETS, VERTICES_PER_CELL
from .data_classes import Geometry, GeometryMesh, Mesh
from .errors import ConfigurationError, GeometryError


def validate_resolution(resolution) -> int:
    """Check the angular subdivision factor, returning it as an int."""
    if isinstance(resolution, bool) or not isinstance(resolution, Integral):
        raise ConfigurationError(f"Resolution must be an integer >= 1, got {resolution!r}")
    if resolution < 1:
        raise ConfigurationError(f"Resolution must be an integer >= 1, got {resolution}")
    return int(resolution)


def is_full_revolution(theta: np.ndarray) -> bool:
    """True when theta bounds (in revolutions) close a full turn."""
    return math.isclose(float(theta[-1] - theta[0]), 1.0, rel_tol=0.0, abs_tol=FULL_REVOLUTION_TOL)


def angular_boundaries(theta: np.ndarray, resolution: int) -> np.ndarray:
    """Split every theta bin into ``resolution`` equal sub-bins.

    Returns the ``n_bins * resolution + 1`` sub-bin boundaries. The first
    sub-boundary of every bin is the original bound itself.
    """
    theta = np.asarray(theta, dtype=float)
    lower = theta[:-1, np.newaxis]
    width = np.diff(theta)[:, np.newaxis]
    steps = np.arange(resolution, dtype=float)[np.newaxis, :] / resolution
    return np.append((lower + width * steps).ravel(), theta[-1])


def _hexahedra(
    voxel_index: Tuple[np.ndarray, np.ndarray, np.ndarray],
    point_dims: Tuple[int, int],
    offsets: Sequence[Tuple[int, int, int]],
) -> np.ndarray:
    """Point indices of the hexahedron corners for every voxel index triple."""
    i, j, k = voxel_index
    p1, p2 = point_dims
    cells = np.empty((i.size, VERTICES_PER_CELL), dtype=np.int64)
    for corner, (d1, d2, d3) in enumerate(offsets):
        cells[:, corner] = (i + d1) + (j + d2) * p1 + (k + d3) * p1 * p2
    return cells


def _split_voxel_index(voxels: np.ndarray, shape: Tuple[int, int, int]):
    n1, n2, _ = shape
    return voxels % n1, (voxels // n1) % n2, voxels // (n1 * n2)


def deduplicate_vertices(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Merge points with identical coordinates.

    Parameters
    ----------
    points : np.ndarray, shape (n, 3)
        Candidate vertices, possibly repeated.

    Returns
    -------
    vertices : np.ndarray, shape (m, 3)
        Unique points in order of first appearance.
    point_map : np.ndarray, shape (n,)
        Index into ``vertices`` for every candidate.
    """
    # adding 0.0 turns -0.0 into 0.0
    points = np.asarray(points, dtype=float) + 0.0
    lookup: Dict[Tuple[float, float, float], int] = {}
    unique: List[Tuple[float, float, float]] = []
    point_map = np.empty(points.shape[0], dtype=np.int64)
    for idx, key in enumerate(map(tuple, points.tolist())):
        vertex_id = lookup.get(key)
        if vertex_id is None:
            vertex_id = len(unique)
            lookup[key] = vertex_id
            unique.append(key)
        point_map[idx] = vertex_id
    vertices = np.array(unique, dtype=float).reshape(-1, 3)
    return vertices, point_map


def build_rectangular_geometry(mesh: Mesh) -> GeometryMesh:
    """Axis-aligned hexahedra, one per voxel, in voxel order."""
    x, y, z = (bounds.copy() for bounds in mesh.boundaries)
    grid_x, grid_y, grid_z = np.meshgrid(x, y, z, indexing="ij")
    vertices = np.column_stack([
        grid_x.ravel(order="F"),
        grid_y.ravel(order="F"),
        grid_z.ravel(order="F"),
    ])

    voxels = np.arange(mesh.n_voxels, dtype=np.int64)
    cells = _hexahedra(
        _split_voxel_index(voxels, mesh.shape),
        (x.size, y.size),
        HEX_CORNER_OFFSETS,
    )
    return GeometryMesh(
        geometry=Geometry.RECTANGULAR,
        boundaries=(x, y, z),
        vertices=vertices,
        cells=cells,
        cell_voxels=voxels,
        resolution=1,
    )


def build_cylindrical_geometry(mesh: Mesh, resolution: int = 1) -> GeometryMesh:
    """Tessellate a cylindrical mesh into Cartesian hexahedra.

    Every voxel (r, z, theta) gives ``resolution`` consecutive cells, one per
    angular sub-bin. Vertex coordinates are evaluated once on the grid of
    radius, height and angle boundaries, then merged by coordinate so that
    neighbouring cells share vertices and the degenerate points of a zero
    radius collapse into one.
    """
    resolution = validate_resolution(resolution)
    radii, heights, theta = (bounds.copy() for bounds in mesh.boundaries)
    n_r, n_z, n_theta = mesh.shape

    closed = is_full_revolution(theta)
    angles = angular_boundaries(theta, resolution)
    if closed:
        # the last boundary is the first one again
        angles = angles[:-1]
    n_angles = angles.size

    if closed and n_angles < 3:
        print(
            f"[warning] Mesh {mesh.id}: {n_angles} angular segment(s) cannot describe a "
            f"full revolution, cells are degenerate. Increase the resolution."
        )

    cos_theta = np.cos(2.0 * np.pi * angles)
    sin_theta = np.sin(2.0 * np.pi * angles)

    p_r, p_z = radii.size, heights.size
    candidate_ids = np.arange(p_r * p_z * n_angles, dtype=np.int64)
    ir, iz, ia = _split_voxel_index(candidate_ids, (p_r, p_z, n_angles))
    origin = mesh.origin
    candidates = np.column_stack([
        radii[ir] * cos_theta[ia] + origin[0],
        radii[ir] * sin_theta[ia] + origin[1],
        heights[iz] + origin[2],
    ])
    vertices, point_map = deduplicate_vertices(candidates)

    voxels = np.repeat(np.arange(mesh.n_voxels, dtype=np.int64), resolution)
    sub_bins = np.tile(np.arange(resolution, dtype=np.int64), mesh.n_voxels)
    i, j, k = _split_voxel_index(voxels, mesh.shape)
    lower = k * resolution + sub_bins
    upper = (lower + 1) % n_angles if closed else lower + 1

    cells = np.empty((voxels.size, VERTICES_PER_CELL), dtype=np.int64)
    for corner, (d_r, d_z, d_theta) in enumerate(CYL_CORNER_OFFSETS):
        angle_index = upper if d_theta else lower
        cells[:, corner] = point_map[(i + d_r) + (j + d_z) * p_r + angle_index * p_r * p_z]

    if constants.DEBUG:
        print(
            f"[debug] Cylinder {n_r}x{n_z}x{n_theta} voxels, resolution {resolution}, "
            f"{'closed' if closed else 'open'} theta: {cells.shape[0]} cells, "
            f"{vertices.shape[0]} of {candidates.shape[0]} candidate vertices kept"
        )

    return GeometryMesh(
        geometry=Geometry.CYLINDRICAL,
        boundaries=(radii, heights, theta),
        vertices=vertices,
        cells=cells,
        cell_voxels=voxels,
        resolution=resolution,
    )


def build_geometry(mesh: Mesh, resolution: int = 1) -> GeometryMesh:
    """Build the shared geometry for all datasets of ``mesh``.

    Parameters
    ----------
    mesh : Mesh
        Source mesh tally.
    resolution : int
        Angular subdivision for cylindrical meshes, ignored otherwise.

    Raises
    ------
    ConfigurationError
        If ``resolution`` is not an integer >= 1.
    GeometryError
        If the generated cells do not account for every voxel.
    """
    resolution = validate_resolution(resolution)
    if mesh.geometry is Geometry.RECTANGULAR:
        geometry = build_rectangular_geometry(mesh)
    elif mesh.geometry is Geometry.CYLINDRICAL:
        geometry = build_cylindrical_geometry(mesh, resolution)
    else:
        raise GeometryError(f"Unsupported mesh geometry {mesh.geometry!r}")

    if geometry.n_cells != mesh.n_voxels * geometry.resolution:
        raise GeometryError(
            f"Mesh {mesh.id} has {mesh.n_voxels} voxels but {geometry.n_cells} cells "
            f"were generated at resolution {geometry.resolution}"
        )
    return geometry
