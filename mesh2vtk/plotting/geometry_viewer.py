"""
Geometry preview.

Quick matplotlib rendering of a reconstructed mesh, mainly to check a
cylindrical tessellation before opening the VTK file in a proper viewer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from .. import config
from ..core.data_classes import GeometryMesh

# Quadrilateral faces of a VTK_HEXAHEDRON
HEX_FACES = (
    (0, 1, 2, 3),
    (4, 5, 6, 7),
    (0, 1, 5, 4),
    (1, 2, 6, 5),
    (2, 3, 7, 6),
    (3, 0, 4, 7),
)


def exterior_faces(geometry: GeometryMesh) -> Tuple[np.ndarray, np.ndarray]:
    """Faces that belong to a single cell.

    Returns
    -------
    faces : np.ndarray, shape (n_faces, 4)
        Vertex indices of each exterior face.
    owners : np.ndarray, shape (n_faces,)
        Cell owning each face.
    """
    counts: Dict[Tuple[int, ...], int] = {}
    candidates: List[Tuple[Tuple[int, ...], Tuple[int, ...], int]] = []
    for cell_id, cell in enumerate(geometry.cells.tolist()):
        for face in HEX_FACES:
            quad = tuple(cell[n] for n in face)
            key = tuple(sorted(set(quad)))
            if len(key) < 3:
                # collapsed onto the axis
                continue
            counts[key] = counts.get(key, 0) + 1
            candidates.append((key, quad, cell_id))

    faces = [quad for key, quad, _ in candidates if counts[key] == 1]
    owners = [cell_id for key, _, cell_id in candidates if counts[key] == 1]
    return np.array(faces, dtype=np.int64).reshape(-1, 4), np.array(owners, dtype=np.int64)


def _set_axes_equal(ax) -> None:
    """Set equal aspect ratio for 3D axes."""
    limits = np.array(
        [ax.get_xlim3d(), ax.get_ylim3d(), ax.get_zlim3d()],
        dtype=float,
    )
    centres = np.mean(limits, axis=1)
    half = max(limits[:, 1] - limits[:, 0]) / 2.0
    ax.set_xlim3d(centres[0] - half, centres[0] + half)
    ax.set_ylim3d(centres[1] - half, centres[1] + half)
    ax.set_zlim3d(centres[2] - half, centres[2] + half)


def plot_geometry_mesh(
    geometry: GeometryMesh,
    values: Optional[np.ndarray] = None,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    show: bool = False,
    dpi: int = config.PLOT_DPI,
) -> Optional[plt.Figure]:
    """Plot the exterior faces of a reconstructed mesh.

    Parameters
    ----------
    geometry : GeometryMesh
        Geometry to draw.
    values : np.ndarray, optional
        Per-cell values used to colour the faces.
    title : str, optional
        Figure title.
    save_path : str, optional
        Where to save the figure.
    show : bool
        Whether to display the plot interactively.
    dpi : int
        Resolution for saved figure.

    Returns
    -------
    fig : matplotlib.figure.Figure or None
        Figure object unless it was shown interactively.
    """
    faces, owners = exterior_faces(geometry)
    polygons = geometry.vertices[faces]

    fig = plt.figure(figsize=config.PLOT_FIGSIZE)
    ax = fig.add_subplot(111, projection="3d")

    collection = Poly3DCollection(
        polygons,
        alpha=config.PLOT_ALPHA,
        edgecolor=config.PLOT_EDGE_COLOR,
        linewidths=0.2,
    )
    if values is not None:
        values = np.asarray(values, dtype=float)
        collection.set_array(values[owners])
        collection.set_cmap(config.PLOT_CMAP)
        fig.colorbar(collection, ax=ax, shrink=0.6, label=config.RESULT_ARRAY_NAME)
    else:
        collection.set_facecolor((0.2, 0.5, 0.9, config.PLOT_ALPHA))
    ax.add_collection3d(collection)

    lower = geometry.vertices.min(axis=0)
    upper = geometry.vertices.max(axis=0)
    ax.set_xlim3d(lower[0], upper[0])
    ax.set_ylim3d(lower[1], upper[1])
    ax.set_zlim3d(lower[2], upper[2])
    _set_axes_equal(ax)

    ax.set_xlabel("x (cm)")
    ax.set_ylabel("y (cm)")
    ax.set_zlabel("z (cm)")
    ax.set_title(title or f"{geometry.geometry.value} mesh: {geometry.n_cells} cells")
    plt.tight_layout()

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(str(save_path), dpi=dpi)
        print(f"[info] Geometry preview saved to {save_path}")

    if show:
        plt.show()
        return None
    return fig
