"""
Plotting subpackage for mesh2vtk.

Example usage:
    from mesh2vtk.plotting import plot_geometry_mesh

    geometry = build_geometry(mesh, resolution=3)
    plot_geometry_mesh(geometry, save_path='Figures/cylinder.png')
"""

from .geometry_viewer import (
    exterior_faces,
    plot_geometry_mesh,
)

__all__ = [
    "exterior_faces",
    "plot_geometry_mesh",
]
