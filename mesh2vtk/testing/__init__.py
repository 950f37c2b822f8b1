"""
Testing subpackage for mesh2vtk.

This subpackage provides tools for testing and debugging the conversion:
- Synthetic rectangular and cylindrical mesh tallies
- Validation of reconstructed geometry

Example usage:
    from mesh2vtk.testing import create_simple_cylindrical_mesh, validate_geometry_mesh

    mesh = create_simple_cylindrical_mesh(n_theta=4)
    ok, message = validate_geometry_mesh(build_geometry(mesh, resolution=3))
"""

from .simple_meshes import (
    encoded_values,
    encoded_errors,
    make_group_bounds,
    create_simple_mesh,
    create_simple_rectangular_mesh,
    create_simple_cylindrical_mesh,
    print_mesh_info,
)

from .validation import (
    hexahedron_volumes,
    validate_geometry_mesh,
)

__all__ = [
    # Simple meshes
    "encoded_values",
    "encoded_errors",
    "make_group_bounds",
    "create_simple_mesh",
    "create_simple_rectangular_mesh",
    "create_simple_cylindrical_mesh",
    "print_mesh_info",
    # Validation
    "hexahedron_volumes",
    "validate_geometry_mesh",
]
