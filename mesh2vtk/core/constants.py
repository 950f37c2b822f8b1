"""
Shared constants and the debug flag.
"""

# Debug flag, switched on by ``mesh2vtk -v``
DEBUG = False

# Keyword accepted wherever a group index or value is expected
TOTAL_KEYWORD = "total"

# Absolute tolerance, in revolutions, for theta bounds closing a full turn
FULL_REVOLUTION_TOL = 1.0e-9

# Hexahedron corner offsets (d_axis1, d_axis2, d_axis3) in VTK_HEXAHEDRON order
HEX_CORNER_OFFSETS = (
    (0, 0, 0),
    (1, 0, 0),
    (1, 1, 0),
    (0, 1, 0),
    (0, 0, 1),
    (1, 0, 1),
    (1, 1, 1),
    (0, 1, 1),
)

# Cylindrical hexahedra wind (r, theta) in the base plane and extrude along z:
# offsets are (d_r, d_z, d_theta)
CYL_CORNER_OFFSETS = (
    (0, 0, 0),
    (1, 0, 0),
    (1, 0, 1),
    (0, 0, 1),
    (0, 1, 0),
    (1, 1, 0),
    (1, 1, 1),
    (0, 1, 1),
)

VERTICES_PER_CELL = 8
