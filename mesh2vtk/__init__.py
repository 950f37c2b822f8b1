"""
mesh2vtk
========

Conversion of MCNP mesh tallies (meshtal files) to visual toolkit (VTK)
files. Rectangular meshes become rectilinear grids; cylindrical meshes, which
VTK cannot represent natively, are tessellated into hexahedra with optional
angular subdivision.

Modules:
--------
- config: Configurable defaults
- core.data_classes: Data structures (Mesh, Group, GeometryMesh, Dataset)
- core.selection: Energy/time group filtering
- core.scaling: Result rescaling
- core.geometry: Geometry reconstruction
- core.assembly: Dataset assembly
- core.output: Writer configuration and file naming
- core.meshtal: Meshtal column format reader
- core.vtk_writer: VTK output
- plotting: Geometry preview
- runner: Pipeline and command line
"""

from . import config
from .core import *
from .core import __all__ as _core_all
from .runner import (
    ConversionOptions,
    convert_mesh,
    run_conversion,
    main,
)

__version__ = "1.0.7"
__all__ = [
    # Config module
    "config",
    # Runner
    "ConversionOptions",
    "convert_mesh",
    "run_conversion",
    "main",
] + list(_core_all)
