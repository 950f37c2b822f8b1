"""
mesh2vtk core modules

- constants: shared constants and the debug flag
- errors: exception hierarchy
- data_classes: Mesh, Group, GeometryMesh, Dataset and friends
- selection: energy/time group filters
- scaling: result rescaling
- geometry: rectangular and cylindrical cell reconstruction
- assembly: per-group dataset assembly
- output: writer configuration, file naming and dispatch
- meshtal: COL/CF meshtal reader
- vtk_writer: VTK file output (imported lazily, needs the vtk package)
"""

# 常数
from .constants import DEBUG, TOTAL_KEYWORD

# 异常
from .errors import (
    Mesh2VtkError,
    SelectionError,
    ConfigurationError,
    GeometryError,
    ConsistencyError,
    MeshtalError,
    WriterError,
)

# 数据类
from .data_classes import (
    Geometry,
    MeshFormat,
    GroupBound,
    Group,
    Mesh,
    SelectionSpec,
    GeometryMesh,
    Dataset,
    bounds_from_edges,
)

# 组选择
from .selection import (
    FilterKind,
    GroupFilter,
    resolve_groups,
    resolve_selection,
)

# 缩放
from .scaling import ValueScaler

# 几何重建
from .geometry import (
    validate_resolution,
    is_full_revolution,
    angular_boundaries,
    deduplicate_vertices,
    build_rectangular_geometry,
    build_cylindrical_geometry,
    build_geometry,
)

# 数据集组装
from .assembly import assemble_dataset, assemble_datasets

# 输出
from .output import (
    VtkFormat,
    ByteOrder,
    Compressor,
    WriterConfig,
    OutputDispatcher,
    output_path,
    check_mesh_format,
)

# 读取
from .meshtal import read_meshtal, repair_numbers

__all__ = [
    # 常数
    'DEBUG',
    'TOTAL_KEYWORD',
    # 异常
    'Mesh2VtkError',
    'SelectionError',
    'ConfigurationError',
    'GeometryError',
    'ConsistencyError',
    'MeshtalError',
    'WriterError',
    # 数据类
    'Geometry',
    'MeshFormat',
    'GroupBound',
    'Group',
    'Mesh',
    'SelectionSpec',
    'GeometryMesh',
    'Dataset',
    'bounds_from_edges',
    # 组选择
    'FilterKind',
    'GroupFilter',
    'resolve_groups',
    'resolve_selection',
    # 缩放
    'ValueScaler',
    # 几何
    'validate_resolution',
    'is_full_revolution',
    'angular_boundaries',
    'deduplicate_vertices',
    'build_rectangular_geometry',
    'build_cylindrical_geometry',
    'build_geometry',
    # 组装
    'assemble_dataset',
    'assemble_datasets',
    # 输出
    'VtkFormat',
    'ByteOrder',
    'Compressor',
    'WriterConfig',
    'OutputDispatcher',
    'output_path',
    'check_mesh_format',
    # 读取
    'read_meshtal',
    'repair_numbers',
]
