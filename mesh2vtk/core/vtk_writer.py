"""
VTK file output.

Rectangular meshes are written as rectilinear grids, cylindrical meshes as
unstructured grids of hexahedra. Results are stored as cell data.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
import vtk
from vtk.util import numpy_support as nps

from .. import config as settings
from .constants import VERTICES_PER_CELL
from .data_classes import Dataset, Geometry, GeometryMesh
from .errors import WriterError
from .output import ByteOrder, Compressor, VtkFormat, WriterConfig


def _double_array(name: str, data: np.ndarray):
    # numpy_to_vtk needs a writable, contiguous buffer
    array = nps.numpy_to_vtk(np.array(data, dtype=np.float64), deep=True, array_type=vtk.VTK_DOUBLE)
    array.SetName(name)
    return array


def _string_array(name: str, value: str):
    array = vtk.vtkStringArray()
    array.SetName(name)
    array.InsertNextValue(value)
    return array


def create_rectilinear_grid(geometry: GeometryMesh):
    """Rectilinear grid straight from the bin boundaries."""
    x, y, z = geometry.boundaries
    grid = vtk.vtkRectilinearGrid()
    grid.SetDimensions(x.size, y.size, z.size)
    grid.SetXCoordinates(_double_array("x", x))
    grid.SetYCoordinates(_double_array("y", y))
    grid.SetZCoordinates(_double_array("z", z))
    return grid


def create_unstructured_grid(geometry: GeometryMesh):
    """Unstructured grid of VTK_HEXAHEDRON cells."""
    points = vtk.vtkPoints()
    points.SetData(nps.numpy_to_vtk(np.array(geometry.vertices, dtype=np.float64), deep=True))

    n_cells = geometry.n_cells
    connectivity = np.hstack([
        np.full((n_cells, 1), VERTICES_PER_CELL, dtype=np.int64),
        geometry.cells,
    ]).ravel()
    cells = vtk.vtkCellArray()
    cells.SetCells(n_cells, nps.numpy_to_vtk(connectivity, deep=True, array_type=vtk.VTK_ID_TYPE))

    grid = vtk.vtkUnstructuredGrid()
    grid.SetPoints(points)
    grid.SetCells(vtk.VTK_HEXAHEDRON, cells)
    return grid


def create_grid(dataset: Dataset, field_data: Optional[Dict[str, np.ndarray]] = None):
    """Build the VTK grid holding ``dataset``."""
    geometry = dataset.geometry
    if geometry.geometry is Geometry.RECTANGULAR:
        grid = create_rectilinear_grid(geometry)
    elif geometry.geometry is Geometry.CYLINDRICAL:
        grid = create_unstructured_grid(geometry)
    else:
        raise WriterError(f"No VTK grid type for geometry {geometry.geometry!r}")

    cell_data = grid.GetCellData()
    cell_data.AddArray(_double_array(settings.RESULT_ARRAY_NAME, dataset.values))
    cell_data.SetActiveScalars(settings.RESULT_ARRAY_NAME)
    if dataset.errors is not None:
        cell_data.AddArray(_double_array(settings.ERROR_ARRAY_NAME, dataset.errors))

    fields = grid.GetFieldData()
    fields.AddArray(_string_array("energy_group", dataset.energy_label))
    fields.AddArray(_string_array("time_group", dataset.time_label))
    for name, values in (field_data or {}).items():
        fields.AddArray(_double_array(name, np.asarray(values, dtype=float).ravel()))
    return grid


def _create_writer(geometry: Geometry, config: WriterConfig):
    rectangular = geometry is Geometry.RECTANGULAR

    if config.format is VtkFormat.XML:
        writer = vtk.vtkXMLRectilinearGridWriter() if rectangular else vtk.vtkXMLUnstructuredGridWriter()
        if config.byte_order is ByteOrder.BIG_ENDIAN:
            writer.SetByteOrderToBigEndian()
        elif config.byte_order is ByteOrder.LITTLE_ENDIAN:
            writer.SetByteOrderToLittleEndian()
        else:
            raise WriterError(f"Unhandled byte order {config.byte_order!r}")

        if config.compressor is Compressor.LZMA:
            writer.SetCompressorTypeToLZMA()
        elif config.compressor is Compressor.LZ4:
            writer.SetCompressorTypeToLZ4()
        elif config.compressor is Compressor.ZLIB:
            writer.SetCompressorTypeToZLib()
        elif config.compressor is Compressor.NONE:
            writer.SetCompressorTypeToNone()
        else:
            raise WriterError(f"Unhandled compressor {config.compressor!r}")

        if config.binary:
            writer.SetDataModeToBinary()
        else:
            writer.SetDataModeToAscii()
        return writer

    if config.format in (VtkFormat.LEGACY_ASCII, VtkFormat.LEGACY_BINARY):
        writer = vtk.vtkRectilinearGridWriter() if rectangular else vtk.vtkUnstructuredGridWriter()
        if config.format is VtkFormat.LEGACY_BINARY:
            writer.SetFileTypeToBinary()
        else:
            writer.SetFileTypeToASCII()
        return writer

    raise WriterError(f"Unhandled VTK format {config.format!r}")


def write_vtk(
    dataset: Dataset,
    path: Union[str, Path],
    config: WriterConfig,
    field_data: Optional[Dict[str, np.ndarray]] = None,
) -> Path:
    """Write one dataset to ``path``.

    Raises
    ------
    WriterError
        If the file cannot be created or VTK reports a failure.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriterError(f"Cannot create output directory: {exc}", path) from exc

    grid = create_grid(dataset, field_data)
    writer = _create_writer(dataset.geometry.geometry, config)
    writer.SetFileName(str(path))
    writer.SetInputData(grid)
    if writer.Write() != 1:
        raise WriterError("VTK writer reported a failure", path)
    return path
