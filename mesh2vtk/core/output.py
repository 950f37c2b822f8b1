"""
Output configuration and dispatch of datasets to the VTK writer.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
from tqdm import tqdm

from . import constants
from .. import config as settings
from .data_classes import Dataset, Geometry, Mesh, MeshFormat, SelectionSpec
from .errors import ConfigurationError, WriterError


class _NamedChoice(enum.Enum):
    """Enum whose values are the names used on the command line."""

    @classmethod
    def from_name(cls, name: Union[str, "_NamedChoice"]):
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == key:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ConfigurationError(f"Unknown {cls.__name__} {name!r}, expected one of: {choices}")

    @classmethod
    def choices(cls) -> List[str]:
        return [member.value for member in cls]


class VtkFormat(_NamedChoice):
    """VTK container and payload encoding."""

    XML = "xml"
    LEGACY_ASCII = "legacy-ascii"
    LEGACY_BINARY = "legacy-binary"


class ByteOrder(_NamedChoice):
    BIG_ENDIAN = "big-endian"
    LITTLE_ENDIAN = "little-endian"


class Compressor(_NamedChoice):
    """Compression codec for XML files."""

    LZMA = "lzma"
    LZ4 = "lz4"
    ZLIB = "zlib"
    NONE = "none"


@dataclass(frozen=True)
class WriterConfig:
    """Everything the writer needs to know about the file encoding."""

    format: VtkFormat = VtkFormat.XML
    byte_order: ByteOrder = ByteOrder.BIG_ENDIAN
    compressor: Compressor = Compressor.LZMA
    binary: bool = True

    @classmethod
    def from_names(
        cls,
        format: str = "xml",
        byte_order: str = "big-endian",
        compressor: str = "lzma",
    ) -> "WriterConfig":
        vtk_format = VtkFormat.from_name(format)
        return cls(
            format=vtk_format,
            byte_order=ByteOrder.from_name(byte_order),
            compressor=Compressor.from_name(compressor),
            binary=vtk_format is not VtkFormat.LEGACY_ASCII,
        )

    @property
    def is_xml(self) -> bool:
        return self.format is VtkFormat.XML

    def extension(self, geometry: Geometry) -> str:
        """File extension for a mesh geometry in this format."""
        if self.format is VtkFormat.XML:
            if geometry is Geometry.RECTANGULAR:
                return "vtr"
            if geometry is Geometry.CYLINDRICAL:
                return "vtu"
            raise ConfigurationError(f"No XML extension for geometry {geometry!r}")
        if self.format in (VtkFormat.LEGACY_ASCII, VtkFormat.LEGACY_BINARY):
            return "vtk"
        raise ConfigurationError(f"Unhandled VTK format {self.format!r}")


def output_path(
    base: Union[str, Path],
    mesh: Mesh,
    config: WriterConfig,
    energy_index: Optional[int] = None,
    time_index: Optional[int] = None,
    selection: Optional[SelectionSpec] = None,
) -> Path:
    """Output file for one dataset.

    The stem of ``base`` is kept, the tally number appended, and when the
    selection holds several pairs the varying axes are appended as
    ``_e<index>`` and ``_t<index>``.
    """
    base = Path(base)
    stem = base.stem or settings.DEFAULT_OUTPUT_NAME
    name = f"{stem}_{mesh.id}"
    if selection is not None and len(selection) > 1:
        if len(selection.energies) > 1 and energy_index is not None:
            name += f"_e{energy_index}"
        if len(selection.times) > 1 and time_index is not None:
            name += f"_t{time_index}"
    return base.parent / f"{name}.{config.extension(mesh.geometry)}"


def check_mesh_format(mesh: Mesh) -> Optional[Dict[str, np.ndarray]]:
    """Validate the source layout, returning the field data to pass through."""
    if mesh.format is MeshFormat.CUV:
        if not mesh.cuv:
            raise ConfigurationError(
                f"Mesh {mesh.id} is a CUV tally without cell-under-voxel data"
            )
        return mesh.cuv
    if mesh.format in (MeshFormat.COL, MeshFormat.CF, MeshFormat.IJ, MeshFormat.IK, MeshFormat.JK):
        return None
    raise ConfigurationError(f"Unsupported mesh format {mesh.format!r}")


Writer = Callable[..., None]


class OutputDispatcher:
    """Name datasets and hand them to the writer.

    Parameters
    ----------
    config : WriterConfig
        File encoding.
    writer : callable, optional
        ``writer(dataset, path, config, field_data=None)``. Defaults to
        :func:`mesh2vtk.core.vtk_writer.write_vtk`.
    progress : bool
        Show a progress bar when several files are written.
    """

    def __init__(self, config: Optional[WriterConfig] = None, writer: Optional[Writer] = None,
                 progress: bool = True):
        if writer is None:
            from .vtk_writer import write_vtk
            writer = write_vtk
        self.config = config or WriterConfig()
        self.writer = writer
        self.progress = progress

    def paths(self, base: Union[str, Path], mesh: Mesh, selection: SelectionSpec) -> List[Path]:
        return [
            output_path(base, mesh, self.config, e, t, selection)
            for e, t in selection.pairs
        ]

    def dispatch(
        self,
        base: Union[str, Path],
        mesh: Mesh,
        datasets: Sequence[Dataset],
        selection: SelectionSpec,
    ) -> List[Path]:
        """Write every dataset, returning the files produced in order."""
        field_data = check_mesh_format(mesh)
        if (self.config.format is VtkFormat.LEGACY_BINARY
                and self.config.byte_order is ByteOrder.LITTLE_ENDIAN):
            print("[warning] Legacy binary VTK files are always big endian, ignoring --endian")

        written: List[Path] = []
        items: Iterable[Dataset] = datasets
        if self.progress and len(datasets) > 1:
            items = tqdm(datasets, desc="Writing VTK", unit="file")
        for dataset in items:
            path = output_path(
                base, mesh, self.config, dataset.energy_index, dataset.time_index, selection
            )
            if constants.DEBUG:
                print(f"[debug] Writing energy {dataset.energy_label}, time {dataset.time_label} to {path}")
            try:
                self.writer(dataset, path, self.config, field_data=field_data)
            except WriterError as exc:
                if exc.path is None:
                    exc.path = path
                raise
            written.append(path)
        return written
