"""
Unit tests for writer configuration, file naming and dispatch.
"""

from pathlib import Path

import numpy as np
import pytest

from mesh2vtk.core.assembly import assemble_datasets
from mesh2vtk.core.data_classes import Geometry, MeshFormat, SelectionSpec
from mesh2vtk.core.errors import ConfigurationError, WriterError
from mesh2vtk.core.geometry import build_geometry
from mesh2vtk.core.output import (
    ByteOrder,
    Compressor,
    OutputDispatcher,
    VtkFormat,
    WriterConfig,
    check_mesh_format,
    output_path,
)
from mesh2vtk.core.selection import resolve_selection
from mesh2vtk.testing import create_simple_cylindrical_mesh, create_simple_rectangular_mesh


class RecordingWriter:
    """Stands in for the VTK writer and remembers every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, dataset, path, config, field_data=None):
        self.calls.append((dataset, path, config, field_data))


class TestWriterConfig:
    """Encoding options"""

    def test_defaults(self):
        config = WriterConfig.from_names()
        assert config.format is VtkFormat.XML
        assert config.byte_order is ByteOrder.BIG_ENDIAN
        assert config.compressor is Compressor.LZMA
        assert config.binary
        assert config.is_xml

    def test_legacy_ascii_is_not_binary(self):
        assert not WriterConfig.from_names("legacy-ascii").binary
        assert WriterConfig.from_names("legacy-binary").binary

    def test_names_are_forgiving(self):
        config = WriterConfig.from_names("Legacy_Binary", "LITTLE-ENDIAN", " zlib ")
        assert config.format is VtkFormat.LEGACY_BINARY
        assert config.byte_order is ByteOrder.LITTLE_ENDIAN
        assert config.compressor is Compressor.ZLIB

    @pytest.mark.parametrize("args", [("vtp",), ("xml", "middle-endian"), ("xml", "big-endian", "gzip")])
    def test_unknown_names(self, args):
        with pytest.raises(ConfigurationError, match="expected one of"):
            WriterConfig.from_names(*args)

    @pytest.mark.parametrize("fmt, geometry, extension", [
        ("xml", Geometry.RECTANGULAR, "vtr"),
        ("xml", Geometry.CYLINDRICAL, "vtu"),
        ("legacy-ascii", Geometry.RECTANGULAR, "vtk"),
        ("legacy-binary", Geometry.CYLINDRICAL, "vtk"),
    ])
    def test_extension(self, fmt, geometry, extension):
        assert WriterConfig.from_names(fmt).extension(geometry) == extension

    def test_choices(self):
        assert Compressor.choices() == ["lzma", "lz4", "zlib", "none"]


class TestOutputPath:
    """File naming"""

    def setup_method(self):
        self.mesh = create_simple_rectangular_mesh(shape=(1, 1, 1))
        self.config = WriterConfig()

    def test_single_pair(self):
        selection = SelectionSpec((2,), (0,))
        assert output_path("fmesh", self.mesh, self.config, 2, 0, selection) == Path("fmesh_104.vtr")

    def test_extension_replaced_and_directory_kept(self):
        path = output_path(Path("out") / "my_output.vtk", self.mesh, self.config)
        assert path == Path("out") / "my_output_104.vtr"

    @pytest.mark.parametrize("base", ["", "."])
    def test_empty_base_uses_default_name(self, base):
        assert output_path(base, self.mesh, self.config) == Path("fmesh_104.vtr")

    def test_energy_suffix(self):
        selection = SelectionSpec((0, 1, 2), (0,))
        assert output_path("fmesh", self.mesh, self.config, 1, 0, selection).name == "fmesh_104_e1.vtr"

    def test_energy_and_time_suffix(self):
        selection = SelectionSpec((0, 1), (0, 1))
        path = output_path("fmesh", self.mesh, WriterConfig.from_names("legacy-ascii"), 1, 0, selection)
        assert path.name == "fmesh_104_e1_t0.vtk"

    def test_names_unique_across_selection(self):
        selection = SelectionSpec((0, 1, 2), (3, 4))
        dispatcher = OutputDispatcher(self.config, RecordingWriter())
        paths = dispatcher.paths("fmesh", self.mesh, selection)
        assert len(set(paths)) == len(selection)


class TestCheckMeshFormat:
    """Source layouts"""

    @pytest.mark.parametrize("mesh_format", [MeshFormat.COL, MeshFormat.CF, MeshFormat.IJ])
    def test_plain_formats(self, mesh_format):
        mesh = create_simple_rectangular_mesh(shape=(1, 1, 1), mesh_format=mesh_format)
        assert check_mesh_format(mesh) is None

    def test_cuv_requires_metadata(self):
        mesh = create_simple_rectangular_mesh(shape=(1, 1, 1), mesh_format=MeshFormat.CUV)
        with pytest.raises(ConfigurationError, match="cell-under-voxel"):
            check_mesh_format(mesh)

    def test_cuv_metadata_passed_through(self):
        mesh = create_simple_rectangular_mesh(shape=(1, 1, 1), mesh_format=MeshFormat.CUV)
        mesh.cuv = {"cell": np.array([10.0, 20.0])}
        assert check_mesh_format(mesh) is mesh.cuv


class TestOutputDispatcher:
    """Handing datasets to the writer"""

    def setup_method(self):
        self.mesh = create_simple_cylindrical_mesh()
        self.selection = resolve_selection(self.mesh)
        self.geometry = build_geometry(self.mesh, 2)
        self.datasets = assemble_datasets(self.mesh, self.geometry, self.selection)

    def test_dispatch_order(self, tmp_path):
        writer = RecordingWriter()
        dispatcher = OutputDispatcher(WriterConfig(), writer, progress=False)
        paths = dispatcher.dispatch(tmp_path / "fmesh", self.mesh, self.datasets, self.selection)
        assert [p.name for p in paths] == ["fmesh_104_e0.vtu", "fmesh_104_e1.vtu", "fmesh_104_e2.vtu"]
        assert [call[0].pair for call in writer.calls] == [(0, 0), (1, 0), (2, 0)]
        assert [call[1] for call in writer.calls] == paths
        assert all(call[3] is None for call in writer.calls)

    def test_dispatch_with_progress(self, tmp_path):
        writer = RecordingWriter()
        paths = OutputDispatcher(writer=writer).dispatch(
            tmp_path / "fmesh", self.mesh, self.datasets, self.selection
        )
        assert len(paths) == 3

    def test_writer_error_gets_path(self, tmp_path):
        def failing_writer(dataset, path, config, field_data=None):
            raise WriterError("disk full")

        dispatcher = OutputDispatcher(WriterConfig(), failing_writer, progress=False)
        with pytest.raises(WriterError) as excinfo:
            dispatcher.dispatch(tmp_path / "fmesh", self.mesh, self.datasets, self.selection)
        assert excinfo.value.path == tmp_path / "fmesh_104_e0.vtu"
        assert "disk full" in str(excinfo.value)

    def test_legacy_binary_little_endian_warns(self, tmp_path, capsys):
        config = WriterConfig.from_names("legacy-binary", "little-endian")
        OutputDispatcher(config, RecordingWriter(), progress=False).dispatch(
            tmp_path / "fmesh", self.mesh, self.datasets[:1], SelectionSpec((0,), (0,))
        )
        assert "[warning]" in capsys.readouterr().out

    def test_cuv_field_data(self, tmp_path):
        mesh = create_simple_rectangular_mesh(shape=(1, 1, 2), mesh_format=MeshFormat.CUV)
        mesh.cuv = {"cell": np.array([1.0, 2.0])}
        selection = SelectionSpec((2,), (0,))
        datasets = assemble_datasets(mesh, build_geometry(mesh), selection)
        writer = RecordingWriter()
        OutputDispatcher(WriterConfig(), writer, progress=False).dispatch(
            tmp_path / "fmesh", mesh, datasets, selection
        )
        assert writer.calls[0][3] is mesh.cuv


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
