"""
Unit tests for the meshtal column format reader.
"""

import numpy as np
import pytest

from mesh2vtk.core.data_classes import Geometry, MeshFormat
from mesh2vtk.core.errors import MeshtalError
from mesh2vtk.core.meshtal import read_meshtal, repair_numbers


class TestRepairNumbers:
    """Fixing fortran formatted numbers"""

    @pytest.mark.parametrize("line, expected", [
        ("1.00000E+00-2.00000E-01", "1.00000E+00 -2.00000E-01"),
        ("1.00+002", "1.00E+002"),
        ("2.5-1.5", "2.5 -1.5"),
        ("  1.0E-01  2.0E+01", "  1.0E-01  2.0E+01"),
    ])
    def test_repair(self, line, expected):
        assert repair_numbers(line) == expected


class TestRectangularTally:
    """COL layout with energy groups"""

    def test_header(self, meshtal_file):
        mesh = read_meshtal(meshtal_file, 104)
        assert mesh.id == 104
        assert mesh.geometry is Geometry.RECTANGULAR
        assert mesh.format is MeshFormat.COL
        assert mesh.particle == "neutron"
        assert mesh.shape == (2, 1, 1)
        np.testing.assert_array_equal(mesh.axis1, [0.0, 5.0, 10.0])

    def test_groups(self, meshtal_file):
        mesh = read_meshtal(meshtal_file, 104)
        assert [b.label for b in mesh.energy_bounds] == ["1.00000e+00", "2.00000e+01", "Total"]
        assert [b.label for b in mesh.time_bounds] == ["Total"]
        assert len(mesh.groups) == 3

    def test_values_in_voxel_order(self, meshtal_file):
        mesh = read_meshtal(meshtal_file, 104)
        np.testing.assert_array_equal(mesh.find_group(0, 0).values, [1.0, 2.0])
        np.testing.assert_array_equal(mesh.find_group(0, 0).errors, [0.1, 0.2])
        np.testing.assert_array_equal(mesh.find_group(1, 0).values, [3.0, 4.0])
        np.testing.assert_array_equal(mesh.find_group(2, 0).values, [4.0, 6.0])


class TestCylindricalTally:
    """COL layout of a cylindrical mesh"""

    def test_geometry(self, meshtal_file):
        mesh = read_meshtal(meshtal_file, 204)
        assert mesh.geometry is Geometry.CYLINDRICAL
        assert mesh.particle == "photon"
        np.testing.assert_array_equal(mesh.origin, [0.0, 0.0, -5.0])
        np.testing.assert_array_equal(mesh.axis3, [0.0, 0.5, 1.0])
        assert mesh.shape == (1, 1, 2)

    def test_single_energy_bin_is_total(self, meshtal_file):
        mesh = read_meshtal(meshtal_file, 204)
        assert len(mesh.energy_bounds) == 1
        assert mesh.energy_bounds[0].is_total

    def test_missing_exponent_repaired(self, meshtal_file):
        group = read_meshtal(meshtal_file, 204).find_group(0, 0)
        np.testing.assert_allclose(group.values, [0.5, 0.7])
        np.testing.assert_allclose(group.errors, [0.1, 0.2])


class TestCfTally:
    """CF layout with volume columns"""

    def test_format(self, meshtal_file):
        mesh = read_meshtal(meshtal_file, 304)
        assert mesh.format is MeshFormat.CF
        assert mesh.shape == (1, 1, 2)
        np.testing.assert_array_equal(mesh.find_group(0, 0).values, [1.0, 2.0])


class TestReaderErrors:
    """Unreadable inputs"""

    def test_missing_file(self, tmp_path):
        with pytest.raises(MeshtalError, match="does not exist"):
            read_meshtal(str(tmp_path / "nothing"), 104)

    def test_missing_tally(self, meshtal_file):
        with pytest.raises(MeshtalError, match="999 not found"):
            read_meshtal(meshtal_file, 999)

    def test_unsupported_layout(self, tmp_path, meshtal_text):
        path = tmp_path / "meshtal"
        path.write_text(meshtal_text.replace("   Energy         X", "   Cell   Energy         X"))
        with pytest.raises(MeshtalError, match="Unsupported"):
            read_meshtal(str(path), 104)

    def test_missing_rows(self, tmp_path, meshtal_text):
        path = tmp_path / "meshtal"
        path.write_text(meshtal_text.replace(
            "   Total         7.500     5.000     5.000  6.00000E+00  2.00000E-01\n", ""
        ))
        with pytest.raises(MeshtalError, match="one per voxel"):
            read_meshtal(str(path), 104)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
