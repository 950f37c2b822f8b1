"""
Unit tests for dataset assembly.
"""

import numpy as np
import pytest

from mesh2vtk.core.assembly import assemble_dataset, assemble_datasets
from mesh2vtk.core.data_classes import Mesh, SelectionSpec
from mesh2vtk.core.errors import ConsistencyError
from mesh2vtk.core.geometry import build_geometry
from mesh2vtk.core.scaling import ValueScaler
from mesh2vtk.core.selection import resolve_selection
from mesh2vtk.testing import (
    create_simple_cylindrical_mesh,
    create_simple_rectangular_mesh,
    encoded_errors,
    encoded_values,
)


class TestRectangularAssembly:
    """One cell per voxel"""

    def setup_method(self):
        self.mesh = create_simple_rectangular_mesh(shape=(2, 3, 4))
        self.geometry = build_geometry(self.mesh)

    def test_one_dataset_per_pair(self):
        selection = resolve_selection(self.mesh)
        datasets = assemble_datasets(self.mesh, self.geometry, selection)
        assert [d.pair for d in datasets] == [(0, 0), (1, 0), (2, 0)]
        for dataset in datasets:
            assert dataset.geometry is self.geometry
            np.testing.assert_array_equal(
                dataset.values, encoded_values(24, dataset.energy_index, dataset.time_index)
            )
            np.testing.assert_array_equal(dataset.errors, encoded_errors(24))

    def test_labels(self):
        dataset = assemble_dataset(self.mesh, self.geometry, 2, 0)
        assert dataset.energy_label == "Total"
        assert dataset.time_label == "Total"
        assert assemble_dataset(self.mesh, self.geometry, 1, 0).energy_label == "2.00000e+01"

    def test_scaled_values_unscaled_errors(self):
        dataset = assemble_dataset(self.mesh, self.geometry, 1, 0, ValueScaler(2.0))
        np.testing.assert_array_equal(dataset.values, 2.0 * encoded_values(24, 1, 0))
        np.testing.assert_array_equal(dataset.errors, encoded_errors(24))

    def test_mesh_left_untouched(self):
        assemble_dataset(self.mesh, self.geometry, 0, 0, ValueScaler(10.0))
        np.testing.assert_array_equal(self.mesh.find_group(0, 0).values, encoded_values(24))

    def test_errors_excluded(self):
        dataset = assemble_dataset(self.mesh, self.geometry, 0, 0, include_errors=False)
        assert dataset.errors is None
        assert not dataset.has_errors

    def test_mesh_without_errors(self):
        mesh = create_simple_rectangular_mesh(with_errors=False)
        dataset = assemble_dataset(mesh, build_geometry(mesh), 0, 0)
        assert dataset.errors is None

    def test_dataset_is_read_only(self):
        dataset = assemble_dataset(self.mesh, self.geometry, 0, 0)
        with pytest.raises(ValueError):
            dataset.values[0] = -1.0


class TestCylindricalAssembly:
    """Values replicated onto angular sub-cells"""

    def test_replicated_values(self):
        mesh = create_simple_cylindrical_mesh()
        geometry = build_geometry(mesh, resolution=3)
        dataset = assemble_dataset(mesh, geometry, 1, 0, ValueScaler(0.5))
        assert dataset.n_cells == 3 * mesh.n_voxels
        np.testing.assert_array_equal(
            dataset.values, np.repeat(0.5 * encoded_values(mesh.n_voxels, 1, 0), 3)
        )
        np.testing.assert_array_equal(dataset.errors, np.repeat(encoded_errors(mesh.n_voxels), 3))

    def test_every_sub_cell_matches_voxel(self):
        mesh = create_simple_cylindrical_mesh(n_theta=3)
        geometry = build_geometry(mesh, resolution=4)
        dataset = assemble_dataset(mesh, geometry, 0, 0)
        voxel_values = mesh.find_group(0, 0).values
        for voxel in range(mesh.n_voxels):
            cells = geometry.cells_for_voxel(voxel)
            np.testing.assert_array_equal(dataset.values[cells], voxel_values[voxel])


class TestMissingGroups:
    """Groups selected but absent from the mesh"""

    def test_missing_group(self):
        full = create_simple_rectangular_mesh(shape=(1, 1, 2))
        mesh = Mesh(
            id=full.id,
            geometry=full.geometry,
            axis1=full.axis1,
            axis2=full.axis2,
            axis3=full.axis3,
            energy_bounds=full.energy_bounds,
            time_bounds=full.time_bounds,
            groups=[full.find_group(0, 0)],
        )
        geometry = build_geometry(mesh)
        with pytest.raises(ConsistencyError, match="energy group 1"):
            assemble_datasets(mesh, geometry, SelectionSpec((0, 1), (0,)))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
