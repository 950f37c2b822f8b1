"""
Assembly of per-group datasets from a mesh and its reconstructed geometry.
"""

from __future__ import annotations

from typing import List, Optional

from . import constants
from .data_classes import Dataset, GeometryMesh, Mesh, SelectionSpec
from .errors import ConsistencyError, GeometryError
from .scaling import ValueScaler


def assemble_dataset(
    mesh: Mesh,
    geometry: GeometryMesh,
    energy_index: int,
    time_index: int,
    scaler: Optional[ValueScaler] = None,
    include_errors: bool = True,
) -> Dataset:
    """Build the dataset of a single (energy, time) group.

    Values are scaled then replicated onto every cell generated for their
    voxel. Errors are replicated the same way but never scaled.
    """
    group = mesh.find_group(energy_index, time_index)
    if group is None:
        raise ConsistencyError(
            f"Mesh {mesh.id} has no results for energy group {energy_index}, "
            f"time group {time_index}"
        )
    if geometry.n_voxels != group.values.size:
        raise GeometryError(
            f"Geometry describes {geometry.n_voxels} voxels, group "
            f"({energy_index}, {time_index}) has {group.values.size}"
        )

    scaler = scaler or ValueScaler()
    values = geometry.replicate(scaler.apply(group.values))

    errors = None
    if include_errors and group.errors is not None:
        errors = geometry.replicate(scaler.apply_errors(group.errors))

    return Dataset(
        geometry=geometry,
        energy_index=energy_index,
        time_index=time_index,
        energy_label=mesh.energy_bounds[energy_index].label,
        time_label=mesh.time_bounds[time_index].label,
        values=values,
        errors=errors,
    )


def assemble_datasets(
    mesh: Mesh,
    geometry: GeometryMesh,
    selection: SelectionSpec,
    scaler: Optional[ValueScaler] = None,
    include_errors: bool = True,
) -> List[Dataset]:
    """One dataset per selected pair, in selection order."""
    datasets = []
    for energy_index, time_index in selection.pairs:
        datasets.append(
            assemble_dataset(mesh, geometry, energy_index, time_index, scaler, include_errors)
        )
    if constants.DEBUG:
        print(f"[debug] Assembled {len(datasets)} dataset(s) of {geometry.n_cells} cells")
    return datasets
