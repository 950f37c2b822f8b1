"""
Exception types raised by the conversion pipeline.

Every failure is fatal to a single conversion, so the hierarchy is flat and
callers can catch :class:`Mesh2VtkError` to report any of them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class Mesh2VtkError(Exception):
    """Base class for all conversion errors."""


class SelectionError(Mesh2VtkError):
    """An energy/time filter could not be resolved against the mesh groups."""


class ConfigurationError(Mesh2VtkError):
    """Invalid conversion option (scale factor, resolution, format...)."""


class GeometryError(Mesh2VtkError):
    """Voxel counts and bin boundaries disagree."""


class ConsistencyError(Mesh2VtkError):
    """A resolved (energy, time) pair has no matching group in the mesh."""


class MeshtalError(Mesh2VtkError):
    """A mesh tally could not be found or parsed in a meshtal file."""


class WriterError(Mesh2VtkError):
    """The VTK writer failed to produce an output file."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"
