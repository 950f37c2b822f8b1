"""
Linear rescaling of tally results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Optional

import numpy as np

from .errors import ConfigurationError


@dataclass(frozen=True)
class ValueScaler:
    """Multiply results by a constant.

    Errors in meshtal files are relative, so they are unchanged by a rescale
    and :meth:`apply_errors` returns them as they are.
    """

    factor: float = 1.0

    def __post_init__(self):
        factor = self.factor
        if isinstance(factor, bool) or not isinstance(factor, Real):
            raise ConfigurationError(f"Scale factor must be a number, got {factor!r}")
        if not math.isfinite(factor) or factor == 0.0:
            raise ConfigurationError(f"Scale factor must be finite and non-zero, got {factor!r}")
        object.__setattr__(self, "factor", float(factor))

    @property
    def is_identity(self) -> bool:
        return self.factor == 1.0

    def apply(self, values: np.ndarray) -> np.ndarray:
        """Return a scaled copy of ``values``."""
        return np.asarray(values, dtype=float) * self.factor

    def apply_errors(self, errors: Optional[np.ndarray]) -> Optional[np.ndarray]:
        if errors is None:
            return None
        return np.asarray(errors, dtype=float).copy()
