"""Fixed-point scaling between external decimals and internal values.

Prices and amounts are stored multiplied by ``SCALE_FACTOR`` (10^18).
The conversion uses native float arithmetic, so round-trips are exact
only up to float rounding. Both helpers accept scalars or NumPy arrays.

"""

from __future__ import annotations

from typing import TypeVar

import numpy as np
from numpy.typing import NDArray

SCALE_FACTOR = 1e18

_Value = TypeVar("_Value", float, NDArray[np.float64])


def to_internal(value: _Value) -> _Value:
    """Scale an external value up to its internal representation.

    Args:
        value: External decimal value (or array of values).

    Returns:
        ``value * SCALE_FACTOR``.

    """
    return value * SCALE_FACTOR


def to_external(value: _Value) -> _Value:
    """Scale an internal value back down to its external representation.

    Args:
        value: Internal scaled value (or array of values).

    Returns:
        ``value / SCALE_FACTOR``.

    """
    return value / SCALE_FACTOR
