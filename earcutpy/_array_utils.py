"""
Internal helpers for turning caller-provided buffers into numpy arrays.
"""

import numpy as np

try:
    import cupy
    has_cupy = True
except ModuleNotFoundError:
    has_cupy = False


def as_flat_array(values):
    """Return ``values`` as a flat numeric numpy array, keeping its dtype.

    Accepts Python sequences, numpy arrays, cupy arrays (copied to the host)
    and xarray DataArrays (their underlying ``.data`` is used).

    Raises
    ------
    TypeError
        If the values can not be represented as a numeric array.
    """
    # Check for xarray DataArray specifically (has 'dims' attribute)
    if hasattr(values, 'dims') and hasattr(values, 'coords'):
        values = values.data

    if has_cupy and isinstance(values, cupy.ndarray):
        values = cupy.asnumpy(values)

    try:
        arr = np.asarray(values)
    except (TypeError, ValueError) as e:
        raise TypeError(
            f"Unsupported buffer type: {type(values)}. "
            "Expected a flat sequence of numbers, numpy.ndarray or cupy.ndarray."
        ) from e

    if arr.size and not np.issubdtype(arr.dtype, np.number):
        raise TypeError(
            f"Unsupported buffer dtype: {arr.dtype}. Expected numeric values."
        )
    return arr.ravel()
