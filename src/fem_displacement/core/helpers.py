from typing import Sequence, Union

import numpy as np


def linear_interpolation(x: float, x0: float, x1: float, y0: float, y1: float) -> float:
    """
    Linearly interpolate (or extrapolate) y at x from the points (x0, y0) and (x1, y1).

    Parameters
    ----------
    x : float
        Evaluation coordinate.
    x0, x1 : float
        Reference coordinates, must differ.
    y0, y1 : float
        Values at the reference coordinates.

    Returns
    -------
    float
        Interpolated value.
    """
    if x1 == x0:
        raise ValueError(f"Reference coordinates must differ, got x0 = x1 = {x0}")
    return y0 + (x - x0) * (y1 - y0) / (x1 - x0)


def as_vector(values: Union[Sequence[float], np.ndarray], size: int, name: str) -> np.ndarray:
    """Return ``values`` as a flat float64 array of length ``size``.

    Existing float64 arrays of the right size are returned as views so that
    in-place updates reach the caller.
    """
    array = np.asarray(values, dtype=float).reshape(-1)
    if array.size != size:
        raise ValueError(f"{name} must have {size} components, got {array.size}")
    return array
