"""Gauss quadrature rules for the supported element shapes.

Natural domains:
- lines, quadrilaterals and hexahedra: ξᵢ ∈ [-1, 1]
- triangles and tetrahedra: unit simplex (ξᵢ ≥ 0, Σξᵢ ≤ 1)

Points are returned in a fixed order. That order defines the addressing of
per-point state in the persisted state buffer and in result arrays.
"""

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import List

import numpy as np


class IntegrationTypes(Enum):
    FULL = "full"
    REDUCED = "reduced"


@dataclass(frozen=True)
class GaussPointInfo:
    """Natural coordinate and weight of one integration point."""

    xi: np.ndarray
    weight: float


def _tensor_product_rule(n_points: int, n_dim: int) -> List[GaussPointInfo]:
    """Tensor product Gauss-Legendre rule, first coordinate running fastest."""
    points, weights = np.polynomial.legendre.leggauss(n_points)
    rule = []
    for index in itertools.product(range(n_points), repeat=n_dim):
        index = index[::-1]
        xi = np.array([points[i] for i in index])
        weight = float(np.prod([weights[i] for i in index]))
        rule.append(GaussPointInfo(xi=xi, weight=weight))
    return rule


def _simplex_centroid_rule(n_dim: int) -> List[GaussPointInfo]:
    """One point rule at the centroid of the unit simplex (exact for linear fields)."""
    xi = np.full(n_dim, 1.0 / (n_dim + 1))
    volume = 1.0 / np.prod(np.arange(1, n_dim + 1))
    return [GaussPointInfo(xi=xi, weight=float(volume))]


# (points per direction or "simplex", dimension) per integration type
_RULES = {
    "Point": {IntegrationTypes.FULL: (1, 0), IntegrationTypes.REDUCED: (1, 0)},
    "Truss2": {IntegrationTypes.FULL: (2, 1), IntegrationTypes.REDUCED: (1, 1)},
    "Truss3": {IntegrationTypes.FULL: (3, 1), IntegrationTypes.REDUCED: (2, 1)},
    "Quad4": {IntegrationTypes.FULL: (2, 2), IntegrationTypes.REDUCED: (1, 2)},
    "Quad8": {IntegrationTypes.FULL: (3, 2), IntegrationTypes.REDUCED: (2, 2)},
    "Hexa8": {IntegrationTypes.FULL: (2, 3), IntegrationTypes.REDUCED: (1, 3)},
    "Hexa20": {IntegrationTypes.FULL: (3, 3), IntegrationTypes.REDUCED: (2, 3)},
    "Tria3": {IntegrationTypes.FULL: ("simplex", 2), IntegrationTypes.REDUCED: ("simplex", 2)},
    "Tetra4": {IntegrationTypes.FULL: ("simplex", 3), IntegrationTypes.REDUCED: ("simplex", 3)},
}


def get_gauss_point_info(shape: str, integration_type: IntegrationTypes) -> List[GaussPointInfo]:
    """Gauss points and weights for an element shape.

    Parameters
    ----------
    shape : str
        Element shape name (e.g. "Quad4", "Hexa8")
    integration_type : IntegrationTypes
        Full or reduced integration

    Returns
    -------
    List[GaussPointInfo]
        Ordered integration points

    Raises
    ------
    ValueError
        If the shape or integration type is not supported.
    """
    try:
        integration_type = IntegrationTypes(integration_type)
        n_points, n_dim = _RULES[shape][integration_type]
    except (KeyError, ValueError):
        raise ValueError(
            f"No integration rule for shape '{shape}' with integration type '{integration_type}'"
        ) from None

    if n_dim == 0:
        return [GaussPointInfo(xi=np.zeros(0), weight=1.0)]
    if n_points == "simplex":
        return _simplex_centroid_rule(n_dim)
    return _tensor_product_rule(n_points, n_dim)
