from typing import Sequence

import numpy as np

from fem_displacement.constitutive.base import HypoElasticMaterial, StressUpdate
from fem_displacement.constitutive.factory import MaterialCode, register_material


@register_material(MaterialCode.LINEAR_ELASTIC)
class LinearElastic(HypoElasticMaterial):
    """Isotropic linear elasticity in rate form, dσ = C dε.

    Properties: [E, nu]
    """

    def __init__(self, properties: Sequence[float], element_label: int, gauss_point: int):
        super().__init__(properties, element_label, gauss_point)
        E, nu = self._read_properties(("E", "nu"))
        self.elastic = self._elastic_material(E, nu)
        self.C = self.elastic.elastic_tangent()

    def compute_stress(
        self, stress: np.ndarray, d_strain: np.ndarray, time: Sequence[float], dT: float
    ) -> StressUpdate:
        stress += self.C @ d_strain
        return self.C.copy(), 1.0
