"""Isotropic scalar damage with exponential softening.

The softening branch is regularised with the crack band approach: the
fracture energy Gf is smeared over the characteristic element length h,

    ε0 = ft / E
    εf = Gf / (ft h) + ε0 / 2

    ω(κ) = 1 - ε0 / κ · exp(-(κ - ε0) / (εf - ε0))     for κ > ε0

so that the energy dissipated per unit volume equals Gf / h.

The equivalent strain is the energy norm ε_eq = √(εᵀ C ε / E).
"""

import logging
from typing import Optional, Sequence

import numpy as np

from fem_displacement.constitutive.base import HypoElasticMaterial, StressUpdate
from fem_displacement.constitutive.factory import MaterialCode, register_material
from fem_displacement.core.errors import InvalidMaterialError

logger = logging.getLogger(__name__)


@register_material(MaterialCode.ISOTROPIC_DAMAGE)
class IsotropicDamage(HypoElasticMaterial):
    """Scalar damage model, σ = (1 - ω) C ε.

    Properties: [E, nu, ft, Gf] and optionally max_damage_increment (default 0.2)

    State variables: [κ, ω, ε11, ε22, ε33, γ12, γ13, γ23]
    """

    n_required_state_vars = 8

    default_max_damage_increment = 0.2
    step_cutback = 0.5

    def __init__(self, properties: Sequence[float], element_label: int, gauss_point: int):
        super().__init__(properties, element_label, gauss_point)
        E, nu, self.ft, self.Gf = self._read_properties(("E", "nu", "ft", "Gf"))
        if self.ft <= 0 or self.Gf <= 0:
            raise InvalidMaterialError(
                f"Tensile strength and fracture energy must be positive, got ft={self.ft}, "
                f"Gf={self.Gf} (element {element_label}, gauss point {gauss_point})"
            )
        self.max_damage_increment = (
            float(self.properties[4])
            if self.properties.size > 4
            else self.default_max_damage_increment
        )
        self.elastic = self._elastic_material(E, nu)
        self.C = self.elastic.elastic_tangent()
        self.eps_0 = self.ft / E

    @property
    def kappa(self) -> np.ndarray:
        return self.state_vars[0:1]

    @property
    def omega(self) -> np.ndarray:
        return self.state_vars[1:2]

    @property
    def total_strain(self) -> np.ndarray:
        return self.state_vars[2:8]

    @property
    def eps_f(self) -> float:
        return self.Gf / (self.ft * self.characteristic_length) + self.eps_0 / 2

    def set_characteristic_element_length(self, length: float) -> None:
        super().set_characteristic_element_length(length)
        if self.eps_f <= self.eps_0:
            raise InvalidMaterialError(
                f"Element too large for the fracture energy (h={length:.4g}); the softening "
                f"branch would snap back (element {self.element_label}, "
                f"gauss point {self.gauss_point})"
            )

    def _damage(self, kappa: float) -> float:
        if kappa <= self.eps_0:
            return 0.0
        return 1.0 - self.eps_0 / kappa * np.exp(-(kappa - self.eps_0) / (self.eps_f - self.eps_0))

    def _damage_derivative(self, kappa: float) -> float:
        if kappa <= self.eps_0:
            return 0.0
        decay = np.exp(-(kappa - self.eps_0) / (self.eps_f - self.eps_0))
        return self.eps_0 / kappa * decay * (1.0 / kappa + 1.0 / (self.eps_f - self.eps_0))

    def compute_stress(
        self, stress: np.ndarray, d_strain: np.ndarray, time: Sequence[float], dT: float
    ) -> StressUpdate:
        E = self.elastic.E
        strain = self.total_strain + d_strain
        effective_stress = self.C @ strain
        eps_eq = np.sqrt(max(strain @ effective_stress, 0.0) / E)

        omega_n = self.omega[0]
        loading = eps_eq > self.kappa[0] and eps_eq > self.eps_0
        if loading:
            self.kappa[0] = eps_eq
            self.omega[0] = self._damage(eps_eq)

        self.total_strain[:] = strain
        stress[:] = (1.0 - self.omega[0]) * effective_stress

        C = (1.0 - self.omega[0]) * self.C
        if loading:
            C -= (
                self._damage_derivative(eps_eq)
                * np.outer(effective_stress, effective_stress)
                / (E * eps_eq)
            )

        if self.omega[0] - omega_n > self.max_damage_increment:
            logger.debug(
                "Damage increment %.3f exceeds %.3f (element %d, gauss point %d)",
                self.omega[0] - omega_n,
                self.max_damage_increment,
                self.element_label,
                self.gauss_point,
            )
            return C, self.step_cutback

        return C, 1.0

    def get_result(self, result_name: str) -> Optional[np.ndarray]:
        if result_name == "damage":
            return self.omega
        if result_name == "kappa":
            return self.kappa
        return None
