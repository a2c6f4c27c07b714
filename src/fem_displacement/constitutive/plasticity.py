"""J2 (von Mises) plasticity with linear isotropic hardening.

Return mapping (radial return) in full Voigt form:

    σ_tr = σ_n + C Δε
    q_tr = √(3/2) ‖s_tr‖
    f    = q_tr - (σ_y + H α_n)

    if f > 0:
        Δα = f / (3G + H)
        s  = s_tr (1 - 3G Δα / q_tr)

Consistent tangent (de Souza Neto et al., Box 7.4):

    D = 2G (1 - 3G Δα / q_tr) I_dev + K m mᵀ + 6G² (Δα / q_tr - 1 / (3G + H)) n̂ n̂ᵀ

with n̂ = s_tr / ‖s_tr‖ and I_dev written for engineering shear strains.
"""

from typing import Optional, Sequence

import numpy as np

from fem_displacement.constitutive.base import HypoElasticMaterial, StressUpdate
from fem_displacement.constitutive.factory import MaterialCode, register_material
from fem_displacement.core import voigt

# Maps engineering shear strains onto tensor components
_ENGINEERING_SHEAR = np.diag([1.0, 1.0, 1.0, 0.5, 0.5, 0.5])


@register_material(MaterialCode.VON_MISES)
class VonMises(HypoElasticMaterial):
    """Rate independent von Mises plasticity.

    Properties: [E, nu, yield_stress, hardening_modulus]

    State variables: [α, εp11, εp22, εp33, γp12, γp13, γp23]
    """

    n_required_state_vars = 7

    def __init__(self, properties: Sequence[float], element_label: int, gauss_point: int):
        super().__init__(properties, element_label, gauss_point)
        E, nu, self.yield_stress, self.hardening_modulus = self._read_properties(
            ("E", "nu", "yield_stress", "hardening_modulus")
        )
        self.elastic = self._elastic_material(E, nu)
        self.C = self.elastic.elastic_tangent()

        m = voigt.IDENTITY_VECTOR
        self._I_dev = _ENGINEERING_SHEAR - np.outer(m, m) / 3.0

    @property
    def alpha_p(self) -> np.ndarray:
        return self.state_vars[0:1]

    @property
    def plastic_strain(self) -> np.ndarray:
        return self.state_vars[1:7]

    def compute_stress(
        self, stress: np.ndarray, d_strain: np.ndarray, time: Sequence[float], dT: float
    ) -> StressUpdate:
        G = self.elastic.shear_modulus
        K = self.elastic.bulk_modulus
        H = self.hardening_modulus

        trial = stress + self.C @ d_strain
        s_trial = voigt.deviator(trial)
        q_trial = voigt.von_mises(trial)

        f = q_trial - (self.yield_stress + H * self.alpha_p[0])
        if f <= 0.0:
            stress[:] = trial
            return self.C.copy(), 1.0

        d_alpha = f / (3 * G + H)
        ratio = 3 * G * d_alpha / q_trial

        stress[:] = trial - ratio * s_trial

        # Flow direction as a tensor, shear slots doubled for engineering strains
        flow = 1.5 * s_trial / q_trial
        flow[3:] *= 2.0
        self.alpha_p[0] += d_alpha
        self.plastic_strain[:] += d_alpha * flow

        n_hat = s_trial / voigt.stress_norm(s_trial)
        m = voigt.IDENTITY_VECTOR
        C_ep = (
            2 * G * (1 - ratio) * self._I_dev
            + K * np.outer(m, m)
            + 6 * G**2 * (d_alpha / q_trial - 1 / (3 * G + H)) * np.outer(n_hat, n_hat)
        )
        return C_ep, 1.0

    def get_result(self, result_name: str) -> Optional[np.ndarray]:
        if result_name == "alphaP":
            return self.alpha_p
        if result_name == "plasticStrain":
            return self.plastic_strain
        return None
