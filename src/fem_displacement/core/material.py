from dataclasses import dataclass

import numpy as np


@dataclass
class IsotropicMaterial:
    """
    Isotropic linear elastic parameters shared by the constitutive models.

    Parameters
    ----------
    E : float
        Young's Modulus of the material.
    nu : float
        Poisson's ratio of the material.
    """

    E: float
    nu: float

    def __post_init__(self):
        if self.E <= 0:
            raise ValueError(f"Young's modulus must be positive, got {self.E}")
        if not -1.0 < self.nu < 0.5:
            raise ValueError(f"Poisson's ratio must lie in (-1, 0.5), got {self.nu}")

    @property
    def shear_modulus(self) -> float:
        return self.E / (2 * (1 + self.nu))

    @property
    def bulk_modulus(self) -> float:
        return self.E / (3 * (1 - 2 * self.nu))

    @property
    def lame_lambda(self) -> float:
        return self.E * self.nu / ((1 + self.nu) * (1 - 2 * self.nu))

    def elastic_tangent(self) -> np.ndarray:
        """Build the 6×6 isotropic elasticity matrix.

        Uses Lamé constants:
            λ = Eν / ((1+ν)(1-2ν))
            μ = E / (2(1+ν))

        Returns
        -------
        np.ndarray
            Symmetric 6×6 constitutive matrix (engineering shear strains)
        """
        lambd = self.lame_lambda
        mu = self.shear_modulus

        C = np.zeros((6, 6))
        C[:3, :3] = lambd
        C[[0, 1, 2], [0, 1, 2]] = lambd + 2 * mu
        C[[3, 4, 5], [3, 4, 5]] = mu
        return C
