"""Hypo-elastic constitutive model interface.

A hypo-elastic model receives a strain increment and updates the stress in
place. It always works in full (3-D) Voigt form; reduced stress states are
obtained by iterating on the constrained strain components until the
corresponding stresses vanish.

Each call returns the 6×6 material tangent together with a step-scale
suggestion. A value below 1.0 asks the host solver to repeat the increment
with a smaller time step; it is not an error.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple

import numpy as np

from fem_displacement.core import voigt
from fem_displacement.core.errors import InvalidMaterialError, StateVariableError
from fem_displacement.core.material import IsotropicMaterial

logger = logging.getLogger(__name__)

StressUpdate = Tuple[np.ndarray, float]


class HypoElasticMaterial(ABC):
    """Base class for rate (incremental) constitutive models.

    Parameters
    ----------
    properties : Sequence[float]
        Raw material property array
    element_label : int
        Label of the owning element, used in diagnostics
    gauss_point : int
        Index of the owning Gauss point, used in diagnostics

    Attributes
    ----------
    state_vars : np.ndarray
        View into the host owned state buffer, bound by ``assign_state_vars``
    characteristic_length : float
        Element length scale for regularisation
    """

    n_required_state_vars: int = 0

    #: Step-scale suggestion when a reduced stress state iteration fails
    reduced_state_cutback: float = 0.25
    reduced_state_max_iterations: int = 10
    reduced_state_tolerance: float = 1e-10

    def __init__(self, properties: Sequence[float], element_label: int, gauss_point: int):
        self.properties = np.asarray(properties, dtype=float)
        self.element_label = element_label
        self.gauss_point = gauss_point
        self.characteristic_length = 1.0
        self.state_vars = np.zeros(self.get_number_of_required_state_vars())

    @property
    def n_state_vars(self) -> int:
        return self.state_vars.size

    def get_number_of_required_state_vars(self) -> int:
        """Number of persisted state variables the model needs."""
        return self.n_required_state_vars

    @abstractmethod
    def compute_stress(
        self, stress: np.ndarray, d_strain: np.ndarray, time: Sequence[float], dT: float
    ) -> StressUpdate:
        """Update ``stress`` in place for the full 3-D strain increment ``d_strain``.

        Parameters
        ----------
        stress : np.ndarray
            Stress vector (6,), updated in place
        d_strain : np.ndarray
            Strain increment (6,)
        time : Sequence[float]
            Step time and total time
        dT : float
            Time increment

        Returns
        -------
        C : np.ndarray
            Material tangent dσ/dε (6×6)
        p_new_dT : float
            Suggested step-scale factor, 1.0 if the increment is acceptable
        """

    def compute_plane_stress(
        self, stress: np.ndarray, d_strain: np.ndarray, time: Sequence[float], dT: float
    ) -> StressUpdate:
        """Stress update under σ33 = σ13 = σ23 = 0.

        The converged out-of-plane strain increments are written back into
        ``d_strain``.
        """
        return self._compute_reduced_stress(
            stress, d_strain, time, dT, voigt.OUT_OF_PLANE_INDICES, "plane stress"
        )

    def compute_uniaxial_stress(
        self, stress: np.ndarray, d_strain: np.ndarray, time: Sequence[float], dT: float
    ) -> StressUpdate:
        """Stress update with every component except σ11 constrained to zero.

        The converged lateral strain increments are written back into ``d_strain``.
        """
        return self._compute_reduced_stress(
            stress, d_strain, time, dT, voigt.LATERAL_INDICES, "uniaxial stress"
        )

    def _compute_reduced_stress(
        self,
        stress: np.ndarray,
        d_strain: np.ndarray,
        time: Sequence[float],
        dT: float,
        constrained: np.ndarray,
        state_name: str,
    ) -> StressUpdate:
        # Newton iteration on the constrained strain increments. Every trial
        # restarts from the stress and state at the beginning of the increment.
        stress_n = stress.copy()
        state_n = self.state_vars.copy()

        for _ in range(self.reduced_state_max_iterations):
            stress[:] = stress_n
            self.state_vars[:] = state_n

            C, p_new_dT = self.compute_stress(stress, d_strain, time, dT)
            if p_new_dT < 1.0:
                return C, p_new_dT

            residual = stress[constrained]
            scale = max(np.linalg.norm(stress), np.linalg.norm(stress_n), 1.0)
            if np.linalg.norm(residual) <= self.reduced_state_tolerance * scale:
                return C, p_new_dT

            d_strain[constrained] -= np.linalg.solve(C[np.ix_(constrained, constrained)], residual)

        logger.warning(
            "%s iteration did not converge in %d iterations (element %d, gauss point %d)",
            state_name,
            self.reduced_state_max_iterations,
            self.element_label,
            self.gauss_point,
        )
        return C, self.reduced_state_cutback

    def _read_properties(self, names: Sequence[str]) -> Tuple[float, ...]:
        if self.properties.size < len(names):
            raise InvalidMaterialError(
                f"{type(self).__name__} expects properties {list(names)}, "
                f"got {self.properties.size} values (element {self.element_label}, "
                f"gauss point {self.gauss_point})"
            )
        return tuple(float(value) for value in self.properties[: len(names)])

    def _elastic_material(self, E: float, nu: float) -> IsotropicMaterial:
        try:
            return IsotropicMaterial(E=E, nu=nu)
        except ValueError as e:
            raise InvalidMaterialError(
                f"{e} (element {self.element_label}, gauss point {self.gauss_point})"
            ) from e

    def set_characteristic_element_length(self, length: float) -> None:
        self.characteristic_length = float(length)

    def assign_state_vars(self, state_vars: np.ndarray) -> None:
        """Bind the model to a slice of the persisted state buffer.

        The slice may be longer than required; the extra slots are left alone.
        """
        if not isinstance(state_vars, np.ndarray) or state_vars.dtype != np.float64:
            raise StateVariableError("State variables must be a float64 numpy array")
        required = self.get_number_of_required_state_vars()
        if state_vars.size < required:
            raise StateVariableError(
                f"{type(self).__name__} requires {required} state variables, "
                f"got {state_vars.size} (element {self.element_label}, "
                f"gauss point {self.gauss_point})"
            )
        self.state_vars = state_vars

    def get_result(self, result_name: str) -> Optional[np.ndarray]:
        """Return a named view into the state variables, or None if unknown."""
        return None

    def __repr__(self):
        return (
            f"<{type(self).__name__} element={self.element_label} "
            f"gauss_point={self.gauss_point}>"
        )
