"""Displacement based continuum element for nonlinear structural analysis.

The element computes its residual (internal force) vector and tangent
stiffness by Gauss quadrature, delegating the stress update at each point
to a hypo-elastic constitutive model:

    Kₑ += Bᵀ C B · dV
    Pₑ -= Bᵀ σ · dV

Section types and the stress/tangent reduction they use:

    UNIAXIAL_STRESS  1-D  C = C11 condensed over all other components
    PLANE_STRESS     2-D  C condensed over (33, 13, 23)
    PLANE_STRAIN     2-D  C restricted to (11, 22, 12)
    SOLID            3-D  full 6×6

Persisted state layout, per Gauss point (host owned, one flat float64 buffer):

    [ material state vars | σ (6) | ε (6) ]

Stress, strain and the material state are numpy views into that buffer, so
every update is written straight into the host's persisted state. The caller
must keep the buffer, and the element property array, alive while the
element uses them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, List, Optional, Sequence, Tuple

import numpy as np

from fem_displacement.constitutive import HypoElasticMaterial, material_factory
from fem_displacement.core import voigt
from fem_displacement.core.errors import (
    ConfigurationError,
    PropertyNotAssignedError,
    StateVariableError,
)
from fem_displacement.core.helpers import as_vector, linear_interpolation
from fem_displacement.elements.boundary import BoundaryElement
from fem_displacement.elements.geometry import GeometryElement
from fem_displacement.elements.integration import IntegrationTypes, get_gauss_point_info

logger = logging.getLogger(__name__)


class SectionType(Enum):
    UNIAXIAL_STRESS = "uniaxial_stress"
    PLANE_STRESS = "plane_stress"
    PLANE_STRAIN = "plane_strain"
    SOLID = "solid"


class StateTypes(Enum):
    GEOSTATIC_STRESS = "geostatic_stress"


class DistributedLoadTypes(Enum):
    PRESSURE = "pressure"


SECTIONS_BY_DIM = {
    1: (SectionType.UNIAXIAL_STRESS,),
    2: (SectionType.PLANE_STRESS, SectionType.PLANE_STRAIN),
    3: (SectionType.SOLID,),
}


@dataclass
class GaussPointGeometry:
    """Geometric quantities of one Gauss point, fixed after initialization."""

    J: np.ndarray
    inv_J: np.ndarray
    det_J: float
    dN_dxi: np.ndarray
    dN_dX: np.ndarray
    B: np.ndarray
    int_vol: float


@dataclass
class GaussPoint:
    """Integration point record.

    ``xi`` and ``weight`` are fixed at construction. ``material`` is set by
    the material assignment, ``stress``/``strain`` by the state binding and
    ``geometry`` by the initialization.
    """

    N_REQUIRED_STATE_VARS: ClassVar[int] = 6 + 6

    xi: np.ndarray
    weight: float
    material: Optional[HypoElasticMaterial] = None
    stress: Optional[np.ndarray] = None
    strain: Optional[np.ndarray] = None
    geometry: Optional[GaussPointGeometry] = None


def _output_view(array: np.ndarray, shape: Tuple[int, ...], name: str) -> np.ndarray:
    """Reshaped view of a caller owned output array; accumulation must reach the caller."""
    if not isinstance(array, np.ndarray) or array.dtype != np.float64:
        raise ValueError(f"{name} must be a float64 numpy array")
    if array.size != int(np.prod(shape)):
        raise ValueError(f"{name} must have {int(np.prod(shape))} entries, got {array.size}")
    view = array.reshape(shape)
    if not np.shares_memory(view, array):
        raise ValueError(f"{name} must be contiguous so it can be updated in place")
    return view


class DisplacementElement(GeometryElement):
    """Displacement element over one isoparametric geometry.

    Concrete classes combine this engine with a geometry class; the
    (n_dim, n_nodes) pair of the geometry fixes every array size.

    Parameters
    ----------
    label : int
        Element label, used in diagnostics and passed to the material factory
    integration_type : IntegrationTypes or str
        Full or reduced integration
    section_type : SectionType or str
        Structural idealization, must match the spatial dimension
    """

    def __init__(
        self,
        label: int,
        integration_type: IntegrationTypes = IntegrationTypes.FULL,
        section_type: Optional[SectionType] = None,
    ):
        super().__init__()
        if section_type is None:
            section_type = SECTIONS_BY_DIM[self.n_dim][0]
        section_type = SectionType(section_type)
        if section_type not in SECTIONS_BY_DIM[self.n_dim]:
            raise ValueError(
                f"Section type '{section_type.value}' is not valid for the {self.n_dim}-D "
                f"element {type(self).__name__}"
            )

        self.label = label
        self.section_type = section_type
        self.element_properties = np.zeros(0)
        self.gauss_points: List[GaussPoint] = [
            GaussPoint(xi=info.xi, weight=info.weight)
            for info in get_gauss_point_info(self.shape, IntegrationTypes(integration_type))
        ]

        logger.debug(
            "Created %s %d (%s, %d gauss points)",
            type(self).__name__,
            label,
            section_type.value,
            len(self.gauss_points),
        )

    @property
    def dofs_count(self) -> int:
        return self.n_nodes * self.n_dim

    def get_n_nodes(self) -> int:
        return self.n_nodes

    def get_n_dof_per_element(self) -> int:
        return self.dofs_count

    def get_element_shape(self) -> str:
        return self.element_shape

    def get_node_fields(self) -> List[List[str]]:
        return [["displacement"] for _ in range(self.n_nodes)]

    def get_dof_indices_permutation_pattern(self) -> List[int]:
        return list(range(self.dofs_count))

    def get_number_of_required_state_vars(self) -> int:
        material = self._materials()[0]
        return (
            material.get_number_of_required_state_vars() + GaussPoint.N_REQUIRED_STATE_VARS
        ) * len(self.gauss_points)

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def assign_element_properties(self, element_properties: Sequence[float]) -> None:
        """Bind the element property array (thickness or cross section first).

        A float64 numpy array is referenced, not copied.
        """
        self.element_properties = np.asarray(element_properties, dtype=float).reshape(-1)

    def assign_material_section(
        self, material_code: int, material_properties: Sequence[float]
    ) -> None:
        """Create one independent constitutive model per Gauss point."""
        for i, gpt in enumerate(self.gauss_points):
            gpt.material = material_factory(material_code, material_properties, self.label, i)

    def assign_state_vars(self, state_vars: np.ndarray) -> None:
        """Bind material state, stress and strain of every point to the host buffer.

        Parameters
        ----------
        state_vars : np.ndarray
            Flat float64 buffer, one equally sized slice per Gauss point

        Raises
        ------
        StateVariableError
            If the buffer is not a float64 array, its length is not a multiple
            of the number of Gauss points, or a slice is too short.
        """
        if not isinstance(state_vars, np.ndarray) or state_vars.dtype != np.float64:
            raise StateVariableError("The state buffer must be a float64 numpy array")
        flat = state_vars.reshape(-1)
        if not np.shares_memory(flat, state_vars):
            raise StateVariableError("The state buffer must be contiguous")
        state_vars = flat

        n_points = len(self.gauss_points)
        if state_vars.size % n_points:
            raise StateVariableError(
                f"State buffer of length {state_vars.size} cannot be split over "
                f"{n_points} gauss points (element {self.label})"
            )

        # The material gets every slot left over by stress and strain
        n_per_point = state_vars.size // n_points
        n_material = n_per_point - GaussPoint.N_REQUIRED_STATE_VARS
        if n_material < 0:
            raise StateVariableError(
                f"State buffer of length {state_vars.size} is too short for "
                f"{n_points} gauss points (element {self.label})"
            )

        for i, (gpt, material) in enumerate(zip(self.gauss_points, self._materials())):
            start = i * n_per_point
            material.assign_state_vars(state_vars[start : start + n_material])
            gpt.stress = state_vars[start + n_material : start + n_material + 6]
            gpt.strain = state_vars[start + n_material + 6 : start + n_per_point]

        logger.debug(
            "Element %d bound to %d state vars (%d material slots per point)",
            self.label,
            state_vars.size,
            n_material,
        )

    def _materials(self) -> List[HypoElasticMaterial]:
        if any(gpt.material is None for gpt in self.gauss_points):
            raise ConfigurationError(f"No material assigned to element {self.label}")
        return [gpt.material for gpt in self.gauss_points]

    def _require_state(self) -> None:
        if any(gpt.stress is None for gpt in self.gauss_points):
            raise StateVariableError(f"State variables of element {self.label} are not bound")

    def _require_geometry(self) -> None:
        if any(gpt.geometry is None for gpt in self.gauss_points):
            raise ConfigurationError(f"Element {self.label} has not been initialized")

    def _section_property(self, name: str) -> float:
        if self.element_properties.size == 0:
            raise PropertyNotAssignedError(
                f"The {name} of element {self.label} is read before the element "
                f"properties were assigned"
            )
        return float(self.element_properties[0])

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize_yourself(self, coordinates: Sequence[float]) -> None:
        """Compute the geometry of every Gauss point from the nodal coordinates.

        Also hands each material its characteristic element length.
        """
        super().initialize_yourself(coordinates)
        materials = self._materials()

        for gpt, material in zip(self.gauss_points, materials):
            dN_dxi = self.shape_function_derivatives(gpt.xi)
            J = self.compute_jacobian(dN_dxi)
            det_J = float(np.linalg.det(J))
            if det_J <= 0.0:
                raise ValueError(
                    f"Non-positive Jacobian determinant in element {self.label} "
                    f"at {gpt.xi}: {det_J}"
                )
            inv_J = np.linalg.inv(J)
            dN_dX = self.compute_dN_dX(dN_dxi, inv_J)

            if self.section_type == SectionType.SOLID:
                int_vol = gpt.weight * det_J
                material.set_characteristic_element_length(np.cbrt(8 * det_J))

            elif self.section_type in (SectionType.PLANE_STRAIN, SectionType.PLANE_STRESS):
                thickness = self._section_property("thickness")
                int_vol = gpt.weight * det_J * thickness
                material.set_characteristic_element_length(np.sqrt(4 * det_J))

            else:
                cross_section = self._section_property("cross section")
                int_vol = gpt.weight * det_J * cross_section
                material.set_characteristic_element_length(2 * det_J)

            gpt.geometry = GaussPointGeometry(
                J=J,
                inv_J=inv_J,
                det_J=det_J,
                dN_dxi=dN_dxi,
                dN_dX=dN_dX,
                B=self.compute_B_matrix(dN_dX),
                int_vol=int_vol,
            )

        logger.debug("Initialized geometry of element %d", self.label)

    def set_initial_conditions(self, state: StateTypes, values: Sequence[float]) -> None:
        """Seed the stress state.

        GEOSTATIC_STRESS values: [σ_y1, y1, σ_y2, y2, k_x, k_z]. The vertical
        stress is interpolated linearly in y between the two reference levels;
        σ_x = k_x σ_y and σ_z = k_z σ_y. Ignored for 1-D elements.
        """
        if StateTypes(state) != StateTypes.GEOSTATIC_STRESS or self.n_dim == 1:
            return

        self._require_state()
        self._require_geometry()
        sig_y1, y1, sig_y2, y2, k_x, k_z = as_vector(values, 6, "Geostatic stress values")
        q_coordinates = self.coordinates.reshape(-1)

        for gpt in self.gauss_points:
            N_mat = self.shape_function_matrix(self.shape_functions(gpt.xi))
            coord_at_gauss = N_mat @ q_coordinates

            gpt.stress[1] = linear_interpolation(coord_at_gauss[1], y1, y2, sig_y1, sig_y2)
            gpt.stress[0] = k_x * gpt.stress[1]
            gpt.stress[2] = k_z * gpt.stress[1]

    # ------------------------------------------------------------------
    # Nonlinear increment
    # ------------------------------------------------------------------

    def compute_yourself(
        self,
        q_total: Sequence[float],
        dq: Sequence[float],
        Pe: np.ndarray,
        Ke: np.ndarray,
        time: Sequence[float],
        dT: float,
        p_new_dT: float = 1.0,
    ) -> float:
        """Accumulate the residual and tangent stiffness for one increment.

        ``Pe`` and ``Ke`` are added to, never reset. If a material asks for a
        smaller step, the evaluation stops at that point, ``Pe`` and ``Ke`` are
        restored to their values on entry and the suggestion is returned.

        Parameters
        ----------
        q_total : Sequence[float]
            Total nodal displacement (dofs_count,)
        dq : Sequence[float]
            Nodal displacement increment (dofs_count,)
        Pe : np.ndarray
            Residual vector (dofs_count,), updated in place
        Ke : np.ndarray
            Tangent stiffness (dofs_count × dofs_count or flat), updated in place
        time : Sequence[float]
            Step time and total time
        dT : float
            Time increment
        p_new_dT : float
            Incoming step-scale suggestion

        Returns
        -------
        float
            Step-scale suggestion; below 1.0 means the increment must be redone
        """
        self._require_state()
        self._require_geometry()

        n = self.dofs_count
        as_vector(q_total, n, "Total displacement")
        dq = as_vector(dq, n, "Displacement increment")
        Pe = _output_view(Pe, (n,), "Pe")
        Ke = _output_view(Ke, (n, n), "Ke")

        Pe_on_entry = Pe.copy()
        Ke_on_entry = Ke.copy()

        for gpt in self.gauss_points:
            B = gpt.geometry.B
            dE = B @ dq

            if self.n_dim == 1:
                dE6 = voigt.uniaxial_to_voigt(dE)
                C66, p_material = gpt.material.compute_uniaxial_stress(
                    gpt.stress, dE6, time, dT
                )
                C = voigt.uniaxial_stress_tangent(C66)
                S = gpt.stress[:1]
                gpt.strain += dE6

            elif self.n_dim == 2:
                dE6 = voigt.plane_voigt_to_voigt(dE)
                if self.section_type == SectionType.PLANE_STRESS:
                    C66, p_material = gpt.material.compute_plane_stress(
                        gpt.stress, dE6, time, dT
                    )
                    C = voigt.plane_stress_tangent(C66)
                else:
                    C66, p_material = gpt.material.compute_stress(gpt.stress, dE6, time, dT)
                    C = voigt.plane_strain_tangent(C66)

                S = voigt.voigt_to_plane_voigt(gpt.stress)
                gpt.strain += dE6

            else:
                C, p_material = gpt.material.compute_stress(gpt.stress, dE, time, dT)
                S = gpt.stress
                gpt.strain += dE

            p_new_dT = min(p_new_dT, p_material)
            if p_new_dT < 1.0:
                logger.warning(
                    "Element %d requests a step reduction to %.3g",
                    self.label,
                    p_new_dT,
                )
                Pe[:] = Pe_on_entry
                Ke[:] = Ke_on_entry
                return p_new_dT

            int_vol = gpt.geometry.int_vol
            Ke += B.T @ C @ B * int_vol
            Pe -= B.T @ S * int_vol

        return p_new_dT

    # ------------------------------------------------------------------
    # Loads
    # ------------------------------------------------------------------

    def compute_distributed_load(
        self,
        load_type: DistributedLoadTypes,
        P: np.ndarray,
        K: Optional[np.ndarray],
        element_face: int,
        load: Sequence[float],
        q_total: Optional[Sequence[float]] = None,
        time: Optional[Sequence[float]] = None,
        dT: float = 0.0,
    ) -> None:
        """Add a distributed surface load on ``element_face`` (1-based) to ``P``.

        Only uniform pressure is supported, positive into the element. For plane
        sections the load is scaled by the thickness.

        Raises
        ------
        ValueError
            For any load type other than pressure; ``P`` is left untouched.
        """
        try:
            load_type = DistributedLoadTypes(load_type)
        except ValueError:
            raise ValueError(f"Invalid load type specified: {load_type!r}") from None

        P = _output_view(P, (self.dofs_count,), "P")
        if self.coordinates is None:
            raise ConfigurationError(f"Element {self.label} has not been initialized")

        if load_type == DistributedLoadTypes.PRESSURE:
            p = float(np.asarray(load, dtype=float).reshape(-1)[0])
            boundary = BoundaryElement(self.shape, element_face, self.n_dim, self.coordinates)
            Pk = -p * boundary.compute_normal_load_vector()

            if self.n_dim == 2:
                Pk *= self._section_property("thickness")

            boundary.assemble_into_parent_vector(Pk, P)

    def compute_body_force(
        self,
        P: np.ndarray,
        K: Optional[np.ndarray],
        load: Sequence[float],
        q_total: Optional[Sequence[float]] = None,
        time: Optional[Sequence[float]] = None,
        dT: float = 0.0,
    ) -> None:
        """Add a uniform body force (force per volume, n_dim components) to ``P``.

        P += Σ N_matᵀ f dV
        """
        self._require_geometry()
        P = _output_view(P, (self.dofs_count,), "P")
        f = as_vector(load, self.n_dim, "Body force")

        for gpt in self.gauss_points:
            N_mat = self.shape_function_matrix(self.shape_functions(gpt.xi))
            P += N_mat.T @ f * gpt.geometry.int_vol

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def get_permanent_result_pointer(self, result_name: str, gauss_pt: int) -> Tuple[np.ndarray, int]:
        """Live view of a per-point result and its number of components.

        ``stress`` and ``strain`` have 6 components, ``sdv`` is the whole
        material state block; other names are looked up in the material.

        Raises
        ------
        KeyError
            If neither the element nor the material knows ``result_name``.
        """
        gpt = self.gauss_points[gauss_pt]

        if result_name == "stress":
            self._require_state()
            return gpt.stress, voigt.VOIGT_SIZE
        if result_name == "strain":
            self._require_state()
            return gpt.strain, voigt.VOIGT_SIZE

        material = self._materials()[gauss_pt]
        if result_name == "sdv":
            return material.state_vars, material.n_state_vars

        result = material.get_result(result_name)
        if result is None:
            raise KeyError(f"Unknown result '{result_name}' for element {self.label}")
        return result, result.size

    def __repr__(self):
        return (
            f"<{type(self).__name__} label={self.label} section={self.section_type.value} "
            f"gauss_points={len(self.gauss_points)}>"
        )
