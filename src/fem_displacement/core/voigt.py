"""Voigt notation helpers and section-dependent tangent reductions.

Full (3-D) Voigt ordering used throughout the package:
    ε = [ε11, ε22, ε33, γ12, γ13, γ23]ᵀ   (engineering shear strains)
    σ = [σ11, σ22, σ33, σ12, σ13, σ23]ᵀ

Plane (2-D) ordering:
    ε = [ε11, ε22, γ12]ᵀ,  σ = [σ11, σ22, σ12]ᵀ

Uniaxial (1-D) ordering:
    ε = [ε11]ᵀ,  σ = [σ11]ᵀ

Reduction rules for the 6×6 material tangent C:
    plane strain   C_ps = C[a, a]                               (restriction)
    plane stress   C_ps = C[a, a] - C[a, b] C[b, b]⁻¹ C[b, a]   (static condensation)
    uniaxial       C_u  = C[0, 0] - C[0, r] C[r, r]⁻¹ C[r, 0]

with a = (11, 22, 12), b = (33, 13, 23) and r = all components except 11.
"""

from typing import Sequence

import numpy as np

VOIGT_SIZE = 6

# Components kept in a plane section, and those constrained through the thickness
PLANE_INDICES = np.array([0, 1, 3])
OUT_OF_PLANE_INDICES = np.array([2, 4, 5])

AXIAL_INDICES = np.array([0])
LATERAL_INDICES = np.array([1, 2, 3, 4, 5])

# Volumetric projector m = [1, 1, 1, 0, 0, 0]
IDENTITY_VECTOR = np.array([1.0, 1.0, 1.0, 0.0, 0.0, 0.0])


def plane_voigt_to_voigt(plane: Sequence[float]) -> np.ndarray:
    """Expand a plane Voigt vector [x11, x22, x12] to full form.

    Out-of-plane slots are filled with zeros.
    """
    full = np.zeros(VOIGT_SIZE)
    full[PLANE_INDICES] = plane
    return full


def voigt_to_plane_voigt(full: Sequence[float]) -> np.ndarray:
    """Restrict a full Voigt vector to its plane components [x11, x22, x12]."""
    return np.asarray(full, dtype=float)[PLANE_INDICES]


def uniaxial_to_voigt(uniaxial: Sequence[float]) -> np.ndarray:
    """Expand a one component (axial) vector to full Voigt form."""
    full = np.zeros(VOIGT_SIZE)
    full[0] = np.asarray(uniaxial, dtype=float).reshape(-1)[0]
    return full


def static_condensation(C: np.ndarray, keep: np.ndarray, drop: np.ndarray) -> np.ndarray:
    """Condense the ``drop`` components out of a tangent assuming their stresses vanish.

    Parameters
    ----------
    C : np.ndarray
        Full tangent (6×6)
    keep : np.ndarray
        Indices of the components that stay in the reduced tangent
    drop : np.ndarray
        Indices of the components whose stress is constrained to zero

    Returns
    -------
    np.ndarray
        Reduced tangent (len(keep) × len(keep))
    """
    C = np.asarray(C, dtype=float)
    C_kk = C[np.ix_(keep, keep)]
    C_kd = C[np.ix_(keep, drop)]
    C_dk = C[np.ix_(drop, keep)]
    C_dd = C[np.ix_(drop, drop)]
    return C_kk - C_kd @ np.linalg.solve(C_dd, C_dk)


def plane_strain_tangent(C: np.ndarray) -> np.ndarray:
    """Plane strain tangent (3×3): pure restriction of the full tangent."""
    return np.asarray(C, dtype=float)[np.ix_(PLANE_INDICES, PLANE_INDICES)].copy()


def plane_stress_tangent(C: np.ndarray) -> np.ndarray:
    """Plane stress tangent (3×3) under σ33 = σ13 = σ23 = 0."""
    return static_condensation(C, PLANE_INDICES, OUT_OF_PLANE_INDICES)


def uniaxial_stress_tangent(C: np.ndarray) -> np.ndarray:
    """Uniaxial stress tangent (1×1): all stresses except σ11 vanish."""
    return static_condensation(C, AXIAL_INDICES, LATERAL_INDICES)


def deviator(stress: np.ndarray) -> np.ndarray:
    """Deviatoric part of a full Voigt stress vector."""
    stress = np.asarray(stress, dtype=float)
    return stress - stress[:3].sum() / 3.0 * IDENTITY_VECTOR


def stress_norm(stress: np.ndarray) -> float:
    """Frobenius norm of the tensor represented by a Voigt stress vector."""
    stress = np.asarray(stress, dtype=float)
    return float(np.sqrt(stress[:3] @ stress[:3] + 2.0 * stress[3:] @ stress[3:]))


def von_mises(stress: np.ndarray) -> float:
    """Von Mises equivalent stress σ_vm = √(3/2 s:s)."""
    return float(np.sqrt(1.5) * stress_norm(deviator(stress)))
