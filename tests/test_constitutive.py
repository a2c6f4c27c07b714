"""Test suite for the hypo-elastic constitutive models.

This module contains:
1. Material factory behaviour
2. Reduced stress states (plane stress, uniaxial stress) on linear elasticity
3. Von Mises return mapping and consistent tangent
4. Isotropic damage softening, unloading and step cutback
"""

import logging

import numpy as np
import pytest

from fem_displacement.constitutive import (
    MATERIAL_REGISTRY,
    IsotropicDamage,
    LinearElastic,
    MaterialCode,
    VonMises,
    material_factory,
)
from fem_displacement.core.errors import InvalidMaterialError, StateVariableError
from fem_displacement.core.voigt import uniaxial_stress_tangent, von_mises

TIME = [0.0, 0.0]

STEEL = [200000.0, 0.3]
STEEL_PLASTIC = [200000.0, 0.3, 250.0, 2000.0]
CONCRETE = [30000.0, 0.0, 3.0, 0.1, 1.0]


def _finite_difference_tangent(make_material, state, stress_n, d_strain, h=1e-8):
    """Central difference of the stress update with respect to the strain increment."""
    C_fd = np.zeros((6, 6))
    for j in range(6):
        columns = []
        for sign in (1.0, -1.0):
            material = make_material()
            material.state_vars[:] = state
            stress = stress_n.copy()
            perturbed = d_strain.copy()
            perturbed[j] += sign * h
            material.compute_stress(stress, perturbed, TIME, 1.0)
            columns.append(stress)
        C_fd[:, j] = (columns[0] - columns[1]) / (2 * h)
    return C_fd


# =============================================================================
# Factory
# =============================================================================


@pytest.mark.parametrize(
    "code, properties, cls",
    [
        (MaterialCode.LINEAR_ELASTIC, STEEL, LinearElastic),
        (MaterialCode.VON_MISES, STEEL_PLASTIC, VonMises),
        (MaterialCode.ISOTROPIC_DAMAGE, CONCRETE, IsotropicDamage),
    ],
)
def test_factory_creates_registered_models(code, properties, cls):
    material = material_factory(int(code), properties, 7, 2)

    assert isinstance(material, cls)
    assert material.element_label == 7
    assert material.gauss_point == 2
    assert material.get_number_of_required_state_vars() == cls.n_required_state_vars


def test_factory_returns_independent_instances():
    a = material_factory(2, STEEL_PLASTIC, 1, 0)
    b = material_factory(2, STEEL_PLASTIC, 1, 1)
    a.alpha_p[0] = 1.0

    assert a is not b
    assert b.alpha_p[0] == 0.0


def test_factory_unknown_code():
    with pytest.raises(InvalidMaterialError, match="Unknown material code"):
        material_factory(42, STEEL, 1, 0)


def test_factory_rejects_non_hypoelastic_class(monkeypatch):
    class NotAMaterial:
        pass

    monkeypatch.setitem(MATERIAL_REGISTRY, 99, NotAMaterial)
    with pytest.raises(InvalidMaterialError, match="hypo-elastic"):
        material_factory(99, STEEL, 1, 0)


def test_factory_missing_properties():
    with pytest.raises(InvalidMaterialError):
        material_factory(MaterialCode.VON_MISES, STEEL, 1, 0)


def test_invalid_elastic_constants_raise_material_error():
    with pytest.raises(InvalidMaterialError):
        material_factory(MaterialCode.LINEAR_ELASTIC, [200000.0, 0.6], 1, 0)


def test_state_binding_checks():
    material = material_factory(MaterialCode.VON_MISES, STEEL_PLASTIC, 1, 0)

    with pytest.raises(StateVariableError):
        material.assign_state_vars(np.zeros(6))
    with pytest.raises(StateVariableError):
        material.assign_state_vars(np.zeros(7, dtype=np.float32))

    buffer = np.zeros(9)
    material.assign_state_vars(buffer)
    material.alpha_p[0] = 0.5
    assert buffer[0] == 0.5


# =============================================================================
# Linear elasticity and reduced stress states
# =============================================================================


def test_elastic_full_update_accumulates():
    material = LinearElastic(STEEL, 1, 0)
    stress = np.full(6, 10.0)
    d_strain = np.array([1e-4, 0, 0, 2e-4, 0, 0])

    C, p_new_dT = material.compute_stress(stress, d_strain, TIME, 1.0)

    assert p_new_dT == 1.0
    assert np.allclose(stress, 10.0 + C @ d_strain)


def test_elastic_plane_stress_out_of_plane_strain():
    E, nu = STEEL
    material = LinearElastic(STEEL, 1, 0)
    stress = np.zeros(6)
    d_strain = np.array([1e-3, -4e-4, 0.0, 3e-4, 0.0, 0.0])

    C, p_new_dT = material.compute_plane_stress(stress, d_strain, TIME, 1.0)

    assert p_new_dT == 1.0
    assert np.allclose(stress[[2, 4, 5]], 0.0, atol=1e-8)
    assert np.isclose(d_strain[2], -nu / (1 - nu) * (1e-3 - 4e-4))
    assert np.isclose(stress[0], E / (1 - nu**2) * (1e-3 + nu * -4e-4))


def test_elastic_uniaxial_lateral_contraction():
    E, nu = STEEL
    material = LinearElastic(STEEL, 1, 0)
    stress = np.zeros(6)
    d_strain = np.array([2e-3, 0, 0, 0, 0, 0])

    material.compute_uniaxial_stress(stress, d_strain, TIME, 1.0)

    assert np.isclose(stress[0], E * 2e-3)
    assert np.allclose(stress[1:], 0.0, atol=1e-8)
    assert np.allclose(d_strain[1:3], -nu * 2e-3)


def test_reduced_state_non_convergence_requests_cutback(caplog):
    material = LinearElastic(STEEL, 3, 1)
    material.reduced_state_max_iterations = 1
    stress = np.zeros(6)

    with caplog.at_level(logging.WARNING):
        _, p_new_dT = material.compute_plane_stress(
            stress, np.array([1e-3, 0, 0, 0, 0, 0.0]), TIME, 1.0
        )

    assert p_new_dT == material.reduced_state_cutback
    assert "did not converge" in caplog.text


# =============================================================================
# Von Mises plasticity
# =============================================================================


def test_von_mises_elastic_below_yield():
    material = VonMises(STEEL_PLASTIC, 1, 0)
    stress = np.zeros(6)

    C, p_new_dT = material.compute_stress(stress, np.array([5e-4, 0, 0, 0, 0, 0]), TIME, 1.0)

    assert p_new_dT == 1.0
    assert np.allclose(C, material.C)
    assert material.alpha_p[0] == 0.0


def test_von_mises_returns_to_yield_surface():
    material = VonMises(STEEL_PLASTIC, 1, 0)
    stress = np.zeros(6)
    d_strain = np.array([4e-3, -1e-3, 5e-4, 2e-3, 0.0, -1e-3])

    material.compute_stress(stress, d_strain, TIME, 1.0)
    yield_stress = STEEL_PLASTIC[2] + STEEL_PLASTIC[3] * material.alpha_p[0]

    assert material.alpha_p[0] > 0.0
    assert np.isclose(von_mises(stress), yield_stress)
    # Plastic flow is isochoric
    assert np.isclose(material.plastic_strain[:3].sum(), 0.0, atol=1e-14)


def test_von_mises_uniaxial_hardening():
    E, _, fy, H = STEEL_PLASTIC
    material = VonMises(STEEL_PLASTIC, 1, 0)
    stress = np.zeros(6)
    strain = 5e-3

    C, p_new_dT = material.compute_uniaxial_stress(
        stress, np.array([strain, 0, 0, 0, 0, 0.0]), TIME, 1.0
    )

    expected = fy + E * H / (E + H) * (strain - fy / E)
    assert p_new_dT == 1.0
    assert np.isclose(stress[0], expected, rtol=1e-8)
    assert np.allclose(stress[1:], 0.0, atol=1e-6)
    assert np.isclose(material.alpha_p[0], strain - expected / E, rtol=1e-6)

    assert np.isclose(uniaxial_stress_tangent(C)[0, 0], E * H / (E + H), rtol=1e-6)


def test_von_mises_consistent_tangent_matches_finite_differences():
    state = np.zeros(7)
    state[0] = 1e-3
    stress_n = np.array([200.0, 50.0, 0.0, 30.0, 0.0, 0.0])
    d_strain = np.array([2e-3, -5e-4, -5e-4, 1e-3, 2e-4, 0.0])

    material = VonMises(STEEL_PLASTIC, 1, 0)
    material.state_vars[:] = state
    C, _ = material.compute_stress(stress_n.copy(), d_strain, TIME, 1.0)

    C_fd = _finite_difference_tangent(lambda: VonMises(STEEL_PLASTIC, 1, 0), state, stress_n, d_strain)
    assert np.allclose(C, C_fd, rtol=1e-4, atol=1.0)


def test_von_mises_results():
    material = VonMises(STEEL_PLASTIC, 1, 0)
    assert material.get_result("alphaP").size == 1
    assert material.get_result("plasticStrain").size == 6
    assert material.get_result("damage") is None


# =============================================================================
# Isotropic damage
# =============================================================================


def _strain(eps):
    return np.array([eps, 0, 0, 0, 0, 0.0])


def test_damage_elastic_before_peak():
    material = IsotropicDamage(CONCRETE, 1, 0)
    stress = np.zeros(6)

    C, p_new_dT = material.compute_stress(stress, _strain(5e-5), TIME, 1.0)

    assert p_new_dT == 1.0
    assert material.omega[0] == 0.0
    assert np.isclose(stress[0], CONCRETE[0] * 5e-5)


def test_damage_softening_and_unloading():
    E = CONCRETE[0]
    material = IsotropicDamage(CONCRETE, 1, 0)
    stress = np.zeros(6)

    material.compute_stress(stress, _strain(4e-4), TIME, 1.0)
    omega = material.omega[0]

    assert 0.0 < omega < 1.0
    assert np.isclose(material.kappa[0], 4e-4)
    assert np.isclose(omega, material._damage(4e-4))
    assert np.isclose(stress[0], (1 - omega) * E * 4e-4)

    # Unloading keeps damage and follows the secant stiffness
    C, p_new_dT = material.compute_stress(stress, _strain(-2e-4), TIME, 1.0)

    assert p_new_dT == 1.0
    assert material.omega[0] == omega
    assert np.isclose(stress[0], (1 - omega) * E * 2e-4)
    assert np.allclose(C, (1 - omega) * material.C)


def test_damage_tangent_matches_finite_differences():
    properties = [30000.0, 0.2, 3.0, 0.1, 1.0]
    state = np.zeros(8)
    stress_n = np.zeros(6)
    d_strain = np.array([3e-4, -5e-5, -5e-5, 1e-4, 0.0, 0.0])

    material = IsotropicDamage(properties, 1, 0)
    C, _ = material.compute_stress(stress_n.copy(), d_strain, TIME, 1.0)

    C_fd = _finite_difference_tangent(lambda: IsotropicDamage(properties, 1, 0), state, stress_n, d_strain)
    assert np.allclose(C, C_fd, rtol=1e-4, atol=1e-2)


def test_damage_increment_limit_requests_cutback():
    material = IsotropicDamage(CONCRETE[:4], 1, 0)
    assert material.max_damage_increment == 0.2

    _, p_new_dT = material.compute_stress(np.zeros(6), _strain(5e-4), TIME, 1.0)

    assert p_new_dT == 0.5


def test_damage_snap_back_raises():
    material = IsotropicDamage(CONCRETE, 1, 0)
    with pytest.raises(InvalidMaterialError, match="snap back"):
        material.set_characteristic_element_length(1e4)


def test_damage_regularisation_depends_on_element_size():
    small = IsotropicDamage(CONCRETE, 1, 0)
    large = IsotropicDamage(CONCRETE, 1, 0)
    small.set_characteristic_element_length(1.0)
    large.set_characteristic_element_length(100.0)

    small.compute_stress(np.zeros(6), _strain(1e-3), TIME, 1.0)
    large.compute_stress(np.zeros(6), _strain(1e-3), TIME, 1.0)

    assert large.omega[0] > small.omega[0]
