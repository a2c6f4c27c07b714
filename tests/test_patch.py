"""
Small assembled problems driving the element engine the way a host solver does.

This module tests:
1. The plane stress patch test on a distorted 2x2 QUAD4 mesh
2. A Newton iteration with state restore on an elasto-plastic bar
"""

import numpy as np
import pytest
from scipy import sparse
from scipy.sparse.linalg import spsolve

from fem_displacement.elements import ElementFactory

TIME = [0.0, 0.0]
E, NU = 1000.0, 0.25


# =============================================================================
# Helpers
# =============================================================================


def assemble(elements, connectivity, n_dof_per_node, n_nodes, dq_global, states):
    """Assemble global residual and stiffness from a displacement increment."""
    n_dofs = n_nodes * n_dof_per_node
    rows, cols, vals = [], [], []
    P = np.zeros(n_dofs)

    for element, nodes, state in zip(elements, connectivity, states):
        dofs = np.array([n * n_dof_per_node + d for n in nodes for d in range(n_dof_per_node)])
        n = len(dofs)
        Pe = np.zeros(n)
        Ke = np.zeros((n, n))
        element.assign_state_vars(state)
        p_new_dT = element.compute_yourself(dq_global[dofs], dq_global[dofs], Pe, Ke, TIME, 1.0)
        assert p_new_dT == 1.0

        P[dofs] += Pe
        rows.extend(np.repeat(dofs, n))
        cols.extend(np.tile(dofs, n))
        vals.extend(Ke.ravel())

    K = sparse.coo_matrix((vals, (rows, cols)), shape=(n_dofs, n_dofs)).tocsr()
    return P, K


# =============================================================================
# Patch test
# =============================================================================


@pytest.fixture
def distorted_patch():
    coords = np.array(
        [
            [0.0, 0.0],
            [1.0, 0.0],
            [2.0, 0.0],
            [0.0, 1.0],
            [1.1, 0.8],  # interior node, off centre
            [2.0, 1.0],
            [0.0, 2.0],
            [1.0, 2.0],
            [2.0, 2.0],
        ]
    )
    connectivity = [[0, 1, 4, 3], [1, 2, 5, 4], [3, 4, 7, 6], [4, 5, 8, 7]]

    elements = []
    for label, nodes in enumerate(connectivity, start=1):
        element = ElementFactory.get_element("QUAD4", label, "full", "plane_stress")
        element.assign_element_properties([0.1])
        element.assign_material_section(1, [E, NU])
        element.initialize_yourself(coords[nodes])
        elements.append(element)

    return coords, connectivity, elements


def test_quad4_patch_reproduces_linear_field(distorted_patch):
    coords, connectivity, elements = distorted_patch
    a, b, c, d = 1e-3, 4e-4, -2e-4, 6e-4
    exact = np.column_stack(
        [a * coords[:, 0] + b * coords[:, 1], c * coords[:, 0] + d * coords[:, 1]]
    ).ravel()

    interior = np.array([8, 9])
    boundary = np.setdiff1d(np.arange(18), interior)

    # Stiffness at the undeformed state
    states = [np.zeros(e.get_number_of_required_state_vars()) for e in elements]
    _, K = assemble(elements, connectivity, 2, 9, np.zeros(18), states)

    u = np.zeros(18)
    u[boundary] = exact[boundary]
    K_ii = K[interior][:, interior]
    K_ib = K[interior][:, boundary]
    u[interior] = spsolve(K_ii.tocsc(), -K_ib @ u[boundary])

    assert np.allclose(u[interior], exact[interior], rtol=1e-8), "Interior node not exact"

    # Stress state is uniform and interior nodes are in equilibrium
    states = [np.zeros(e.get_number_of_required_state_vars()) for e in elements]
    P, _ = assemble(elements, connectivity, 2, 9, u, states)

    assert np.allclose(P[interior], 0.0, atol=1e-10)
    C = E / (1 - NU**2) * np.array([[1, NU, 0], [NU, 1, 0], [0, 0, (1 - NU) / 2]])
    expected = C @ np.array([a, d, b + c])
    for element in elements:
        for gpt in element.gauss_points:
            assert np.allclose(gpt.stress[[0, 1, 3]], expected)


# =============================================================================
# Newton iteration
# =============================================================================


def test_newton_on_plastic_bar():
    """Two bars in series with different areas, both pulled into yield."""
    fy, H = 5.0, 100.0
    coords = np.array([[0.0], [1.0], [2.0]])
    connectivity = [[0, 1], [1, 2]]
    areas = [1.0, 2.0]

    elements = []
    for label, (nodes, area) in enumerate(zip(connectivity, areas), start=1):
        element = ElementFactory.get_element("TRUSS2", label, "full")
        element.assign_element_properties([area])
        element.assign_material_section(2, [E, NU, fy, H])
        element.initialize_yourself(coords[nodes])
        elements.append(element)

    committed = [np.zeros(e.get_number_of_required_state_vars()) for e in elements]

    # Node 0 fixed, node 2 prescribed, node 1 free
    du = np.array([0.0, 0.0, 0.1])
    free = np.array([1])
    for iteration in range(20):
        trial = [state.copy() for state in committed]
        P, K = assemble(elements, connectivity, 1, 3, du, trial)
        if np.abs(P[free]).max() < 1e-8:
            break
        du[free] += spsolve(K[free][:, free].tocsc(), P[free])

    assert iteration < 8, "Newton iteration did not converge quadratically"

    # Same axial force in both bars, the thin bar carries more plastic strain
    force = [element.gauss_points[0].stress[0] * area for element, area in zip(elements, areas)]
    assert np.isclose(force[0], force[1])
    assert trial[0][0] > trial[1][0]

    strain_1 = du[1] - du[0]
    assert np.isclose(
        elements[0].gauss_points[0].stress[0], fy + E * H / (E + H) * (strain_1 - fy / E)
    )
