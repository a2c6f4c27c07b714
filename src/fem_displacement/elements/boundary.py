"""Boundary (face) elements for surface loads.

A boundary element integrates over one face of a parent element:

    P_face = ∫ N_faceᵀ n dA

where n is the outward unit normal. For a uniform pressure p acting on the
face the parent load vector is -p · P_face.

Face measure and normal per dimension:
    1-D: point face, n = ±1 pointing away from the element, dA = 1
    2-D: edge, n dA = (∂y/∂ξ, -∂x/∂ξ) dξ
    3-D: surface, n dA = (∂x/∂ξ × ∂x/∂η) dξ dη
"""

from typing import Sequence

import numpy as np

from fem_displacement.elements.geometry import GEOMETRY_BY_SHAPE
from fem_displacement.elements.integration import IntegrationTypes, get_gauss_point_info


class BoundaryElement:
    """One face of a parent element.

    Parameters
    ----------
    shape : str
        Shape of the parent element (e.g. "Quad4")
    face : int
        1-based face number in the parent element's face table
    n_dim : int
        Spatial dimension
    coordinates : Sequence[float]
        Parent nodal coordinates, flat or (n_nodes × n_dim)
    """

    def __init__(self, shape: str, face: int, n_dim: int, coordinates: Sequence[float]):
        try:
            parent = GEOMETRY_BY_SHAPE[shape]
        except KeyError:
            raise ValueError(f"Unknown element shape '{shape}'") from None

        if parent.n_dim != n_dim:
            raise ValueError(f"{shape} is a {parent.n_dim}-D shape, got n_dim={n_dim}")
        if not 1 <= face <= len(parent.faces):
            raise ValueError(f"{shape} has faces 1..{len(parent.faces)}, got face {face}")

        self.shape = shape
        self.face = face
        self.n_dim = n_dim
        self.parent_coordinates = np.asarray(coordinates, dtype=float).reshape(
            parent.n_nodes, n_dim
        )
        self.face_nodes = np.array(parent.faces[face - 1])
        self.face_coordinates = self.parent_coordinates[self.face_nodes]
        self.face_geometry = GEOMETRY_BY_SHAPE[parent.face_shape]()
        self.gauss_points = get_gauss_point_info(parent.face_shape, IntegrationTypes.FULL)

    @property
    def n_face_nodes(self) -> int:
        return len(self.face_nodes)

    def _weighted_normal(self, xi: np.ndarray) -> np.ndarray:
        """Outward normal scaled by the face measure, n dA per unit natural measure."""
        if self.n_dim == 1:
            centroid = self.parent_coordinates.mean(axis=0)
            return np.sign(self.face_coordinates[0] - centroid)

        tangents = self.face_geometry.shape_function_derivatives(xi) @ self.face_coordinates
        if self.n_dim == 2:
            t = tangents[0]
            return np.array([t[1], -t[0]])
        return np.cross(tangents[0], tangents[1])

    def compute_normal_load_vector(self) -> np.ndarray:
        """Consistent nodal vector ∫ N_faceᵀ n dA (n_face_nodes·n_dim,)."""
        P = np.zeros(self.n_face_nodes * self.n_dim)
        for gpt in self.gauss_points:
            N = self.face_geometry.shape_functions(gpt.xi)
            n_dA = self._weighted_normal(gpt.xi)
            P += np.kron(N, n_dA) * gpt.weight
        return P

    def assemble_into_parent_vector(self, local: np.ndarray, target: np.ndarray) -> None:
        """Add a face vector into the parent element vector ``target`` in place."""
        local = np.asarray(local, dtype=float).reshape(self.n_face_nodes, self.n_dim)
        parent = target.reshape(-1, self.n_dim)
        parent[self.face_nodes] += local
