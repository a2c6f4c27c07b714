"""Isoparametric geometry for line, plane and solid elements.

Each geometry class provides the shape functions N(ξ) and their natural
derivatives ∂N/∂ξ for one element shape, and from those the Jacobian, the
physical derivatives ∂N/∂x and the strain-displacement matrix B.

Jacobian convention:
    J[i, j] = ∂x_j/∂ξ_i = Σ_k ∂N_k/∂ξ_i · x_kj

so that ∂N/∂x = J⁻¹ · ∂N/∂ξ.

Node numbering:

    Truss2        Truss3
    0-----1       0--2--1

    Quad4          Quad8          Tria3
    3---2         3---6---2       2
    |   |         |       |       | \\
    0---1         7       5       0--1
                  |       |
                  0---4---1

    Hexa8 / Hexa20: bottom face 0-1-2-3 (ζ = -1), top face 4-5-6-7 (ζ = +1),
    mid-edge nodes 8-11 bottom, 12-15 top, 16-19 vertical edges.
    Tetra4: 0 at the origin, 1, 2, 3 on the ξ, η, ζ axes.

Faces are listed with 0-based local node indices; the public face numbers
are 1-based. Face node order gives the outward normal by the right-hand rule
(3-D) or by traversal in the counter-clockwise sense (2-D).
"""

from typing import Dict, Optional, Sequence, Tuple, Type

import numpy as np

VOIGT_SIZE_BY_DIM = {1: 1, 2: 3, 3: 6}


class GeometryElement:
    """Base class for the isoparametric geometry of one element shape.

    Attributes
    ----------
    shape : str
        Shape name, also the key of the integration rule
    n_dim : int
        Parametric (and spatial) dimension
    n_nodes : int
        Number of nodes
    faces : tuple
        Local node indices of every face
    face_shape : str
        Shape of the faces
    coordinates : np.ndarray or None
        Nodal coordinates (n_nodes × n_dim), set by ``initialize_yourself``
    """

    shape: str = ""
    n_dim: int = 0
    n_nodes: int = 0
    faces: Tuple[Tuple[int, ...], ...] = ()
    face_shape: Optional[str] = None

    def __init__(self):
        self.coordinates: Optional[np.ndarray] = None

    @property
    def voigt_size(self) -> int:
        return VOIGT_SIZE_BY_DIM[self.n_dim]

    @property
    def element_shape(self) -> str:
        return self.shape

    def initialize_yourself(self, coordinates: Sequence[float]) -> None:
        """Store the nodal coordinates, flat (node-major) or as an (n_nodes × n_dim) array."""
        coordinates = np.asarray(coordinates, dtype=float)
        if coordinates.size != self.n_nodes * self.n_dim:
            raise ValueError(
                f"{self.shape} requires {self.n_nodes * self.n_dim} coordinates, "
                f"got {coordinates.size}"
            )
        self.coordinates = coordinates.reshape(self.n_nodes, self.n_dim).copy()

    def shape_functions(self, xi: np.ndarray) -> np.ndarray:
        """Shape function values N (n_nodes,) at natural coordinate ``xi``."""
        raise NotImplementedError

    def shape_function_derivatives(self, xi: np.ndarray) -> np.ndarray:
        """Natural derivatives ∂N/∂ξ (n_dim × n_nodes) at natural coordinate ``xi``."""
        raise NotImplementedError

    def compute_jacobian(self, dN_dxi: np.ndarray) -> np.ndarray:
        if self.coordinates is None:
            raise ValueError(f"{self.shape} coordinates have not been initialized")
        return dN_dxi @ self.coordinates

    def compute_dN_dX(self, dN_dxi: np.ndarray, inv_J: np.ndarray) -> np.ndarray:
        return inv_J @ dN_dxi

    def compute_B_matrix(self, dN_dX: np.ndarray) -> np.ndarray:
        """Strain-displacement matrix B (voigt_size × n_nodes·n_dim).

        1-D:  [ε11]
        2-D:  [ε11, ε22, γ12]
        3-D:  [ε11, ε22, ε33, γ12, γ13, γ23]
        """
        B = np.zeros((self.voigt_size, self.n_nodes * self.n_dim))

        if self.n_dim == 1:
            B[0, :] = dN_dX[0]

        elif self.n_dim == 2:
            dN_dx, dN_dy = dN_dX
            B[0, 0::2] = dN_dx
            B[1, 1::2] = dN_dy
            B[2, 0::2] = dN_dy
            B[2, 1::2] = dN_dx

        elif self.n_dim == 3:
            dN_dx, dN_dy, dN_dz = dN_dX
            B[0, 0::3] = dN_dx
            B[1, 1::3] = dN_dy
            B[2, 2::3] = dN_dz
            B[3, 0::3] = dN_dy  # γ12
            B[3, 1::3] = dN_dx
            B[4, 0::3] = dN_dz  # γ13
            B[4, 2::3] = dN_dx
            B[5, 1::3] = dN_dz  # γ23
            B[5, 2::3] = dN_dy

        return B

    def shape_function_matrix(self, N: np.ndarray) -> np.ndarray:
        """Interpolation matrix (n_dim × n_nodes·n_dim), u(ξ) = N_mat · q."""
        N_mat = np.zeros((self.n_dim, self.n_nodes * self.n_dim))
        for d in range(self.n_dim):
            N_mat[d, d :: self.n_dim] = N
        return N_mat


class _TensorProductLinear(GeometryElement):
    """Linear Lagrange shapes on [-1, 1]^d: N = Π(1 + ξᵢξᵢᴺ) / 2^d."""

    NODES: np.ndarray

    def shape_functions(self, xi: np.ndarray) -> np.ndarray:
        terms = 1 + self.NODES * np.asarray(xi, dtype=float)
        return np.prod(terms, axis=1) / 2**self.n_dim

    def shape_function_derivatives(self, xi: np.ndarray) -> np.ndarray:
        terms = 1 + self.NODES * np.asarray(xi, dtype=float)
        dN_dxi = np.empty((self.n_dim, self.n_nodes))
        for j in range(self.n_dim):
            others = np.prod(np.delete(terms, j, axis=1), axis=1)
            dN_dxi[j] = self.NODES[:, j] * others / 2**self.n_dim
        return dN_dxi


class _Serendipity(GeometryElement):
    """Quadratic serendipity shapes on [-1, 1]^d.

    Corner nodes:    N = Π(1 + ξᵢξᵢᴺ) (Σ ξᵢξᵢᴺ - (d - 1)) / 2^d
    Mid-edge nodes:  N = (1 - ξₐ²) Π_{i≠a}(1 + ξᵢξᵢᴺ) / 2^(d-1)   (ξₐᴺ = 0)
    """

    NODES: np.ndarray

    def shape_functions(self, xi: np.ndarray) -> np.ndarray:
        xi = np.asarray(xi, dtype=float)
        d = self.n_dim
        N = np.empty(self.n_nodes)
        for k, node in enumerate(self.NODES):
            product = np.prod(1 + node * xi)
            if np.all(node != 0):
                N[k] = product * (node @ xi - (d - 1)) / 2**d
            else:
                a = np.flatnonzero(node == 0)[0]
                N[k] = (1 - xi[a] ** 2) * product / 2 ** (d - 1)
        return N

    def shape_function_derivatives(self, xi: np.ndarray) -> np.ndarray:
        xi = np.asarray(xi, dtype=float)
        d = self.n_dim
        dN_dxi = np.empty((d, self.n_nodes))
        for k, node in enumerate(self.NODES):
            terms = 1 + node * xi
            corner = np.all(node != 0)
            a = None if corner else np.flatnonzero(node == 0)[0]
            for j in range(d):
                others = np.prod(np.delete(terms, j))
                if corner:
                    dN_dxi[j, k] = node[j] * others * (node @ xi + node[j] * xi[j] - d + 2) / 2**d
                elif j == a:
                    dN_dxi[j, k] = -2 * xi[a] * others / 2 ** (d - 1)
                else:
                    others_a = np.prod(np.delete(terms, [j, a]))
                    dN_dxi[j, k] = (1 - xi[a] ** 2) * node[j] * others_a / 2 ** (d - 1)
        return dN_dxi


class _SimplexLinear(GeometryElement):
    """Linear shapes on the unit simplex: N = [1 - Σξᵢ, ξ₁, ..., ξ_d]."""

    def shape_functions(self, xi: np.ndarray) -> np.ndarray:
        xi = np.asarray(xi, dtype=float)
        return np.concatenate([[1.0 - xi.sum()], xi])

    def shape_function_derivatives(self, xi: np.ndarray) -> np.ndarray:
        dN_dxi = np.zeros((self.n_dim, self.n_nodes))
        dN_dxi[:, 0] = -1.0
        dN_dxi[:, 1:] = np.eye(self.n_dim)
        return dN_dxi


class PointGeometry(GeometryElement):
    """Zero-dimensional face of a line element."""

    shape = "Point"
    n_dim = 0
    n_nodes = 1

    def shape_functions(self, xi: np.ndarray) -> np.ndarray:
        return np.ones(1)

    def shape_function_derivatives(self, xi: np.ndarray) -> np.ndarray:
        return np.zeros((0, 1))


class Truss2Geometry(_TensorProductLinear):
    shape = "Truss2"
    n_dim = 1
    n_nodes = 2
    NODES = np.array([[-1.0], [1.0]])
    faces = ((0,), (1,))
    face_shape = "Point"


class Truss3Geometry(_Serendipity):
    shape = "Truss3"
    n_dim = 1
    n_nodes = 3
    NODES = np.array([[-1.0], [1.0], [0.0]])
    faces = ((0,), (1,))
    face_shape = "Point"


class Quad4Geometry(_TensorProductLinear):
    shape = "Quad4"
    n_dim = 2
    n_nodes = 4
    NODES = np.array([[-1.0, -1.0], [1.0, -1.0], [1.0, 1.0], [-1.0, 1.0]])
    faces = ((0, 1), (1, 2), (2, 3), (3, 0))
    face_shape = "Truss2"


class Quad8Geometry(_Serendipity):
    shape = "Quad8"
    n_dim = 2
    n_nodes = 8
    NODES = np.array(
        [
            [-1.0, -1.0],
            [1.0, -1.0],
            [1.0, 1.0],
            [-1.0, 1.0],
            [0.0, -1.0],
            [1.0, 0.0],
            [0.0, 1.0],
            [-1.0, 0.0],
        ]
    )
    faces = ((0, 1, 4), (1, 2, 5), (2, 3, 6), (3, 0, 7))
    face_shape = "Truss3"


class Tria3Geometry(_SimplexLinear):
    shape = "Tria3"
    n_dim = 2
    n_nodes = 3
    faces = ((0, 1), (1, 2), (2, 0))
    face_shape = "Truss2"


class Hexa8Geometry(_TensorProductLinear):
    shape = "Hexa8"
    n_dim = 3
    n_nodes = 8
    NODES = np.array(
        [
            [-1.0, -1.0, -1.0],
            [1.0, -1.0, -1.0],
            [1.0, 1.0, -1.0],
            [-1.0, 1.0, -1.0],
            [-1.0, -1.0, 1.0],
            [1.0, -1.0, 1.0],
            [1.0, 1.0, 1.0],
            [-1.0, 1.0, 1.0],
        ]
    )
    faces = (
        (0, 3, 2, 1),
        (4, 5, 6, 7),
        (0, 1, 5, 4),
        (1, 2, 6, 5),
        (2, 3, 7, 6),
        (3, 0, 4, 7),
    )
    face_shape = "Quad4"


class Hexa20Geometry(_Serendipity):
    shape = "Hexa20"
    n_dim = 3
    n_nodes = 20
    NODES = np.vstack(
        [
            Hexa8Geometry.NODES,
            [
                [0.0, -1.0, -1.0],
                [1.0, 0.0, -1.0],
                [0.0, 1.0, -1.0],
                [-1.0, 0.0, -1.0],
                [0.0, -1.0, 1.0],
                [1.0, 0.0, 1.0],
                [0.0, 1.0, 1.0],
                [-1.0, 0.0, 1.0],
                [-1.0, -1.0, 0.0],
                [1.0, -1.0, 0.0],
                [1.0, 1.0, 0.0],
                [-1.0, 1.0, 0.0],
            ],
        ]
    )
    faces = (
        (0, 3, 2, 1, 11, 10, 9, 8),
        (4, 5, 6, 7, 12, 13, 14, 15),
        (0, 1, 5, 4, 8, 17, 12, 16),
        (1, 2, 6, 5, 9, 18, 13, 17),
        (2, 3, 7, 6, 10, 19, 14, 18),
        (3, 0, 4, 7, 11, 16, 15, 19),
    )
    face_shape = "Quad8"


class Tetra4Geometry(_SimplexLinear):
    shape = "Tetra4"
    n_dim = 3
    n_nodes = 4
    faces = ((0, 2, 1), (0, 1, 3), (1, 2, 3), (0, 3, 2))
    face_shape = "Tria3"


GEOMETRY_BY_SHAPE: Dict[str, Type[GeometryElement]] = {
    cls.shape: cls
    for cls in (
        PointGeometry,
        Truss2Geometry,
        Truss3Geometry,
        Quad4Geometry,
        Quad8Geometry,
        Tria3Geometry,
        Hexa8Geometry,
        Hexa20Geometry,
        Tetra4Geometry,
    )
}
