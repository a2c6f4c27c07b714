from .boundary import BoundaryElement
from .displacement import (
    DisplacementElement,
    DistributedLoadTypes,
    GaussPoint,
    GaussPointGeometry,
    SectionType,
    StateTypes,
)
from .elements import (
    ELEMENT_MAP,
    HEXA8,
    HEXA20,
    QUAD4,
    QUAD8,
    TETRA4,
    TRIA3,
    TRUSS2,
    TRUSS3,
    ElementFactory,
)
from .integration import GaussPointInfo, IntegrationTypes, get_gauss_point_info

__all__ = [
    "BoundaryElement",
    "DisplacementElement",
    "DistributedLoadTypes",
    "GaussPoint",
    "GaussPointGeometry",
    "SectionType",
    "StateTypes",
    "ELEMENT_MAP",
    "ElementFactory",
    "TRUSS2",
    "TRUSS3",
    "QUAD4",
    "QUAD8",
    "TRIA3",
    "HEXA8",
    "HEXA20",
    "TETRA4",
    "GaussPointInfo",
    "IntegrationTypes",
    "get_gauss_point_info",
]
