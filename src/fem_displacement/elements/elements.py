from typing import Dict, Optional, Type, Union

from fem_displacement.elements.displacement import DisplacementElement, SectionType
from fem_displacement.elements.geometry import (
    Hexa8Geometry,
    Hexa20Geometry,
    Quad4Geometry,
    Quad8Geometry,
    Tetra4Geometry,
    Tria3Geometry,
    Truss2Geometry,
    Truss3Geometry,
)
from fem_displacement.elements.integration import IntegrationTypes


class TRUSS2(DisplacementElement, Truss2Geometry):
    """2-node linear bar in uniaxial stress."""


class TRUSS3(DisplacementElement, Truss3Geometry):
    """3-node quadratic bar in uniaxial stress."""


class QUAD4(DisplacementElement, Quad4Geometry):
    """4-node bilinear quadrilateral, plane stress or plane strain."""


class QUAD8(DisplacementElement, Quad8Geometry):
    """8-node serendipity quadrilateral, plane stress or plane strain."""


class TRIA3(DisplacementElement, Tria3Geometry):
    """3-node constant strain triangle, plane stress or plane strain."""


class HEXA8(DisplacementElement, Hexa8Geometry):
    """8-node trilinear hexahedron."""


class HEXA20(DisplacementElement, Hexa20Geometry):
    """20-node serendipity hexahedron."""


class TETRA4(DisplacementElement, Tetra4Geometry):
    """4-node linear tetrahedron."""


ELEMENT_MAP: Dict[str, Type[DisplacementElement]] = {
    cls.__name__: cls for cls in (TRUSS2, TRUSS3, QUAD4, QUAD8, TRIA3, HEXA8, HEXA20, TETRA4)
}


class ElementFactory:
    @staticmethod
    def get_element(
        element_type: str,
        label: int,
        integration_type: Union[IntegrationTypes, str] = IntegrationTypes.FULL,
        section_type: Optional[Union[SectionType, str]] = None,
    ) -> DisplacementElement:
        """Create a displacement element by type name (e.g. "QUAD4").

        Raises
        ------
        ValueError
            If the type name, integration type or section type is unknown, or
            the section does not match the element dimension.
        """
        try:
            element = ELEMENT_MAP[element_type.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown element type '{element_type}'. Available: {sorted(ELEMENT_MAP)}"
            ) from None

        if isinstance(integration_type, str):
            integration_type = IntegrationTypes(integration_type.lower())
        if isinstance(section_type, str):
            section_type = SectionType(section_type.lower())

        return element(label, integration_type, section_type)
