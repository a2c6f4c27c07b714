"""
Element Configuration Module.

This module provides a YAML-based configuration for displacement elements,
so that an element with its section and material can be described without
writing Python code.

Example YAML configuration:
    element_type: "QUAD4"
    label: 12
    integration: "full"
    section: "plane_strain"
    element_properties: [0.25]      # thickness
    material:
      code: 2                       # von Mises
      properties: [210.0e3, 0.3, 355.0, 1000.0]
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)


@dataclass
class MaterialConfig:
    """Material section: registry code and raw property array."""

    code: int
    properties: List[float] = field(default_factory=list)

    def __post_init__(self):
        from fem_displacement.constitutive import MATERIAL_REGISTRY

        try:
            self.code = int(self.code)
        except (TypeError, ValueError):
            raise ValueError(f"Material code must be an integer, got {self.code!r}") from None
        if self.code not in MATERIAL_REGISTRY:
            raise ValueError(
                f"Unknown material code {self.code}. Available: {sorted(MATERIAL_REGISTRY)}"
            )
        self.properties = [float(value) for value in self.properties]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaterialConfig":
        if "code" not in data:
            raise ValueError("Material configuration requires a 'code'")
        return cls(code=data["code"], properties=list(data.get("properties", [])))

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "properties": list(self.properties)}


@dataclass
class ElementConfig:
    """Complete description of one displacement element.

    Parameters
    ----------
    element_type : str
        Element class name, e.g. "QUAD4" or "HEXA8".
    material : MaterialConfig
        Material code and properties.
    label : int
        Element label.
    integration : str
        "full" or "reduced".
    section : str, optional
        Section type; defaults to the first valid section for the dimension.
    element_properties : List[float]
        Element properties; the first entry is the thickness (plane) or the
        cross section area (uniaxial).

    Raises
    ------
    ValueError
        If any parameter has an invalid value.
    """

    element_type: str
    material: MaterialConfig
    label: int = 1
    integration: str = "full"
    section: Optional[str] = None
    element_properties: List[float] = field(default_factory=list)

    def __post_init__(self):
        """Validate all configuration parameters."""
        self._validate_element()
        self._validate_section()

    def _validate_element(self):
        from fem_displacement.elements import ELEMENT_MAP, IntegrationTypes

        self.element_type = self.element_type.upper()
        if self.element_type not in ELEMENT_MAP:
            raise ValueError(
                f"Invalid element_type: '{self.element_type}'. "
                f"Must be one of {sorted(ELEMENT_MAP)}."
            )

        try:
            IntegrationTypes(self.integration.lower())
            self.integration = self.integration.lower()
        except ValueError:
            valid = [t.value for t in IntegrationTypes]
            raise ValueError(
                f"Invalid integration: '{self.integration}'. Must be one of {valid}."
            ) from None

    def _validate_section(self):
        from fem_displacement.elements import ELEMENT_MAP, SectionType
        from fem_displacement.elements.displacement import SECTIONS_BY_DIM

        n_dim = ELEMENT_MAP[self.element_type].n_dim
        valid_sections = [s.value for s in SECTIONS_BY_DIM[n_dim]]

        if self.section is None:
            self.section = valid_sections[0]
        self.section = self.section.lower()
        if self.section not in valid_sections:
            raise ValueError(
                f"Invalid section: '{self.section}' for {self.element_type}. "
                f"Must be one of {valid_sections}."
            )

        self.element_properties = [float(value) for value in self.element_properties]
        if SectionType(self.section) != SectionType.SOLID:
            if not self.element_properties or self.element_properties[0] <= 0:
                raise ValueError(
                    f"Section '{self.section}' requires a positive thickness or cross "
                    f"section as first element property, got {self.element_properties}"
                )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementConfig":
        """Create configuration from a dictionary.

        Raises
        ------
        ValueError
            If required keys are missing or unknown keys are present.
        """
        known = {"element_type", "label", "integration", "section", "element_properties", "material"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        for key in ("element_type", "material"):
            if key not in data:
                raise ValueError(f"Missing required configuration key '{key}'")

        return cls(
            element_type=data["element_type"],
            material=MaterialConfig.from_dict(data["material"]),
            label=int(data.get("label", 1)),
            integration=data.get("integration", "full"),
            section=data.get("section"),
            element_properties=list(data.get("element_properties", [])),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "ElementConfig":
        """Load configuration from YAML file.

        Parameters
        ----------
        yaml_path : str or Path
            Path to the YAML configuration file.

        Returns
        -------
        ElementConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError
            If the YAML file does not exist.
        ValueError
            If the configuration is invalid.
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {yaml_path} does not contain a mapping")

        logger.info("Loaded element configuration from %s", yaml_path)
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "element_type": self.element_type,
            "label": self.label,
            "integration": self.integration,
            "section": self.section,
            "element_properties": list(self.element_properties),
            "material": self.material.to_dict(),
        }

    def save_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        with open(yaml_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def build_element(config: ElementConfig):
    """Create an element and assign its properties and material section.

    The returned element still needs its state buffer bound and its
    coordinates initialized by the host.
    """
    from fem_displacement.elements import ElementFactory

    element = ElementFactory.get_element(
        config.element_type, config.label, config.integration, config.section
    )
    if config.element_properties:
        element.assign_element_properties(config.element_properties)
    element.assign_material_section(config.material.code, config.material.properties)
    return element
