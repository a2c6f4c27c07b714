"""Displacement element integration engine for nonlinear structural analysis."""

from fem_displacement.core.config import ElementConfig, MaterialConfig, build_element
from fem_displacement.elements import ElementFactory, SectionType

__version__ = "0.1.0"

__all__ = ["ElementConfig", "MaterialConfig", "build_element", "ElementFactory", "SectionType"]
