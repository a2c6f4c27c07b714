"""
Constitutive models package for fem_displacement.

This package contains the hypo-elastic material interface, the material
factory keyed by integer code, and the bundled material models.
"""

from fem_displacement.constitutive.base import HypoElasticMaterial
from fem_displacement.constitutive.factory import (
    MATERIAL_REGISTRY,
    MaterialCode,
    material_factory,
    register_material,
)
from fem_displacement.constitutive.damage import IsotropicDamage
from fem_displacement.constitutive.elastic import LinearElastic
from fem_displacement.constitutive.plasticity import VonMises

__all__ = [
    "HypoElasticMaterial",
    "MATERIAL_REGISTRY",
    "MaterialCode",
    "material_factory",
    "register_material",
    "IsotropicDamage",
    "LinearElastic",
    "VonMises",
]
