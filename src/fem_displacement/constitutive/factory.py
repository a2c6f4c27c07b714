"""Material factory keyed by integer material code.

Models register themselves with :func:`register_material`. The factory only
hands out models implementing :class:`HypoElasticMaterial`, so callers never
need to check the capability of what they receive.
"""

from enum import IntEnum
from typing import Callable, Dict, Sequence, Type

from fem_displacement.constitutive.base import HypoElasticMaterial
from fem_displacement.core.errors import InvalidMaterialError


class MaterialCode(IntEnum):
    LINEAR_ELASTIC = 1
    VON_MISES = 2
    ISOTROPIC_DAMAGE = 3


MATERIAL_REGISTRY: Dict[int, Type] = {}


def register_material(code: int) -> Callable[[Type], Type]:
    """Class decorator adding a model to the registry under ``code``."""

    def decorator(cls: Type) -> Type:
        MATERIAL_REGISTRY[int(code)] = cls
        return cls

    return decorator


def material_factory(
    material_code: int,
    material_properties: Sequence[float],
    element_label: int,
    gauss_point: int,
) -> HypoElasticMaterial:
    """Create one constitutive model instance.

    Parameters
    ----------
    material_code : int
        Registry key of the model
    material_properties : Sequence[float]
        Raw property array passed to the model
    element_label, gauss_point : int
        Identifiers used in diagnostics

    Returns
    -------
    HypoElasticMaterial
        A fresh, independent model instance

    Raises
    ------
    InvalidMaterialError
        If the code is unknown or the registered class is not hypo-elastic.
    """
    try:
        cls = MATERIAL_REGISTRY[int(material_code)]
    except KeyError:
        raise InvalidMaterialError(
            f"Unknown material code {material_code} (element {element_label}); "
            f"available codes: {sorted(MATERIAL_REGISTRY)}"
        ) from None

    if not (isinstance(cls, type) and issubclass(cls, HypoElasticMaterial)):
        raise InvalidMaterialError(
            f"Material code {material_code} ({getattr(cls, '__name__', cls)}) "
            f"does not provide a hypo-elastic stress update (element {element_label})"
        )

    return cls(material_properties, element_label, gauss_point)
