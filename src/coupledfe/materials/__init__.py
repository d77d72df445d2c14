"""
Materials Module
================

Material evaluators producing the per-Gauss-point MaterialBag.
"""

from .base import MaterialBase, ElasticParams, unpack_params, displacement_gradient
from .linear_elastic import LinearElasticMaterial
from .miehe_fracture import MieheFractureMaterial, FractureParams
from .elastic_cahn_hilliard import (
    ElasticCahnHilliardMaterial,
    CahnHilliardParams,
    free_energy,
)
from .tension_split import (
    SplitResult,
    no_split,
    spectral_split,
    volumetric_deviatoric_split,
    positive_projection,
)
from .registry import MaterialKind, create_material

__all__ = [
    "MaterialBase",
    "ElasticParams",
    "unpack_params",
    "displacement_gradient",
    "LinearElasticMaterial",
    "MieheFractureMaterial",
    "FractureParams",
    "ElasticCahnHilliardMaterial",
    "CahnHilliardParams",
    "free_energy",
    "SplitResult",
    "no_split",
    "spectral_split",
    "volumetric_deviatoric_split",
    "positive_projection",
    "MaterialKind",
    "create_material",
]
