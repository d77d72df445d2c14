"""Closed set of material kinds and their factory."""

import logging
from enum import Enum

from ..core.errors import ConfigurationError
from .base import MaterialBase
from .linear_elastic import LinearElasticMaterial
from .miehe_fracture import MieheFractureMaterial
from .elastic_cahn_hilliard import ElasticCahnHilliardMaterial

logger = logging.getLogger(__name__)


class MaterialKind(Enum):
    LINEAR_ELASTIC = "linear_elastic"
    MIEHE_FRACTURE = "miehe_fracture"
    ELASTIC_CAHN_HILLIARD = "elastic_cahn_hilliard"


_MATERIALS = {
    MaterialKind.LINEAR_ELASTIC: LinearElasticMaterial,
    MaterialKind.MIEHE_FRACTURE: MieheFractureMaterial,
    MaterialKind.ELASTIC_CAHN_HILLIARD: ElasticCahnHilliardMaterial,
}


def create_material(kind) -> MaterialBase:
    """
    Instantiate a material evaluator.

    Args:
        kind: MaterialKind or its string value
    """
    try:
        kind = MaterialKind(kind)
    except ValueError:
        logger.error("unsupported material kind %r", kind)
        raise ConfigurationError(
            f"Unknown material kind: {kind!r} "
            f"(available: {[k.value for k in MaterialKind]})") from None
    return _MATERIALS[kind]()
