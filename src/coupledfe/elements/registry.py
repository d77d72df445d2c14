"""Closed set of element kinds and their factory."""

import logging
from enum import Enum

from ..core.errors import ConfigurationError
from .base import ElementBase
from .mechanics import MechanicsElement
from .miehe_fracture import MieheFractureElement
from .mechanics_cahn_hilliard import MechanicsCahnHilliardElement

logger = logging.getLogger(__name__)


class ElementKind(Enum):
    MECHANICS = "mechanics"
    MIEHE_FRACTURE = "miehe_fracture"
    MECHANICS_CAHN_HILLIARD = "mechanics_cahn_hilliard"


_ELEMENTS = {
    ElementKind.MECHANICS: MechanicsElement,
    ElementKind.MIEHE_FRACTURE: MieheFractureElement,
    ElementKind.MECHANICS_CAHN_HILLIARD: MechanicsCahnHilliardElement,
}


def create_element(kind) -> ElementBase:
    """
    Instantiate an element kernel.

    Args:
        kind: ElementKind or its string value
    """
    try:
        kind = ElementKind(kind)
    except ValueError:
        logger.error("unsupported element kind %r", kind)
        raise ConfigurationError(
            f"Unknown element kind: {kind!r} "
            f"(available: {[k.value for k in ElementKind]})") from None
    return _ELEMENTS[kind]()
