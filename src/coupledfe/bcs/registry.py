"""Closed set of boundary-condition kinds and their factory."""

import logging
from enum import Enum

from ..core.errors import ConfigurationError
from .base import BoundaryBase
from .flux import FluxBC, ConvectiveFluxBC

logger = logging.getLogger(__name__)


class BCKind(Enum):
    FLUX = "flux"
    CONVECTIVE_FLUX = "convective_flux"


_BCS = {
    BCKind.FLUX: FluxBC,
    BCKind.CONVECTIVE_FLUX: ConvectiveFluxBC,
}


def create_bc(kind, dofs, value, params=()) -> BoundaryBase:
    """
    Instantiate and validate a boundary integrator.

    Args:
        kind: BCKind or its string value
        dofs: targeted 1-based field indices
        value: boundary value (scalar or one per dof)
        params: positional parameters of the condition
    """
    try:
        kind = BCKind(kind)
    except ValueError:
        logger.error("unsupported boundary condition kind %r", kind)
        raise ConfigurationError(
            f"Unknown boundary condition kind: {kind!r} "
            f"(available: {[k.value for k in BCKind]})") from None
    return _BCS[kind](dofs, value, params)
