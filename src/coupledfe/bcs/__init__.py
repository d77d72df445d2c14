"""
Boundary Conditions Module
==========================

Flux-type boundary integrators.
"""

from .base import BoundaryBase
from .flux import FluxBC, ConvectiveFluxBC
from .registry import BCKind, create_bc

__all__ = ["BoundaryBase", "FluxBC", "ConvectiveFluxBC", "BCKind", "create_bc"]
