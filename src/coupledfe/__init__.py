"""
Coupled Finite-Element Kernel
=============================

Gauss-point residual, Jacobian and projection kernels for coupled nonlinear
multi-field problems (phase-field fracture, mechanics + Cahn-Hilliard).

Modules:
    core: Gauss-point state, material bag, local buffers, errors
    tensors: Rank-2 and rank-4 tensor values
    materials: Material evaluators
    elements: Element kernels
    bcs: Boundary integrators
    assembly: Reference single-element driver and Jacobian verification
"""

from . import core
from . import tensors
from . import materials
from . import elements
from . import bcs
from . import assembly

__version__ = "0.1.0"
__all__ = ["core", "tensors", "materials", "elements", "bcs", "assembly"]
