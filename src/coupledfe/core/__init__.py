"""
Core Module
===========

Gauss-point state, material bag, local buffers, calculation modes and errors.
"""

from .errors import KernelError, ConfigurationError, ComputationError, raise_logged
from .calc_type import CalcType
from .state import ElementInfo, ElementSolution, ShapeFunctionData, check_ctan, as_vector3
from .buffers import LocalResidual, LocalJacobian
from .material_bag import MaterialBag, missing_keys

__all__ = [
    "KernelError",
    "ConfigurationError",
    "ComputationError",
    "raise_logged",
    "CalcType",
    "ElementInfo",
    "ElementSolution",
    "ShapeFunctionData",
    "check_ctan",
    "as_vector3",
    "LocalResidual",
    "LocalJacobian",
    "MaterialBag",
    "missing_keys",
]
