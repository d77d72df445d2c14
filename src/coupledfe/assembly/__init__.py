"""
Assembly Module
===============

Reference single-element driver, shape functions, quadrature and Jacobian
verification. Global assembly and solvers live outside this package.
"""

from .shape_functions import LinearSimplex, LineFacet
from .quadrature import simplex_rule, line_rule
from .element_assembler import (
    AssemblerConfig,
    ElementResult,
    ElementAssembler,
    FacetAssembler,
)
from .verification import finite_difference_jacobian, verify_jacobian_consistency

__all__ = [
    "LinearSimplex",
    "LineFacet",
    "simplex_rule",
    "line_rule",
    "AssemblerConfig",
    "ElementResult",
    "ElementAssembler",
    "FacetAssembler",
    "finite_difference_jacobian",
    "verify_jacobian_consistency",
]
