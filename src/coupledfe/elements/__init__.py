"""
Elements Module
===============

Element kernels for residual, Jacobian and projection at a Gauss point.
"""

from .base import ElementBase, check_pairing, reaction_forces
from .mechanics import MechanicsElement
from .miehe_fracture import MieheFractureElement
from .mechanics_cahn_hilliard import MechanicsCahnHilliardElement
from .registry import ElementKind, create_element

__all__ = [
    "ElementBase",
    "check_pairing",
    "reaction_forces",
    "MechanicsElement",
    "MieheFractureElement",
    "MechanicsCahnHilliardElement",
    "ElementKind",
    "create_element",
]
