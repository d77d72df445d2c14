"""Calculation modes understood by element kernels and boundary integrators."""

from enum import Enum


class CalcType(Enum):
    RESIDUAL = "residual"
    JACOBIAN = "jacobian"
    PROJECTION = "projection"
