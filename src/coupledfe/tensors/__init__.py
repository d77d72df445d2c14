"""
Tensors Module
==============

Rank-2 and rank-4 tensor values with 1-based component access.
"""

from .rank_two import RankTwoTensor
from .rank_four import RankFourTensor

__all__ = ["RankTwoTensor", "RankFourTensor"]
