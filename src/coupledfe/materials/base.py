"""
Material Evaluator Base
=======================

Shared contract for material evaluators.

A material converts its positional input parameters into a validated
parameter dataclass once (``setup``), then produces a frozen MaterialBag per
Gauss point from the current kinematics and the previous converged bag.
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, MISSING
from typing import Dict, Sequence, Tuple

from ..core.errors import ConfigurationError, ComputationError
from ..core.material_bag import MaterialBag
from ..core.state import ElementInfo, ElementSolution
from ..tensors import RankTwoTensor, RankFourTensor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElasticParams:
    """
    Isotropic linear elastic parameters.

    Attributes:
        E: Young's modulus
        nu: Poisson's ratio
    """
    E: float
    nu: float

    def __post_init__(self):
        if self.E <= 0:
            raise ConfigurationError(f"Young's modulus must be positive, got {self.E}")
        if not -1 < self.nu < 0.5:
            raise ConfigurationError(f"Poisson's ratio must be in (-1, 0.5), got {self.nu}")

    @property
    def lame_lambda(self) -> float:
        """λ = E·ν / ((1+ν)(1-2ν))"""
        return self.E * self.nu / ((1 + self.nu) * (1 - 2 * self.nu))

    @property
    def lame_mu(self) -> float:
        """μ = E / (2(1+ν))"""
        return self.E / (2 * (1 + self.nu))

    @property
    def bulk_modulus(self) -> float:
        """K = E / (3(1-2ν))"""
        return self.E / (3 * (1 - 2 * self.nu))

    def elasticity_tensor(self) -> RankFourTensor:
        return RankFourTensor.isotropic(self.lame_lambda, self.lame_mu)


def config_error(kind: str, message: str):
    """Log ``message`` for the material ``kind`` and raise ConfigurationError."""
    logger.error("%s: %s", kind, message)
    raise ConfigurationError(f"{kind}: {message}")


def unpack_params(param_class, params: Sequence[float], kind: str):
    """
    Map an ordered parameter sequence onto a parameter dataclass.

    Trailing fields with defaults are optional. Wrong counts, non-finite
    values and values rejected by the dataclass are reported as
    ConfigurationError naming the material kind.
    """
    all_fields = fields(param_class)
    n_required = sum(1 for f in all_fields
                     if f.default is MISSING and f.default_factory is MISSING)
    n_max = len(all_fields)
    params = list(params)
    if not n_required <= len(params) <= n_max:
        names = [f.name for f in all_fields]
        config_error(kind, f"expects {n_required}..{n_max} parameters {names}, "
                           f"got {len(params)}")
    values = {}
    for f, value in zip(all_fields, params):
        value = float(value)
        if not np.isfinite(value):
            config_error(kind, f"parameter '{f.name}' must be finite, got {value}")
        if f.type in (int, 'int'):
            if value != int(value):
                config_error(kind, f"parameter '{f.name}' must be an integer flag, got {value}")
            value = int(value)
        values[f.name] = value
    try:
        return param_class(**values)
    except ConfigurationError as exc:
        logger.error("%s: %s", kind, exc)
        raise ConfigurationError(f"{kind}: {exc}") from exc


def displacement_gradient(soln: ElementSolution, first: int, n_dim: int) -> RankTwoTensor:
    """
    Build ∇u from the gradients of the displacement fields.

    Args:
        soln: Gauss-point solution
        first: 1-based index of the x-displacement field
        n_dim: number of displacement components

    Returns:
        ∇u with (∇u)_ij = ∂u_i/∂x_j, rows beyond n_dim are zero
    """
    return RankTwoTensor.from_rows(*[soln.grad_u(first + i) for i in range(n_dim)])


class MaterialBase(ABC):
    """
    Base class for material evaluators.

    Subclasses set:
        kind: name used in diagnostics and in the factory
        param_class: parameter dataclass
        provides: slot name -> tuple of keys written into every bag
    """

    kind: str = "material"
    param_class = None
    provides: Dict[str, Tuple[str, ...]] = {}

    def setup(self, params: Sequence[float]):
        """Validate the positional parameters once, before any Gauss-point loop."""
        return unpack_params(self.param_class, params, self.kind)

    def _config_error(self, message: str):
        config_error(self.kind, message)

    def _check_params(self, params):
        if not isinstance(params, self.param_class):
            self._config_error(
                f"expected {self.param_class.__name__} from setup(), "
                f"got {type(params).__name__}")

    def init_material_properties(self, params, elmt_info: ElementInfo,
                                 soln: ElementSolution) -> MaterialBag:
        """
        Initial bag at the first evaluation of a Gauss point.

        Every provided key exists, zero unless the material sets it.
        """
        self._check_params(params)
        bag = MaterialBag()
        for key in self.provides.get('scalar', ()):
            bag.set_scalar(key, 0.0)
        for key in self.provides.get('vector', ()):
            bag.set_vector(key, np.zeros(3))
        for key in self.provides.get('rank2', ()):
            bag.set_rank2(key, RankTwoTensor.zeros())
        for key in self.provides.get('rank4', ()):
            bag.set_rank4(key, RankFourTensor.zeros())
        self._init(params, elmt_info, soln, bag)
        return self._finalize(bag, elmt_info)

    def compute_material_properties(self, params, elmt_info: ElementInfo,
                                    soln: ElementSolution,
                                    mate_old: MaterialBag) -> MaterialBag:
        """
        Current-step bag, a pure function of the kinematics and the old bag.
        """
        self._check_params(params)
        bag = MaterialBag()
        self._compute(params, elmt_info, soln, mate_old, bag)
        return self._finalize(bag, elmt_info)

    def _init(self, params, elmt_info, soln, bag):
        pass

    @abstractmethod
    def _compute(self, params, elmt_info: ElementInfo, soln: ElementSolution,
                 mate_old: MaterialBag, bag: MaterialBag) -> None:
        """Fill ``bag`` with the current-step properties."""

    def _finalize(self, bag: MaterialBag, elmt_info: ElementInfo) -> MaterialBag:
        bag.require(self.provides)
        for key, value in bag.scalars.items():
            if not np.isfinite(value):
                self._fail(f"non-finite value {value}", key, elmt_info)
        for store in (bag.vectors, bag.rank2, bag.rank4):
            for key, value in store.items():
                arr = value if isinstance(value, np.ndarray) else value.array
                if not np.all(np.isfinite(arr)):
                    self._fail("non-finite component", key, elmt_info)
        return bag.freeze()

    def _fail(self, message: str, key: str, elmt_info: ElementInfo):
        logger.error("%s: %s at '%s' (element %s, gauss point %s)",
                     self.kind, message, key, elmt_info.elmt_id, elmt_info.gp_id)
        raise ComputationError(f"{self.kind}: {message}", key,
                               elmt_info.elmt_id, elmt_info.gp_id)

