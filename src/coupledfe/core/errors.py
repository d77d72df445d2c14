"""
Errors
======

Exception taxonomy for the kernel layer. Both kinds are fatal for the run:
the caller must discard any output buffer of a call that raised.
"""

import logging
from typing import Optional


class KernelError(Exception):
    """Base class for all kernel errors."""


class ConfigurationError(KernelError, ValueError):
    """
    Unsupported calculation mode, missing material/boundary keys,
    parameter-count or range mismatch, wrongly sized buffers.
    """


class ComputationError(KernelError, ArithmeticError):
    """
    Non-physical intermediate value inside a single evaluation.

    Attributes:
        key: name of the offending quantity (e.g. 'free_energy')
        elmt_id: owning element index
        gp_id: owning Gauss point index
    """

    def __init__(self, message: str, key: str,
                 elmt_id: Optional[int] = None, gp_id: Optional[int] = None):
        self.key = key
        self.elmt_id = elmt_id
        self.gp_id = gp_id
        super().__init__(f"[{key}] {message} (element={elmt_id}, gauss point={gp_id})")


def raise_logged(log: logging.Logger, message: str, error=ConfigurationError):
    """Log ``message`` at ERROR on ``log``, then raise ``error`` with it."""
    log.error(message)
    raise error(message)
