"""Random integer assignments that keep a nonzero remainder away from zero."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import numpy as np

from .polynomials import Polynomial, Variable

logger = logging.getLogger(__name__)


def find_counterexample(
    polynomial: Polynomial,
    *,
    seed: Optional[int] = 123,
    attempts: int = 20,
    bound: int = 10,
) -> Optional[Dict[Variable, int]]:
    """Search parameter values at which ``polynomial`` does not vanish.

    Only polynomials over free variables are considered; the draws come from
    numpy's seeded generator so a reported witness is reproducible.
    """

    variables = sorted(polynomial.variables(), key=lambda v: v.sort_key())
    if polynomial.is_zero() or not all(isinstance(v, Variable) and v.is_free for v in variables):
        return None
    rng = np.random.default_rng(seed)
    for attempt in range(attempts):
        draw = rng.integers(-bound, bound + 1, size=len(variables))
        assignment = {variable: int(value) for variable, value in zip(variables, draw)}
        if polynomial.evaluate(assignment) != 0:
            logger.debug("Counterexample found after %d draw(s)", attempt + 1)
            return assignment
    logger.info("No counterexample within %d draws", attempts)
    return None
