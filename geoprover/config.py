"""Configuration helpers for the provers."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class ProverConfig:
    """Limits and switches shared by both proving methods."""

    max_terms: int = 20000
    max_simplify_steps: int = 500
    max_ndg_points: int = 8
    use_best_instantiation: bool = True
    align_base_points: bool = False
    counterexample_seed: int = 123
    counterexample_attempts: int = 20


_PROVER_CONFIG = ProverConfig()


def get_prover_config() -> ProverConfig:
    return copy.deepcopy(_PROVER_CONFIG)


def set_prover_config(config: ProverConfig) -> None:
    global _PROVER_CONFIG
    _PROVER_CONFIG = copy.deepcopy(config)
