from .polynomials import Monomial, MissingRoleError, Polynomial, SymbolicPolynomial, Variable
from .kinds import KINDS, KindSpec, get_kind
from .protocol import (
    ConstructionError,
    ConstructionProtocol,
    ConstructionStep,
    InvalidConstruction,
    OrderViolation,
    Point,
    PointState,
    make_step,
)
from .validate import build_protocol, validate_protocol
from .transform import PolynomialSystem, TransformError, Transformer
from .wu import EliminationLimitExceeded, TriangularSystem, reduce_statement, triangulate
from .ndg import NDGCondition, NDGDeriver, PositionChecker
from .area_method import AreaStatement, UnknownStatement
from .config import ProverConfig, get_prover_config, set_prover_config
from .prover import ProofResult, Verdict, prove, prove_entries

__all__ = [
    'Monomial',
    'MissingRoleError',
    'Polynomial',
    'SymbolicPolynomial',
    'Variable',
    'KINDS',
    'KindSpec',
    'get_kind',
    'ConstructionError',
    'ConstructionProtocol',
    'ConstructionStep',
    'InvalidConstruction',
    'OrderViolation',
    'Point',
    'PointState',
    'make_step',
    'build_protocol',
    'validate_protocol',
    'PolynomialSystem',
    'TransformError',
    'Transformer',
    'EliminationLimitExceeded',
    'TriangularSystem',
    'reduce_statement',
    'triangulate',
    'NDGCondition',
    'NDGDeriver',
    'PositionChecker',
    'AreaStatement',
    'UnknownStatement',
    'ProverConfig',
    'get_prover_config',
    'set_prover_config',
    'ProofResult',
    'Verdict',
    'prove',
    'prove_entries',
]
