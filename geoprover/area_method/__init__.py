from .expressions import (
    AMExpression,
    AdditiveInverse,
    BasicNumber,
    Difference,
    Fraction,
    PointElimination,
    Product,
    PythagorasDifference,
    SegmentRatio,
    SignedArea,
    Sum,
    SumOfProducts,
    UnknownStatement,
    eliminate,
    reduce_to_right_associative_form,
    reduce_to_single_fraction,
    simplify,
    simplify_in_one_step,
    to_sum_of_products,
)
from .elimination import AffineDefinition, AreaMethodContext, TRatioDefinition
from .prover import AreaMethodProver, AreaProof, AreaStatement, statement_expression

__all__ = [
    'AMExpression',
    'AdditiveInverse',
    'BasicNumber',
    'Difference',
    'Fraction',
    'PointElimination',
    'Product',
    'PythagorasDifference',
    'SegmentRatio',
    'SignedArea',
    'Sum',
    'SumOfProducts',
    'UnknownStatement',
    'eliminate',
    'reduce_to_right_associative_form',
    'reduce_to_single_fraction',
    'simplify',
    'simplify_in_one_step',
    'to_sum_of_products',
    'AffineDefinition',
    'AreaMethodContext',
    'TRatioDefinition',
    'AreaMethodProver',
    'AreaProof',
    'AreaStatement',
    'statement_expression',
]
