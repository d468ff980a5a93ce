from fractions import Fraction

from geoprover.area_method import (
    AreaMethodProver,
    AreaStatement,
    BasicNumber,
    Product,
    PythagorasDifference,
    SignedArea,
    statement_expression,
)
from geoprover.protocol import ConstructionProtocol, make_step
from geoprover.prover import Verdict, prove


def protocol_with(entries, statement=None):
    protocol = ConstructionProtocol()
    for label, kind, data in entries:
        protocol.append(make_step(label, kind, data))
    if statement is not None:
        kind, data = statement
        protocol.set_statement(make_step('statement', kind, data))
    return protocol


TRIANGLE = [
    ('A', 'free_point', {}),
    ('B', 'free_point', {}),
    ('C', 'free_point', {}),
]

LINES = [
    ('A', 'free_point', {}),
    ('B', 'free_point', {}),
    ('C', 'free_point', {}),
    ('D', 'free_point', {}),
    ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
    ('m', 'line_through_two_points', {'a': 'C', 'b': 'D'}),
    ('P', 'intersection_point', {'first': 'l', 'second': 'm'}),
]


def test_midpoint_theorem_holds():
    protocol = protocol_with(
        TRIANGLE
        + [
            ('M', 'midpoint', {'a': 'A', 'b': 'B'}),
            ('N', 'midpoint', {'a': 'A', 'b': 'C'}),
        ],
        ('parallel_lines', {'A': 'M', 'B': 'N', 'C': 'B', 'D': 'C'}),
    )

    proof = AreaMethodProver(protocol).prove()

    assert proof.holds
    assert proof.normal_form.is_zero()
    assert [label for label, _ in proof.trace] == ['N', 'M']
    assert proof.ndg_polynomials == []
    assert prove(protocol, 'area').verdict is Verdict.HOLDS


def test_intersection_lies_on_its_lines_if_lines_are_not_parallel():
    protocol = protocol_with(LINES, ('collinear_points', {'A': 'P', 'B': 'A', 'C': 'B'}))

    result = prove(protocol, 'area')

    assert result.verdict is Verdict.HOLDS_UNDER_NDG
    assert [str(condition) for condition in result.ndg_conditions] == ['Lines AB and CD are not parallel.']


def test_foot_point_is_perpendicular_if_base_points_differ():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('B', 'free_point', {}),
            ('P', 'free_point', {}),
            ('F', 'foot_point', {'point': 'P', 'a': 'A', 'b': 'B'}),
        ],
        ('perpendicular_lines', {'A': 'P', 'B': 'F', 'C': 'A', 'D': 'B'}),
    )

    result = prove(protocol, 'area')

    assert result.verdict is Verdict.HOLDS_UNDER_NDG
    assert [str(condition) for condition in result.ndg_conditions] == ['Points A and B are not identical.']


def test_quarter_turn_is_eliminated_with_perpendicular_lemmas():
    protocol = protocol_with(
        [
            ('O', 'free_point', {}),
            ('P', 'free_point', {}),
            ('R', 'rotated_point_90', {'point': 'P', 'center': 'O'}),
        ],
        ('congruent_segments', {'A': 'O', 'B': 'P', 'C': 'O', 'D': 'R'}),
    )
    triangle_area = AreaStatement(
        SignedArea('O', 'P', 'R'),
        Product(BasicNumber(Fraction(1, 4)), PythagorasDifference('O', 'P', 'O')),
    )

    proof = AreaMethodProver(protocol).prove()

    assert proof.holds
    assert [label for label, _ in proof.trace] == ['R']
    assert proof.ndg_polynomials == []
    assert prove(protocol, 'area', statement=triangle_area).verdict is Verdict.HOLDS


def test_perpendicular_line_meets_base_line_at_right_angle():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('B', 'free_point', {}),
            ('P', 'free_point', {}),
            ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
            ('p', 'perpendicular_line', {'point': 'P', 'line': 'l'}),
            ('F', 'intersection_point', {'first': 'p', 'second': 'l'}),
        ],
        ('perpendicular_lines', {'A': 'P', 'B': 'F', 'C': 'A', 'D': 'B'}),
    )

    result = prove(protocol, 'area')

    assert result.verdict is Verdict.HOLDS_UNDER_NDG
    assert [str(condition) for condition in result.ndg_conditions] == ['Points A and B are not identical.']


def test_random_point_on_line_is_collinear():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('B', 'free_point', {}),
            ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
            ('C', 'random_point_on_line', {'line': 'l'}),
        ],
        ('collinear_points', {'A': 'A', 'B': 'B', 'C': 'C'}),
    )

    assert prove(protocol, 'area').verdict is Verdict.HOLDS


def test_ratio_parameter_becomes_a_free_variable():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('B', 'free_point', {}),
            ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
            ('C', 'random_point_on_line', {'line': 'l'}),
        ],
        ('congruent_segments', {'A': 'A', 'B': 'C', 'C': 'A', 'D': 'B'}),
    )

    result = prove(protocol, 'area')

    assert result.verdict is Verdict.DOES_NOT_HOLD
    assert result.remainder.leading_variable() is None


def test_explicit_area_statement():
    protocol = protocol_with(TRIANGLE + [('M', 'midpoint', {'a': 'A', 'b': 'B'})])
    statement = AreaStatement(
        SignedArea('M', 'A', 'C'),
        Product(BasicNumber(Fraction(1, 2)), SignedArea('A', 'C', 'B')),
    )

    assert prove(protocol, 'area', statement=statement).verdict is Verdict.HOLDS


def test_false_statement_has_counterexample():
    protocol = protocol_with(TRIANGLE, ('collinear_points', {'A': 'A', 'B': 'B', 'C': 'C'}))

    result = prove(protocol, 'area')

    assert result.verdict is Verdict.DOES_NOT_HOLD
    assert result.counterexample is not None
    assert result.remainder.evaluate(result.counterexample) != 0


def test_circle_constructions_are_inconclusive():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('B', 'free_point', {}),
            ('c', 'circle_with_center_and_point', {'center': 'A', 'through': 'B'}),
            ('P', 'random_point_on_circle', {'circle': 'c'}),
        ],
        ('congruent_segments', {'A': 'A', 'B': 'P', 'C': 'A', 'D': 'B'}),
    )

    result = prove(protocol, 'area')

    assert result.verdict is Verdict.INCONCLUSIVE
    assert 'random_point_on_circle' in result.notes[0]


def test_unsupported_statement_is_inconclusive():
    protocol = protocol_with(
        TRIANGLE + [('D', 'free_point', {})],
        ('concyclic_points', {'A': 'A', 'B': 'B', 'C': 'C', 'D': 'D'}),
    )

    result = prove(protocol, 'area')

    assert result.verdict is Verdict.INCONCLUSIVE
    assert 'concyclic_points' in result.notes[0]


def test_statement_expressions():
    step = make_step('s', 'collinear_points', {'A': 'A', 'B': 'B', 'C': 'C'})

    assert statement_expression(step) == SignedArea('A', 'B', 'C')
