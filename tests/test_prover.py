import pytest

from geoprover.area_method import AreaStatement, SignedArea
from geoprover.config import ProverConfig
from geoprover.protocol import ConstructionProtocol, make_step
from geoprover.prover import Verdict, prove, prove_entries


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

MIDPOINTS = TRIANGLE + [
    ('M', 'midpoint', {'a': 'A', 'b': 'B'}),
    ('N', 'midpoint', {'a': 'A', 'b': 'C'}),
]

MIDLINE_PARALLEL = ('parallel_lines', {'A': 'M', 'B': 'N', 'C': 'B', 'D': 'C'})


def test_midpoint_theorem():
    result = prove(protocol_with(MIDPOINTS, MIDLINE_PARALLEL))

    assert result.verdict is Verdict.HOLDS
    assert result.proved
    assert result.remainder.is_zero()
    assert result.ndg_conditions == []
    assert result.summary() == 'wu: holds'


def test_intersection_needs_non_parallel_lines():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('B', 'free_point', {}),
            ('C', 'free_point', {}),
            ('D', 'free_point', {}),
            ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
            ('m', 'line_through_two_points', {'a': 'C', 'b': 'D'}),
            ('P', 'intersection_point', {'first': 'l', 'second': 'm'}),
        ],
        ('collinear_points', {'A': 'P', 'B': 'C', 'C': 'D'}),
    )

    result = prove(protocol)

    assert result.verdict is Verdict.HOLDS_UNDER_NDG
    explanations = [condition.best_explanation for condition in result.ndg_conditions]
    assert 'Lines AB and CD are not parallel.' in explanations
    assert 'provided that Lines AB and CD are not parallel.' in result.summary()


def test_circumcenter_is_equidistant():
    protocol = protocol_with(
        TRIANGLE + [('O', 'circle_center', {'a': 'A', 'b': 'B', 'c': 'C'})],
        ('congruent_segments', {'A': 'O', 'B': 'A', 'C': 'O', 'D': 'B'}),
    )

    result = prove(protocol)

    assert result.proved
    assert any(
        condition.best_explanation == 'Points A, B and C are not collinear.' for condition in result.ndg_conditions
    )


def test_false_theorem_reports_counterexample():
    protocol = protocol_with(
        TRIANGLE + [('M', 'midpoint', {'a': 'A', 'b': 'B'})],
        ('collinear_points', {'A': 'M', 'B': 'A', 'C': 'C'}),
    )

    result = prove(protocol)

    assert result.verdict is Verdict.DOES_NOT_HOLD
    assert not result.proved
    assert result.remainder.leading_variable() is None
    assert result.remainder.evaluate(result.counterexample) != 0


def test_methods_agree_on_midpoint_theorem():
    wu = prove(protocol_with(MIDPOINTS, MIDLINE_PARALLEL), 'wu')
    area = prove(protocol_with(MIDPOINTS, MIDLINE_PARALLEL), 'area')

    assert wu.verdict is area.verdict is Verdict.HOLDS


def test_protocol_without_statement_is_inconclusive():
    result = prove(protocol_with(TRIANGLE))

    assert result.verdict is Verdict.INCONCLUSIVE


def test_term_limit_makes_proof_inconclusive():
    result = prove(protocol_with(MIDPOINTS, MIDLINE_PARALLEL), config=ProverConfig(max_terms=1))

    assert result.verdict is Verdict.INCONCLUSIVE
    assert 'limit 1' in result.notes[0]


def test_prove_entries_reports_order_violations():
    result = prove_entries(
        [
            ('A', 'free_point', {}),
            ('M', 'midpoint', {'a': 'A', 'b': 'B'}),
            ('B', 'free_point', {}),
        ],
        ('collinear_points', {'A': 'A', 'B': 'B', 'C': 'M'}),
    )

    assert result.verdict is Verdict.INCONCLUSIVE
    assert len(result.diagnostics) == 2
    assert result.diagnostics[0].startswith('[M midpoint]')


def test_prove_entries_proves_valid_protocol():
    result = prove_entries(MIDPOINTS, MIDLINE_PARALLEL, method='area')

    assert result.verdict is Verdict.HOLDS


def test_unknown_method_and_misplaced_statement():
    protocol = protocol_with(MIDPOINTS, MIDLINE_PARALLEL)

    with pytest.raises(ValueError):
        prove(protocol, 'gröbner')
    with pytest.raises(ValueError):
        prove(protocol, 'wu', statement=AreaStatement(SignedArea('A', 'B', 'C')))


def test_aligned_base_points_keep_intersection_consistent():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('B', 'free_point', {}),
            ('C', 'free_point', {}),
            ('D', 'free_point', {}),
            ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
            ('m', 'line_through_two_points', {'a': 'C', 'b': 'D'}),
            ('Y', 'intersection_point', {'first': 'm', 'second': 'l'}),
        ],
        ('collinear_points', {'A': 'Y', 'B': 'C', 'C': 'D'}),
    )

    result = prove(protocol, config=ProverConfig(align_base_points=True))

    assert result.verdict is Verdict.HOLDS_UNDER_NDG


def test_reflection_preserves_distance_to_mirror_point():
    protocol = protocol_with(
        TRIANGLE[:2] + [
            ('P', 'free_point', {}),
            ('R', 'reflected_point', {'point': 'P', 'a': 'A', 'b': 'B'}),
        ],
        ('congruent_segments', {'A': 'A', 'B': 'P', 'C': 'A', 'D': 'R'}),
    )

    assert prove(protocol).proved


def test_quarter_turn_gives_perpendicular_rays():
    protocol = protocol_with(
        [
            ('O', 'free_point', {}),
            ('P', 'free_point', {}),
            ('R', 'rotated_point_90', {'point': 'P', 'center': 'O'}),
        ],
        ('perpendicular_lines', {'A': 'O', 'B': 'P', 'C': 'O', 'D': 'R'}),
    )

    result = prove(protocol)

    assert result.verdict is Verdict.HOLDS
    assert result.ndg_conditions == []


def test_central_symmetry_keeps_distance_to_center():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('O', 'free_point', {}),
            ('S', 'centrally_symmetric_point', {'point': 'A', 'center': 'O'}),
        ],
        ('congruent_segments', {'A': 'O', 'B': 'A', 'C': 'O', 'D': 'S'}),
    )

    assert prove(protocol).verdict is Verdict.HOLDS


def test_copied_angle_ray_lies_on_second_arm():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('O', 'free_point', {}),
            ('B', 'free_point', {}),
            ('r', 'angle_ray', {'a': 'A', 'vertex': 'O', 'a1': 'A', 'o1': 'O', 'b1': 'B'}),
            ('P', 'random_point_on_line', {'line': 'r'}),
        ],
        ('collinear_points', {'A': 'P', 'B': 'O', 'C': 'B'}),
    )

    assert prove(protocol).proved


def test_points_on_sixty_degree_ray_are_collinear_with_vertex():
    protocol = protocol_with(
        [
            ('A', 'free_point', {}),
            ('O', 'free_point', {}),
            ('T', 'angle_of_60_deg', {}),
            (
                'r',
                'angle_ray_to_60',
                {
                    'a': 'A', 'vertex': 'O',
                    'a1': 'A', 'o1': 'O', 'b1': 'A',
                    'a2': 'A', 'o2': 'O', 'b2': 'A',
                    'angle': 'T',
                },
            ),
            ('P', 'random_point_on_line', {'line': 'r'}),
            ('Q', 'random_point_on_line', {'line': 'r'}),
        ],
        ('collinear_points', {'A': 'O', 'B': 'P', 'C': 'Q'}),
    )

    assert prove(protocol).proved


def test_perpendicular_line_meets_base_line_at_right_angle():
    protocol = protocol_with(
        TRIANGLE[:2] + [
            ('P', 'free_point', {}),
            ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
            ('p', 'perpendicular_line', {'point': 'P', 'line': 'l'}),
            ('F', 'intersection_point', {'first': 'p', 'second': 'l'}),
        ],
        ('perpendicular_lines', {'A': 'P', 'B': 'F', 'C': 'A', 'D': 'B'}),
    )

    assert prove(protocol).proved


def test_point_on_circumscribed_circle_is_concyclic():
    protocol = protocol_with(
        TRIANGLE + [
            ('c', 'circumscribed_circle', {'a': 'A', 'b': 'B', 'c': 'C'}),
            ('P', 'random_point_on_circle', {'circle': 'c'}),
        ],
        ('concyclic_points', {'A': 'P', 'B': 'A', 'C': 'B', 'D': 'C'}),
    )

    result = prove(protocol)

    assert result.proved
    assert any(
        condition.best_explanation == 'Points A, B and C are not collinear.' for condition in result.ndg_conditions
    )
