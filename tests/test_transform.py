import pytest

from geoprover import conditions as cond
from geoprover.kinds import Condition
from geoprover.polynomials import Variable, var
from geoprover.protocol import ConstructionProtocol, PointState, make_step
from geoprover.transform import TransformError, Transformer

u1, u2, u3, u4, u5, u6 = (var(Variable('u', i)) for i in range(1, 7))
x1, x2 = (var(Variable('x', i)) for i in range(1, 3))


def protocol_with(*entries):
    protocol = ConstructionProtocol()
    for label, kind, data in entries:
        protocol.append(make_step(label, kind, data))
    return protocol


def midpoint_protocol():
    return protocol_with(
        ('A', 'free_point', {}),
        ('B', 'free_point', {}),
        ('M', 'midpoint', {'a': 'A', 'b': 'B'}),
    )


def line_protocol(extra=()):
    return protocol_with(
        ('A', 'free_point', {}),
        ('B', 'free_point', {}),
        ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
        ('D', 'random_point_on_line', {'line': 'l'}),
        ('E', 'random_point_on_line', {'line': 'l'}),
        *extra,
    )


def snapshot(protocol, transformer, label):
    point = protocol.get(label)
    return (
        point.x,
        point.y,
        point.state,
        protocol.u_index,
        protocol.x_index,
        list(transformer.system.entries),
        list(transformer.rename_conditions),
    )


def test_midpoint_polynomials():
    protocol = midpoint_protocol()
    transformer = Transformer(protocol)

    system = transformer.transform_all()

    assert protocol.get('A').coordinates == (Variable('u', 1), Variable('u', 2))
    assert protocol.get('B').coordinates == (Variable('u', 3), Variable('u', 4))
    assert system.polynomials() == [x1 * 2 - u1 - u3, x2 * 2 - u2 - u4]
    assert [source for _, source in system] == ['M', 'M']
    assert protocol.get('M').state is PointState.MODIFIED


def test_transform_is_deterministic():
    first = Transformer(line_protocol()).transform_all().polynomials()
    second = Transformer(line_protocol()).transform_all().polynomials()

    assert first == second
    assert all(p.structural_match(q) for p, q in zip(first, second))


def test_missing_generator_coordinates_raise_without_side_effects():
    protocol = midpoint_protocol()
    transformer = Transformer(protocol)
    transformer.transform(protocol.get('A'))

    with pytest.raises(TransformError) as exc:
        transformer.transform(protocol.get('M'))

    assert exc.value.generator == 'B'
    assert protocol.get('M').x is None
    assert protocol.u_index == 3
    assert protocol.x_index == 1
    assert len(transformer.system) == 0


def test_statement_polynomials_use_point_coordinates():
    protocol = midpoint_protocol()
    protocol.set_statement(make_step('s', 'collinear_points', {'A': 'A', 'B': 'B', 'C': 'M'}))
    transformer = Transformer(protocol)
    transformer.transform_all()

    (statement,) = transformer.statement_polynomials()

    assert statement == (u3 - u1) * (x2 - u2) - (u4 - u2) * (x1 - u1)


def test_aligned_base_points_rename_point_on_base_line():
    protocol = protocol_with(
        ('A', 'free_point', {}),
        ('B', 'free_point', {}),
        ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
        ('C', 'random_point_on_line', {'line': 'l'}),
    )
    transformer = Transformer(protocol, align_base_points=True)

    system = transformer.transform_all()

    c = protocol.get('C')
    assert protocol.get('B').y == protocol.get('A').y == Variable('u', 2)
    assert c.coordinates == (Variable('u', 4), Variable('u', 2))
    assert c.state is PointState.RENAMED
    assert len(system) == 0
    assert transformer.rename_conditions == [(u3 - u1, 'C')]


def test_translation_by_null_vector_renames_both_coordinates():
    protocol = protocol_with(
        ('A', 'free_point', {}),
        ('P', 'free_point', {}),
        ('T', 'translated_point', {'point': 'P', 'a': 'A', 'b': 'A'}),
    )
    transformer = Transformer(protocol)

    transformer.transform_all()

    assert protocol.get('T').coordinates == protocol.get('P').coordinates
    assert protocol.get('T').state is PointState.RENAMED
    assert len(transformer.system) == 0
    assert transformer.rename_conditions == []


def _transform_all_but_last(protocol, transformer):
    for step in protocol.steps[:-1]:
        transformer.transform(step)


def test_find_best_instantiation_without_renaming_leaves_state_untouched():
    protocol = line_protocol()
    transformer = Transformer(protocol)
    _transform_all_but_last(protocol, transformer)
    e = protocol.get('E')
    options = transformer.alternatives(e)
    before = snapshot(protocol, transformer, 'E')

    assert len(options) == 3
    assert transformer.find_best_instantiation(e, options) is None
    assert snapshot(protocol, transformer, 'E') == before


def test_find_best_instantiation_picks_first_renaming_candidate():
    protocol = line_protocol()
    transformer = Transformer(protocol)
    _transform_all_but_last(protocol, transformer)
    e = protocol.get('E')
    plain = [Condition(cond.collinear('0', 'A', 'B'), {'0': 'E', 'A': 'A', 'B': 'B'})]
    renaming = [Condition(cond.translation()[1], {'0': 'E', 'P': 'D', 'A': 'B', 'B': 'B'})]
    before = snapshot(protocol, transformer, 'E')

    assert transformer.find_best_instantiation(e, [plain, renaming, plain]) == 1
    assert snapshot(protocol, transformer, 'E') == before

    transformer.transform(e, renaming)
    assert e.y == protocol.get('D').y
    assert e.state is PointState.RENAMED


def test_find_best_instantiation_skips_candidates_with_untransformed_generators():
    protocol = line_protocol(extra=(('F', 'free_point', {}),))
    transformer = Transformer(protocol)
    for step in protocol.steps[:4]:
        transformer.transform(step)
    e = protocol.get('E')
    uses_f = [Condition(cond.collinear('0', 'A', 'B'), {'0': 'E', 'A': 'A', 'B': 'F'})]
    before = snapshot(protocol, transformer, 'E')

    assert transformer.find_best_instantiation(e, [uses_f]) is None
    assert snapshot(protocol, transformer, 'E') == before


def test_transform_all_commits_best_candidate():
    protocol = line_protocol()
    transformer = Transformer(protocol, align_base_points=True)

    transformer.transform_all()

    for label in ('D', 'E'):
        point = protocol.get(label)
        assert point.y == Variable('u', 2)
        assert point.state is PointState.RENAMED
    assert len(transformer.system) == 0


def test_rename_in_later_condition_rewrites_earlier_polynomials():
    protocol = protocol_with(
        ('A', 'free_point', {}),
        ('B', 'free_point', {}),
        ('C', 'free_point', {}),
        ('D', 'free_point', {}),
        ('l', 'line_through_two_points', {'a': 'A', 'b': 'B'}),
        ('m', 'line_through_two_points', {'a': 'C', 'b': 'D'}),
        ('Y', 'intersection_point', {'first': 'm', 'second': 'l'}),
    )
    transformer = Transformer(protocol, align_base_points=True)
    u7 = var(Variable('u', 7))

    system = transformer.transform_all()

    y = protocol.get('Y')
    assert y.coordinates == (Variable('x', 1), Variable('u', 2))
    assert y.state is PointState.RENAMED
    assert system.polynomials() == [(u4 - x1) * (u7 - u2) - (u5 - u2) * (u6 - x1)]
    assert all(Variable('x', 2) not in p.variables() for p in system.polynomials())
    assert transformer.rename_conditions == [(u3 - u1, 'Y')]


def test_only_points_are_transformed():
    protocol = line_protocol()
    protocol.set_statement(make_step('s', 'collinear_points', {'A': 'A', 'B': 'B', 'C': 'D'}))
    transformer = Transformer(protocol)

    assert transformer.transform(protocol.get('l')) == []
    with pytest.raises(TransformError) as exc:
        transformer.transform(protocol.statement)

    assert exc.value.label == 's'
    assert len(transformer.system) == 0
