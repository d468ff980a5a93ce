from geoprover import conditions as cond
from geoprover.ndg import (
    CollinearPointsChecker,
    IdenticalPointsChecker,
    NDGCondition,
    NDGDeriver,
    PerpendicularRaysChecker,
)
from geoprover.polynomials import Variable, var
from geoprover.protocol import ConstructionProtocol, make_step
from geoprover.transform import Transformer


def free_points(*labels):
    protocol = ConstructionProtocol()
    for label in labels:
        protocol.append(make_step(label, 'free_point'))
    Transformer(protocol).transform_all()
    return protocol


def concrete(template, protocol, **roles):
    return template.instantiate({role: protocol.get(label).coordinates for role, label in roles.items()})


def test_identical_points_explanation():
    protocol = free_points('A', 'B')
    polynomial = concrete(cond.identical_points('P', 'Q'), protocol, P='A', Q='B') * 3
    ndg = NDGCondition(polynomial)

    assert IdenticalPointsChecker(protocol).check_positions(ndg, protocol.points())
    assert ndg.explanations == {('A', 'B'): 'Points A and B are not identical.'}
    assert ndg.best_explanation == 'Points A and B are not identical.'


def test_checker_does_not_touch_the_real_protocol():
    protocol = free_points('A', 'B', 'C')
    coordinates = [p.coordinates for p in protocol.points()]
    counters = (protocol.u_index, protocol.x_index)
    ndg = NDGCondition(concrete(cond.collinear('P', 'Q', 'R'), protocol, P='C', Q='A', R='B'))

    assert CollinearPointsChecker(protocol).check_positions(ndg, protocol.points())
    assert [p.coordinates for p in protocol.points()] == coordinates
    assert (protocol.u_index, protocol.x_index) == counters
    assert len(protocol) == 3
    assert protocol.statement is None


def test_non_matching_hypothesis_leaves_condition_unchanged():
    protocol = free_points('A', 'B', 'C')
    ndg = NDGCondition(concrete(cond.collinear('P', 'Q', 'R'), protocol, P='A', Q='B', R='C'))

    assert not IdenticalPointsChecker(protocol).check_positions(ndg, protocol.points()[:2])
    assert not ndg.is_explained
    assert str(ndg).endswith('!= 0')


def test_trials_are_independent_of_order():
    protocol = free_points('A', 'B', 'C')
    checker = PerpendicularRaysChecker(protocol)
    ndg = NDGCondition(concrete(cond.perpendicular('P', 'Q', 'R', 'S'), protocol, P='B', Q='A', R='B', S='C'))
    other = NDGCondition(concrete(cond.collinear('P', 'Q', 'R'), protocol, P='A', Q='B', R='C'))

    assert not checker.check_positions(other, protocol.points())
    assert checker.check_positions(ndg, protocol.points())
    assert ndg.best_explanation == 'Lines BA and BC are not perpendicular.'


def test_deriver_explains_parallel_lines_and_skips_duplicates():
    protocol = free_points('A', 'B', 'C', 'D')
    parallel = concrete(cond.parallel('P', 'Q', 'R', 'S'), protocol, P='A', Q='B', R='C', S='D')

    conditions = NDGDeriver(protocol).explain_all([parallel, parallel * -2, parallel.constant(5)])

    assert len(conditions) == 1
    assert conditions[0].best_explanation == 'Lines AB and CD are not parallel.'


def test_deriver_keeps_unexplained_conditions():
    protocol = free_points('A', 'B')
    u1, u3 = var(Variable('u', 1)), var(Variable('u', 3))

    (ndg,) = NDGDeriver(protocol).explain_all([u3 - u1])

    assert not ndg.is_explained
    assert ndg.polynomial == u3 - u1


def test_deriver_respects_point_limit():
    protocol = free_points('A', 'B', 'C', 'D')
    parallel = concrete(cond.parallel('P', 'Q', 'R', 'S'), protocol, P='A', Q='B', R='C', S='D')

    assert not NDGDeriver(protocol, max_points=3).explain(NDGCondition(parallel))
