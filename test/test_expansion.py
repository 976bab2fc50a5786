import pytest

import symopl.mat as mat
from test_util import *


def build_state() -> mat.State:
    state = mat.State()
    state.add_domain(mat.IndexSet("I", 1, 2))
    state.add_domain(mat.IndexSet("J", 1, 2))
    state.add_domain(mat.IndexSet("One", 1, 1))
    state.add_domain(mat.PrimitiveSet("Names", mat.STRING_TYPE, ["b", "a"]))
    return state


def build_inequality_node(lhs_symbol: str, rhs_symbol: str) -> mat.ExpressionNode:
    return mat.RelationalOperationNode(
        mat.INEQUALITY_OPERATOR, mat.ParameterNode(lhs_symbol), mat.ParameterNode(rhs_symbol)
    )


# Tests
# ----------------------------------------------------------------------------------------------------------------------


def test_enumeration_order():

    state = build_state()
    iterators = [mat.Iterator("i", "I"), mat.Iterator("n", "Names"), mat.Iterator("j", "J")]

    combinations = mat.collect_bindings(state, mat.Environment(), iterators)

    assert combinations == [
        (1, "b", 1),
        (1, "b", 2),
        (1, "a", 1),
        (1, "a", 2),
        (2, "b", 1),
        (2, "b", 2),
        (2, "a", 1),
        (2, "a", 2),
    ]


def test_iterator_filter():

    state = build_state()
    iterators = [mat.Iterator("i", "I"), mat.Iterator("j", "J", filter_node=build_inequality_node("i", "j"))]

    assert mat.collect_bindings(state, mat.Environment(), iterators) == [(1, 2), (2, 1)]


def test_global_condition():

    state = build_state()
    iterators = [mat.Iterator("i", "I"), mat.Iterator("j", "J")]
    condition_node = mat.LogicalOperationNode(mat.NEGATION_OPERATOR, [build_inequality_node("i", "j")])

    assert mat.collect_bindings(state, mat.Environment(), iterators, condition_node) == [(1, 1), (2, 2)]


def test_inner_domain_depends_on_outer_binding():

    state = build_state()
    iterators = [
        mat.Iterator("i", "I"),
        mat.Iterator("j", domain=mat.BoundRange(None, mat.NumericNode(1), mat.ParameterNode("i"))),
    ]

    assert mat.collect_bindings(state, mat.Environment(), iterators) == [(1, 1), (2, 1), (2, 2)]


def test_bindings_released_after_success():

    state = build_state()
    env = mat.Environment()
    iterators = [mat.Iterator("i", "I"), mat.Iterator("j", "J")]

    depths = []

    with env.bind("k", 5):
        mat.enumerate_bindings(state, env, iterators, lambda e: depths.append(e.get_depth()))
        assert env.get_bindings() == [("k", 5)]

    assert depths == [3, 3, 3, 3]
    assert env.get_depth() == 0


def test_bindings_released_after_callback_error():

    state = build_state()
    env = mat.Environment()
    iterators = [mat.Iterator("i", "I"), mat.Iterator("j", "J")]

    def callback(e: mat.Environment):
        if e.get("i") == 2:
            raise ValueError("callback failure")

    with pytest.raises(ValueError):
        mat.enumerate_bindings(state, env, iterators, callback)

    assert env.get_depth() == 0


def test_bindings_released_after_filter_error():

    state = build_state()
    env = mat.Environment()
    iterators = [mat.Iterator("i", "I", filter_node=build_inequality_node("i", "unknown"))]

    with pytest.raises(mat.UnboundNameError):
        mat.collect_bindings(state, env, iterators)

    assert env.get_depth() == 0


def test_unknown_domain():

    state = build_state()
    env = mat.Environment()
    iterators = [mat.Iterator("i", "I"), mat.Iterator("j", "Unknown")]

    with pytest.raises(mat.DomainNotFoundError):
        mat.collect_bindings(state, env, iterators)

    assert env.get_depth() == 0


def test_nesting_depth_limit():

    state = build_state()

    iterators = [mat.Iterator("i{0}".format(k), "One") for k in range(mat.MAX_ITERATOR_DEPTH)]
    assert mat.collect_bindings(state, mat.Environment(), iterators) == [tuple([1] * mat.MAX_ITERATOR_DEPTH)]

    iterators.append(mat.Iterator("overflow", "One"))
    with pytest.raises(mat.ExpansionDepthError):
        mat.collect_bindings(state, mat.Environment(), iterators)

    # enclosing bindings count towards the depth
    env = mat.Environment()
    with env.bind("outer", 1):
        with pytest.raises(mat.ExpansionDepthError):
            mat.collect_bindings(state, env, iterators[:-1])
    assert env.get_depth() == 0


def test_environment_shadowing():

    env = mat.Environment()

    with env.bind("i", 1):
        with env.bind("i", 2):
            assert env.get("i") == 2
        assert env.get("i") == 1

    assert not env.is_bound("i")
    with pytest.raises(mat.UnboundNameError):
        env.get("i")


def test_decision_expression_stack():

    env = mat.Environment()
    spawned_env = env.spawn()

    with env.enter_dexpr("a"):
        with spawned_env.enter_dexpr("b"):
            with pytest.raises(mat.CyclicDecisionExpressionError):
                with env.enter_dexpr("a"):
                    pass

    assert env.active_dexprs == []
