import pytest

import symopl
import symopl.mat as mat
from symopl.parsing.oplparser import OPLParser
from symopl.parsing.sumexpander import SummationExpander
from test_util import *


# Scripts
# ----------------------------------------------------------------------------------------------------------------------

SCRIPT = """
range I = 1..3;
{string} Items = {"a", "b"};
float c[I] = [1, 2, 3];
float w[Items] = [4, 5];
dvar float+ x[I];
dvar float+ y[Items];

minimize cost: sum(i in I) c[i] * x[i] + sum(t in Items) w[t] * y[t] + 1;

subject to {
    total: sum(i in I) x[i] + sum(t in Items) y[t] >= 2;
    weighted: 3 * (sum(i in I) c[i] * x[i] - 1) <= 20;
    upper: sum(i in I: i >= 2) x[i] <= 5;
    forall(t in Items)
        cap[t]: y[t] <= w[t] + sum(i in I) x[i];
}
"""

DECLARATIONS = [
    "range I = 1..3",
    "range J = 1..2",
    "range N = -1..0",
    "range E = 1..0",
    "int n = 2",
    "range B = 1..n",
    '{string} Names = {"p", "q"}',
    "{int} Ext = ...",
    "tuple Arc { int from; int to; }",
    "{Arc} Arcs = {<1,2>}",
]


def build_expander() -> SummationExpander:
    parser = OPLParser()
    for literal in DECLARATIONS:
        parser.parse_statement(literal)
    return SummationExpander(parser.state)


# Tests
# ----------------------------------------------------------------------------------------------------------------------


def test_textual_and_symbolic_expansion_agree():

    textual_problem = build_problem(SCRIPT, textual_summation=True)
    symbolic_problem = build_problem(SCRIPT, textual_summation=False)

    assert len(textual_problem.equations) == len(symbolic_problem.equations) == 5

    for textual_eq, symbolic_eq in zip(textual_problem.equations, symbolic_problem.equations):
        assert textual_eq.get_full_identifier() == symbolic_eq.get_full_identifier()
        assert textual_eq.operator == symbolic_eq.operator
        assert check_coefficients(
            get_coefficient_values(textual_eq, textual_problem.state),
            get_coefficient_values(symbolic_eq, symbolic_problem.state),
        )
        assert check_num_result(
            get_constant_value(textual_eq, textual_problem.state),
            get_constant_value(symbolic_eq, symbolic_problem.state),
        )

    assert check_coefficients(
        get_coefficient_values(textual_problem.objective, textual_problem.state),
        get_coefficient_values(symbolic_problem.objective, symbolic_problem.state),
    )
    assert check_num_result(get_constant_value(textual_problem.objective, textual_problem.state), 1)

    eq = textual_problem.get_equation("weighted")
    assert check_coefficients(get_coefficient_values(eq, textual_problem.state), {"x1": 3, "x2": 6, "x3": 9})
    assert check_num_result(get_constant_value(eq, textual_problem.state), 23)


def test_expansion_agrees_after_loading_sets():

    script = """
    {int} S = ...;
    {int} T = {1, 2};
    dvar float x[S];
    dvar float y[T];
    c: sum(s in S) x[s] <= 1;
    e: sum(t in T) y[t] <= 1;
    """

    problems = [build_problem(script, textual_summation=t, can_build=False) for t in (True, False)]

    for problem in problems:
        symopl.load_data(problem, {"S": [1, 2, 3]})
        assert check_coefficients(
            get_coefficient_values(problem.get_equation("c"), problem.state),
            {"x1": 1, "x2": 1, "x3": 1},
        )

        # sets initialized in the model may already be written into expanded statements
        with pytest.raises(mat.DeclarationError):
            symopl.load_data(problem, {"T": [1, 2, 3]})

        assert check_coefficients(
            get_coefficient_values(problem.get_equation("e"), problem.state),
            {"y1": 1, "y2": 1},
        )


def test_summation_over_index_set():

    expander = build_expander()

    assert expander.expand_summations("sum(i in I) x[i] == 1") == "(x[1] + x[2] + x[3]) == 1"
    assert expander.expand_summations("sum(i in J) (xi[i] + i) <= 0") == "((xi[1] + 1) + (xi[2] + 2)) <= 0"
    assert expander.expand_summations("sum(i in N) i * z >= 0") == "((-1) * z + 0 * z) >= 0"
    assert expander.expand_summations("sum(i in E) x[i] <= 1") == "0 <= 1"


def test_summation_over_string_set():

    expander = build_expander()

    literal = expander.expand_summations('sum(t in Names) cost[t] * s.t')
    assert literal == '(cost["p"] * s.t + cost["q"] * s.t)'

    literal = expander.expand_summations('sum(t in Names) (v[t] + u["t"])')
    assert literal == '((v["p"] + u["t"]) + (v["q"] + u["t"]))'


def test_nested_summations():
    expander = build_expander()
    literal = expander.expand_summations("sum(i in J) sum(j in J) a[i][j] <= 1")
    assert literal == "((a[1][1] + a[1][2]) + (a[2][1] + a[2][2])) <= 1"


def test_summations_left_for_symbolic_expansion():

    expander = build_expander()

    literals = [
        "sum(a in Arcs) f[a] <= 1",
        "sum(e in Ext) x[e] <= 1",
        "sum(i in B) x[i] <= 1",
        "sum(i in I: i > 1) x[i] <= 1",
        "sum(i in I, j in J) x[i] <= 1",
    ]

    for literal in literals:
        assert expander.expand_summations(literal) == literal


def test_term_end():

    expander = build_expander()

    assert expander.find_term_end("x[i] + y", 0) == 5
    assert expander.find_term_end("-x[i] * 2 - 3", 0) == 10
    assert expander.find_term_end("2 * -x <= 3", 0) == 7
    assert expander.find_term_end("(a + b) * c, d", 0) == 11
    assert expander.find_term_end("1e-3 * x + 1", 0) == 9
    assert expander.find_term_end("a[i + 1] - b", 0) == 9
    assert expander.find_term_end("x)", 0) == 1
    assert expander.find_term_end("sum(i in I) x[i] + 1", 11) == 17


def test_coefficient_distribution():

    expander = build_expander()

    assert expander.distribute_coefficients("3 * (x + y - z) <= 4") == "3*x + 3*y - 3*z <= 4"
    assert expander.distribute_coefficients("z - 2 * (x - 1)") == "z - (2*x - 2*1)"
    assert expander.distribute_coefficients("1 * (x + y)") == "x + y"
    assert expander.distribute_coefficients("2 * (-x + y)") == "-2*x + 2*y"

    # coefficients that do not multiply a whole term are kept
    assert expander.distribute_coefficients("y * 2 * (x + 1)") == "y * 2 * (x + 1)"
    assert expander.distribute_coefficients("2 * (x + 1) * y") == "2 * (x + 1) * y"
    assert expander.distribute_coefficients("2 * (x <= 1)") == "2 * (x <= 1)"


def test_expansion_preserves_statement_semantics():

    parser = OPLParser(textual_summation=True)
    for literal in ["range I = 1..3", "float c[I] = [1, 2, 3]", "dvar float x[I]"]:
        parser.parse_statement(literal)

    statement = parser.parse_statement("lim: 2 * (sum(i in I) c[i] * x[i] + 1) <= 10")

    assert statement.literal.startswith("lim: 2*")
    assert isinstance(statement.lhs_node, mat.ArithmeticExpressionNode)
