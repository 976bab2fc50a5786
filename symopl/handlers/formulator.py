from typing import List, Optional, Tuple

import symopl.mat as mat
import symopl.prob.statement as stm


# Simplification
# ----------------------------------------------------------------------------------------------------------------------


def simplify(node: mat.ExpressionNode, state: mat.State = None) -> mat.ExpressionNode:
    """
    Build a simplified copy of an expression tree. The transformation is applied children-first and is idempotent.

    Binary operations between constants are folded, and the neutral-element rules 0+x, x+0, x-0, 0*x, x*0, 1*x and
    x*1 are applied. When a state is supplied, references to scalar parameters that hold a value, and to indexed
    parameters that hold a value at a constant index, are replaced by that value. The state must only be supplied for
    trees in which every iterator has already been substituted.

    :param node: root node of the expression
    :param state: optional registry used to fold parameter references
    :return: root node of the simplified expression
    """

    # literals
    if isinstance(
        node, (mat.NumericNode, mat.StringNode, mat.TupleInstanceNode, mat.VariableNode)
    ):
        return node

    # parameter
    elif isinstance(node, mat.ParameterNode):
        return __simplify_parameter(node, state)

    # indexed parameter
    elif isinstance(node, mat.IndexedParameterNode):
        return __simplify_indexed_parameter(node, state)

    # indexed variable
    elif isinstance(node, mat.IndexedVariableNode):
        return mat.IndexedVariableNode(node.symbol, [simplify(n, state) for n in node.idx_nodes])

    # decision expression
    elif isinstance(node, mat.DecisionExpressionNode):
        if node.idx_node is None:
            return node
        return mat.DecisionExpressionNode(node.symbol, simplify(node.idx_node, state))

    # arithmetic operations
    elif isinstance(node, mat.BinaryArithmeticOperationNode):
        return __simplify_binary_operation(node, state)

    elif isinstance(node, mat.UnaryArithmeticOperationNode):
        return __simplify_unary_operation(simplify(node.operand, state))

    # summation
    elif isinstance(node, mat.SummationNode):
        # the body references unbound iterators, so parameters are never folded within it
        condition_node = None
        if node.condition_node is not None:
            condition_node = simplify(node.condition_node)
        return mat.SummationNode(node.iterators, simplify(node.body_node), condition_node)

    # tuples
    elif isinstance(node, mat.TupleFieldAccessNode):
        base_node = simplify(node.base_node, state)
        if isinstance(base_node, mat.TupleInstanceNode):
            return mat.build_value_node(base_node.instance.get_value(node.field))
        return mat.TupleFieldAccessNode(base_node, node.field)

    elif isinstance(node, mat.ItemLookupNode):
        return mat.ItemLookupNode(node.set_symbol, [simplify(n, state) for n in node.key_nodes])

    # logical
    elif isinstance(node, mat.RelationalOperationNode):
        lhs = simplify(node.lhs_operand, state)
        rhs = simplify(node.rhs_operand, state)
        spl_node = mat.RelationalOperationNode(node.operator, lhs, rhs)
        if __is_literal(lhs) and __is_literal(rhs):
            return mat.NumericNode(spl_node.evaluate(state))
        return spl_node

    elif isinstance(node, mat.LogicalOperationNode):
        operands = [simplify(o, state) for o in node.operands]
        spl_node = mat.LogicalOperationNode(node.operator, operands)
        if all([isinstance(o, mat.NumericNode) for o in operands]):
            return mat.NumericNode(spl_node.evaluate(state))
        return spl_node

    # other
    else:
        raise ValueError(
            "Formulator encountered an unexpected node '{0}'".format(node)
            + " while simplifying an expression"
        )


def __is_literal(node: mat.ExpressionNode) -> bool:
    return isinstance(node, (mat.NumericNode, mat.StringNode, mat.TupleInstanceNode))


def __is_numeric_value(node: mat.ExpressionNode, value: float) -> bool:
    return isinstance(node, mat.NumericNode) and node.value == value


def __simplify_parameter(node: mat.ParameterNode, state: Optional[mat.State]):
    if state is None:
        return node
    param = state.get_parameter(node.symbol)
    if param is None or param.is_indexed() or not param.has_value():
        return node
    return mat.build_value_node(param.value)


def __simplify_indexed_parameter(node: mat.IndexedParameterNode, state: Optional[mat.State]):

    idx_nodes = [simplify(n, state) for n in node.idx_nodes]
    spl_node = mat.IndexedParameterNode(node.symbol, idx_nodes)

    if state is None or not all([__is_literal(n) for n in idx_nodes]):
        return spl_node

    param = state.get_parameter(node.symbol)
    if param is None or param.get_dim() != len(idx_nodes):
        return spl_node

    idx = tuple([mat.normalize_element(n.evaluate_value(state)) for n in idx_nodes])
    if idx not in param.values:
        return spl_node

    return mat.build_value_node(param.values[idx])


def __simplify_unary_operation(operand: mat.ExpressionNode):

    # special case: operand is a numeric node
    if isinstance(operand, mat.NumericNode):
        return mat.NumericNode(-operand.value)

    # special case: double negation
    elif isinstance(operand, mat.UnaryArithmeticOperationNode):
        return operand.operand

    return mat.UnaryArithmeticOperationNode(operand)


def __simplify_binary_operation(node: mat.BinaryArithmeticOperationNode, state: Optional[mat.State]):

    lhs = simplify(node.lhs_operand, state)
    rhs = simplify(node.rhs_operand, state)

    spl_node = mat.BinaryArithmeticOperationNode(node.operator, lhs, rhs)

    # both operand nodes are numeric
    if isinstance(lhs, mat.NumericNode) and isinstance(rhs, mat.NumericNode):
        return mat.NumericNode(spl_node.evaluate(state))

    if node.operator == mat.ADDITION_OPERATOR:
        if __is_numeric_value(lhs, 0):
            return rhs
        if __is_numeric_value(rhs, 0):
            return lhs

    elif node.operator == mat.SUBTRACTION_OPERATOR:
        if __is_numeric_value(rhs, 0):
            return lhs
        if __is_numeric_value(lhs, 0):
            return __simplify_unary_operation(rhs)

    elif node.operator == mat.MULTIPLICATION_OPERATOR:
        if __is_numeric_value(lhs, 0) or __is_numeric_value(rhs, 0):
            return mat.NumericNode(0)
        if __is_numeric_value(lhs, 1):
            return rhs
        if __is_numeric_value(rhs, 1):
            return lhs

    elif node.operator == mat.DIVISION_OPERATOR:
        if __is_numeric_value(rhs, 1):
            return lhs

    return spl_node


# Equation Formulation
# ----------------------------------------------------------------------------------------------------------------------


def formulate_equation(linearizer,
                       lhs_node: mat.ExpressionNode,
                       operator: str,
                       rhs_node: mat.ExpressionNode,
                       env: mat.Environment = None,
                       label: str = None,
                       base_name: str = None,
                       index: mat.Element = None,
                       second_index: mat.Element = None) -> Tuple[mat.LinearEquation, dict]:
    """
    Formulate the linear equation sum((a_lhs - a_rhs) * v) operator (c_rhs - c_lhs) of a relation between two affine
    expressions.
    :return: linear equation and map of the variable names it references to their symbols and indices
    """

    if operator not in mat.EQUATION_OPERATORS:
        raise mat.ParsingError(
            "Operator '{0}' cannot relate the sides of a linear equation".format(operator)
        )

    form = linearizer.linearize(mat.BinaryArithmeticOperationNode.subtraction(lhs_node, rhs_node), env)

    constant = simplify(mat.UnaryArithmeticOperationNode(form.constant), linearizer.state)

    eq = mat.LinearEquation(
        coefficients=form.coefficients,
        constant=constant,
        operator=operator,
        label=label,
        base_name=base_name,
        index=index,
        second_index=second_index,
    )

    return eq, form.variable_map


def formulate_objective(linearizer,
                        statement: stm.ObjectiveStatement) -> Tuple[mat.Objective, dict]:
    try:
        form = linearizer.linearize(statement.expression_node)
    except mat.OPLError as e:
        raise e.attach_context(statement=statement.literal)
    obj = mat.Objective(
        sense=statement.sense,
        coefficients=form.coefficients,
        constant=form.constant,
        name=statement.name,
    )
    return obj, form.variable_map


# Statement Expansion
# ----------------------------------------------------------------------------------------------------------------------


def expand_statement(linearizer,
                     statement: stm.BaseStatement) -> Tuple[List[mat.LinearEquation], dict]:
    """
    Expand a constraint or a forall statement into linear equations.
    No equation is returned unless the whole statement expands successfully.
    :param linearizer: linearizer bound to the registry of the model
    :param statement: constraint or forall statement
    :return: list of linear equations and map of the variable names they reference
    """

    equations = []
    variable_map = {}

    try:

        if isinstance(statement, stm.ConstraintStatement):
            __expand_constraint(linearizer, statement, mat.Environment(), equations, variable_map)

        elif isinstance(statement, stm.ForallStatement):
            __expand_forall(linearizer, statement, mat.Environment(), equations, variable_map)

        else:
            raise ValueError(
                "Formulator is unable to expand statement '{0}'".format(statement.literal)
            )

    except mat.OPLError as e:
        raise e.attach_context(statement=statement.literal)

    return equations, variable_map


def __expand_forall(linearizer,
                    statement: stm.ForallStatement,
                    env: mat.Environment,
                    equations: List[mat.LinearEquation],
                    variable_map: dict):
    def expand(e: mat.Environment):
        for sub_statement in statement.statements:
            if isinstance(sub_statement, stm.ForallStatement):
                __expand_forall(linearizer, sub_statement, e, equations, variable_map)
            else:
                __expand_constraint(linearizer, sub_statement, e, equations, variable_map)

    mat.enumerate_bindings(
        linearizer.state, env, statement.iterators, expand, statement.condition_node
    )


def __expand_constraint(linearizer,
                        statement: stm.ConstraintStatement,
                        env: mat.Environment,
                        equations: List[mat.LinearEquation],
                        variable_map: dict):

    try:

        label = statement.label
        index = None
        second_index = None

        if statement.label is not None and len(statement.label_idx_nodes) > 0:
            idx = [
                mat.normalize_element(n.evaluate_value(linearizer.state, env))
                for n in statement.label_idx_nodes
            ]
            label = statement.label + mat.get_index_literal(idx)
            index = idx[0]
            if len(idx) > 1:
                second_index = idx[1]

        eq, eq_variable_map = formulate_equation(
            linearizer=linearizer,
            lhs_node=statement.lhs_node,
            operator=statement.operator,
            rhs_node=statement.rhs_node,
            env=env,
            label=label,
            base_name=statement.label,
            index=index,
            second_index=second_index,
        )

    except mat.OPLError as e:
        raise e.attach_context(bindings=env.get_bindings())

    equations.append(eq)
    variable_map.update(eq_variable_map)
