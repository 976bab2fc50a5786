from typing import Dict, List, Optional, Tuple

import symopl.mat as mat
from symopl.mat.equation import get_linear_form_literal
from symopl.handlers.formulator import simplify


class LinearForm:
    """
    Decomposition of an affine expression into a coefficient per decision variable and a constant.
    """

    def __init__(self,
                 coefficients: Dict[str, mat.ExpressionNode],
                 constant: mat.ExpressionNode,
                 variable_map: Dict[str, Tuple[str, Optional[mat.Index]]] = None):
        self.coefficients: Dict[str, mat.ExpressionNode] = coefficients
        self.constant: mat.ExpressionNode = constant
        self.variable_map: Dict[str, Tuple[str, Optional[mat.Index]]] = (
            variable_map if variable_map is not None else {}
        )

    def __str__(self):
        return "{0} + {1}".format(
            get_linear_form_literal(self.coefficients), self.constant
        )

    def evaluate(self, state: mat.State, var_values: Dict[str, float]) -> float:
        """
        Evaluate the reconstructed expression sum(coefficient * variable) + constant.
        """
        env = mat.Environment()
        value = self.constant.evaluate(state, env)
        for var_name, coeff in self.coefficients.items():
            value += coeff.evaluate(state, env) * var_values[var_name]
        return value


class Linearizer:
    """
    Extracts the linear form of an expression.

    The expression is first substituted under the supplied bindings so that iterators are replaced by their values
    and summations are flattened. Terms are then visited recursively while carrying a running factor, the product of
    every constant multiplier and sign met on the path from the root.
    """

    def __init__(self, state: mat.State):
        self.state: mat.State = state

    def linearize(self, node: mat.ExpressionNode, env: mat.Environment = None) -> LinearForm:
        """
        Decompose an affine expression.
        :param node: root node of the expression
        :param env: bindings of the iterators referenced by the expression
        :return: linear form whose coefficients and constant are simplified, without zero coefficients
        """

        if env is None:
            env = mat.Environment()

        node = node.substitute(self.state, env)

        coeff_terms: Dict[str, List[mat.ExpressionNode]] = {}
        const_terms: List[mat.ExpressionNode] = []
        variable_map: Dict[str, Tuple[str, Optional[mat.Index]]] = {}

        self.__extract(
            node=node,
            factor=mat.NumericNode(1),
            env=env,
            coeff_terms=coeff_terms,
            const_terms=const_terms,
            variable_map=variable_map,
        )

        coefficients = {}
        for var_name, terms in coeff_terms.items():
            coeff = simplify(self.__sum(terms), self.state)
            if isinstance(coeff, mat.NumericNode) and mat.is_zero(coeff.value):
                continue
            coefficients[var_name] = coeff

        constant = simplify(self.__sum(const_terms), self.state)

        variable_map = {v: variable_map[v] for v in coefficients}

        return LinearForm(coefficients, constant, variable_map)

    # Extraction
    # ------------------------------------------------------------------------------------------------------------------

    def __extract(self,
                  node: mat.ExpressionNode,
                  factor: mat.ExpressionNode,
                  env: mat.Environment,
                  coeff_terms: Dict[str, List[mat.ExpressionNode]],
                  const_terms: List[mat.ExpressionNode],
                  variable_map: Dict[str, Tuple[str, Optional[mat.Index]]]):

        def extract(n: mat.ExpressionNode, f: mat.ExpressionNode):
            self.__extract(n, f, env, coeff_terms, const_terms, variable_map)

        # decision variable
        if isinstance(node, mat.VariableNode):
            coeff_terms.setdefault(node.symbol, []).append(factor)
            variable_map[node.symbol] = (node.base_symbol, node.idx)

        elif isinstance(node, mat.IndexedVariableNode):
            var_name, idx = node.get_variable_name(self.state, env)
            coeff_terms.setdefault(var_name, []).append(factor)
            variable_map[var_name] = (node.symbol, idx)

        # decision expression
        elif isinstance(node, mat.DecisionExpressionNode):
            with env.enter_dexpr(node.symbol):
                body = node.expand(self.state, env)
                is_constant = self.__is_constant_like(body, env)
                if not is_constant:
                    extract(body, factor)
            if is_constant:
                value = node.evaluate(self.state, env.spawn())
                const_terms.append(self.__scale(factor, mat.NumericNode(value)))

        # summations are flattened by substitution
        elif isinstance(node, mat.SummationNode):
            raise ValueError(
                "Linearizer encountered the summation '{0}'".format(node)
                + " which should have been flattened during substitution"
            )

        # non-arithmetic nodes
        elif isinstance(node, (mat.RelationalOperationNode, mat.LogicalOperationNode)):
            raise mat.NonLinearTermError(
                "Logical expression '{0}' cannot appear in a linear expression".format(node)
            )

        elif isinstance(node, (mat.StringNode, mat.TupleInstanceNode)):
            raise mat.TypeCoercionFailedError(
                "Value '{0}' cannot be used as a number".format(node)
            )

        # constant term
        elif self.__is_constant_like(node, env):
            const_terms.append(self.__scale(factor, self.__resolve_constant(node, env)))

        # unary negation
        elif isinstance(node, mat.UnaryArithmeticOperationNode):
            extract(node.operand, self.__scale(factor, mat.NumericNode(-1)))

        # binary operation
        elif isinstance(node, mat.BinaryArithmeticOperationNode):

            lhs = node.lhs_operand
            rhs = node.rhs_operand

            if node.operator == mat.ADDITION_OPERATOR:
                extract(lhs, factor)
                extract(rhs, factor)

            elif node.operator == mat.SUBTRACTION_OPERATOR:
                extract(lhs, factor)
                extract(rhs, self.__scale(factor, mat.NumericNode(-1)))

            elif node.operator == mat.MULTIPLICATION_OPERATOR:
                if self.__is_constant_like(lhs, env):
                    extract(rhs, self.__scale(factor, self.__resolve_constant(lhs, env)))
                elif self.__is_constant_like(rhs, env):
                    extract(lhs, self.__scale(factor, self.__resolve_constant(rhs, env)))
                else:
                    raise mat.NonLinearTermError(
                        "Product '{0}' of two non-constant expressions is not linear".format(node)
                    )

            else:
                if self.__is_constant_like(rhs, env):
                    divisor = self.__resolve_constant(rhs, env)
                    extract(
                        lhs,
                        simplify(
                            mat.BinaryArithmeticOperationNode.division(factor, divisor),
                            self.state,
                        ),
                    )
                else:
                    raise mat.NonLinearTermError(
                        "Division '{0}' by a non-constant expression is not linear".format(node)
                    )

        else:
            raise mat.NonLinearTermError(
                "Linearizer is unable to classify the term '{0}'".format(node)
            )

    # Classification
    # ------------------------------------------------------------------------------------------------------------------

    def __is_constant_like(self, node: mat.ExpressionNode, env: mat.Environment) -> bool:
        """
        Returns True if no decision variable is reachable from the node, looking through decision expressions.
        """

        if isinstance(node, (mat.VariableNode, mat.IndexedVariableNode)):
            return False

        elif isinstance(node, mat.DecisionExpressionNode):
            with env.enter_dexpr(node.symbol):
                body = node.expand(self.state, env)
                return self.__is_constant_like(body, env)

        elif isinstance(node, mat.SummationNode):
            return self.__is_constant_like(node.body_node, env)

        return all([self.__is_constant_like(c, env) for c in node.get_children()])

    def __resolve_constant(self, node: mat.ExpressionNode, env: mat.Environment) -> mat.ExpressionNode:
        # constant-like decision expressions are reduced to their value
        if self.__contains_dexpr(node):
            return mat.NumericNode(node.evaluate(self.state, env.spawn()))
        return node

    def __contains_dexpr(self, node: mat.ExpressionNode) -> bool:
        if isinstance(node, mat.DecisionExpressionNode):
            return True
        return any([self.__contains_dexpr(c) for c in node.get_children()])

    # Term Construction
    # ------------------------------------------------------------------------------------------------------------------

    def __scale(self, factor: mat.ExpressionNode, node: mat.ExpressionNode) -> mat.ExpressionNode:
        return simplify(mat.BinaryArithmeticOperationNode.multiplication(factor, node), self.state)

    @staticmethod
    def __sum(terms: List[mat.ExpressionNode]) -> mat.ExpressionNode:
        if len(terms) == 0:
            return mat.NumericNode(0)
        node = terms[0]
        for term in terms[1:]:
            node = mat.BinaryArithmeticOperationNode.addition(node, term)
        return node
