from typing import List, Optional, Tuple
import warnings

import numpy as np

import symopl.mat as mat
from symopl.handlers.formulator import simplify
from symopl.parsing.opllexer import OPLLexer, Token
from symopl.parsing.sumexpander import SummationExpander
import symopl.prob.statement as stm


class OPLParser:

    # Constants
    # ------------------------------------------------------------------------------------------------------------------

    ARITH_BIN_OPR_SYMBOLS_1 = [mat.ADDITION_OPERATOR, mat.SUBTRACTION_OPERATOR]
    ARITH_BIN_OPR_SYMBOLS_2 = [mat.MULTIPLICATION_OPERATOR, mat.DIVISION_OPERATOR]

    PARAMETER_TYPE_SYMBOLS = [mat.INT_TYPE, mat.FLOAT_TYPE, mat.STRING_TYPE, mat.BOOL_TYPE]
    VARIABLE_TYPE_SYMBOLS = [mat.INT_TYPE, mat.FLOAT_TYPE, mat.BOOLEAN_TYPE]
    SET_TYPE_SYMBOLS = [mat.INT_TYPE, mat.FLOAT_TYPE, mat.STRING_TYPE]

    VARIABLE_KEYWORDS = ["dvar", "var"]
    OBJECTIVE_KEYWORDS = [mat.MINIMIZE_SENSE, mat.MAXIMIZE_SENSE]
    IGNORED_KEYWORDS = ["assert", "execute", "using", "main"]

    PREDEF_PARAM_VALUES = {
        "infinity": np.inf,
        "maxint": 2147483647,
        "true": 1.0,
        "false": 0.0,
    }

    # Construction
    # ------------------------------------------------------------------------------------------------------------------

    def __init__(self, state: mat.State = None, textual_summation: bool = False):

        self._lexer: OPLLexer = OPLLexer()
        self.state: mat.State = state if state is not None else mat.State()

        # rewrite eligible summations textually before parsing model statements
        self.textual_summation: bool = textual_summation
        self.sum_expander: SummationExpander = SummationExpander(self.state)

        self._literal: str = ""
        self._tokens: List[Token] = []
        self._token_index: int = 0
        self._iterator_scopes: List[List[str]] = []

    def _setup(self, literal: str):
        self._literal = literal
        self._tokens = self._lexer.tokenize(literal)
        self._token_index = 0
        self._iterator_scopes = []

    # Statement Parsing
    # ------------------------------------------------------------------------------------------------------------------

    def parse_statement(self, literal: str) -> stm.BaseStatement:
        """
        Parse a single statement, registering any entity it declares.
        :param literal: literal of the statement, with or without its terminating semicolon
        :return: parsed statement
        """

        literal = literal.strip()

        try:

            self._setup(literal)

            if self.textual_summation and self.__is_model_statement():
                literal = self.sum_expander.expand(literal)
                self._setup(literal)

            statement = self.__parse_statement()

            if self.get_token().is_operator(";"):
                self._next_token()
            if self.get_token().kind != Token.END:
                raise mat.ParsingError(
                    "OPL parser encountered an unexpected token '{0}'".format(self.get_token())
                    + " at the end of a statement"
                )

        except mat.OPLError as e:
            raise e.attach_context(statement=literal)

        return statement

    def __is_model_statement(self) -> bool:
        token = self.get_token()
        if token.is_operator("{"):
            return False
        return not self.__is_declaration_keyword(token)

    def __is_declaration_keyword(self, token: Token) -> bool:
        return token.is_keyword(
            "range",
            "tuple",
            "dexpr",
            *self.VARIABLE_KEYWORDS,
            *self.IGNORED_KEYWORDS,
            *self.PARAMETER_TYPE_SYMBOLS
        ) or (token.kind == Token.IDENTIFIER and token.literal in self.state.tuple_schemas)

    def __parse_statement(self) -> stm.BaseStatement:

        token = self.get_token()

        if token.is_keyword(*self.IGNORED_KEYWORDS):
            warnings.warn("OPL parser ignored the statement '{0}'".format(self._literal))
            self._token_index = len(self._tokens) - 1
            return stm.IgnoredStatement(self._literal)

        elif token.is_keyword("range"):
            return self.__parse_range_declaration()

        elif token.is_keyword("tuple"):
            return self.__parse_tuple_schema_declaration()

        elif token.is_operator("{"):
            return self.__parse_set_declaration()

        elif token.is_keyword(*self.VARIABLE_KEYWORDS):
            return self.__parse_variable_declaration()

        elif token.is_keyword("dexpr"):
            return self.__parse_dexpr_declaration()

        elif token.is_keyword(*self.PARAMETER_TYPE_SYMBOLS):
            return self.__parse_parameter_declaration()

        elif token.kind == Token.IDENTIFIER and token.literal in self.state.tuple_schemas:
            return self.__parse_tuple_parameter_declaration()

        elif token.is_keyword(*self.OBJECTIVE_KEYWORDS):
            return self.__parse_objective()

        else:
            return self.__parse_model_statement()

    # Declarations
    # ------------------------------------------------------------------------------------------------------------------

    def __parse_range_declaration(self) -> stm.DeclarationStatement:

        self._next_token()  # skip 'range'
        symbol = self._extract_identifier()

        self._enforce_token_value("=")
        self._next_token()  # skip '='

        domain = self.__parse_range(symbol)
        self.state.add_domain(domain)

        return stm.DeclarationStatement(self._literal, domain)

    def __parse_range(self, symbol: Optional[str]) -> mat.Domain:

        start_node = self._parse_arithmetic_expression()
        self._enforce_token_value("..")
        self._next_token()  # skip '..'
        end_node = self._parse_arithmetic_expression()

        # bounds that are literal integers form a fixed index set
        start_node = simplify(start_node)
        end_node = simplify(end_node)
        if symbol is not None and self.__is_integer_literal(start_node) and self.__is_integer_literal(end_node):
            return mat.IndexSet(symbol, int(start_node.value), int(end_node.value))

        return mat.BoundRange(symbol, start_node, end_node)

    @staticmethod
    def __is_integer_literal(node: mat.ExpressionNode) -> bool:
        return isinstance(node, mat.NumericNode) and float(node.value).is_integer()

    def __parse_tuple_schema_declaration(self) -> stm.DeclarationStatement:

        self._next_token()  # skip 'tuple'
        symbol = self._extract_identifier()

        self._enforce_token_value("{")
        self._next_token()  # skip '{'

        fields = []
        key_fields = []

        while not self.get_token().is_operator("}"):

            is_key = False
            if self.get_token().is_keyword("key"):
                is_key = True
                self._next_token()  # skip 'key'

            field_type = self._extract_identifier()
            if field_type not in self.SET_TYPE_SYMBOLS and field_type not in self.state.tuple_schemas:
                raise mat.DeclarationError(
                    "Field type '{0}' of tuple '{1}' is not supported".format(field_type, symbol)
                )
            field_name = self._extract_identifier()

            fields.append((field_name, field_type))
            if is_key:
                key_fields.append(field_name)

            self._enforce_token_value(";")
            self._next_token()  # skip ';'

        self._next_token()  # skip '}'

        schema = mat.TupleSchema(symbol, fields, key_fields)
        self.state.add_tuple_schema(schema)

        return stm.DeclarationStatement(self._literal, schema)

    def __parse_set_declaration(self) -> stm.DeclarationStatement:

        self._next_token()  # skip '{'
        type = self._extract_identifier()
        schema = self.state.get_tuple_schema(type)
        if schema is None and type not in self.SET_TYPE_SYMBOLS:
            raise mat.DeclarationError("Set element type '{0}' is not declared".format(type))
        self._enforce_token_value("}")
        self._next_token()  # skip '}'

        symbol = self._extract_identifier()

        # indexed family of sets
        outer_iterator = None
        if self.get_token().is_operator("[") and self._peek_token(2).is_keyword("in"):
            self._next_token()  # skip '['
            iterators, _ = self.__parse_iterators()
            if len(iterators) != 1:
                raise mat.DeclarationError(
                    "Indexed set '{0}' must be indexed by exactly one iterator".format(symbol)
                )
            outer_iterator = iterators[0]
            self._enforce_token_value("]")
            self._next_token()  # skip ']'
        else:
            self.__push_scope()

        self._enforce_token_value("=")
        self._next_token()  # skip '='

        if self.get_token().is_operator("..."):
            self._next_token()  # skip '...'
            if schema is not None:
                domain = mat.TupleSet(symbol, schema, is_external=True)
            else:
                domain = mat.PrimitiveSet(symbol, type, is_external=True)

        elif self.get_token().is_operator("{"):
            if self.__is_comprehension():
                domain = self.__parse_set_comprehension(symbol, type, outer_iterator)
            elif schema is not None:
                domain = mat.TupleSet(symbol, schema, self.__parse_tuple_set_literal(schema))
            else:
                domain = mat.PrimitiveSet(symbol, type, self.__parse_set_literal())

        else:
            domain = self.__parse_range(symbol)

        self.__pop_scope()

        if outer_iterator is not None and not isinstance(domain, mat.ComputedSet):
            raise mat.DeclarationError(
                "Indexed set '{0}' must be defined by a set comprehension".format(symbol)
            )

        self.state.add_domain(domain)

        return stm.DeclarationStatement(self._literal, domain)

    def __is_comprehension(self) -> bool:
        depth = 0
        i = self._token_index
        while i < len(self._tokens):
            token = self._tokens[i]
            if token.is_operator("(", "[", "{"):
                depth += 1
            elif token.is_operator(")", "]", "}"):
                depth -= 1
                if depth == 0:
                    return False
            elif token.is_operator("|") and depth == 1:
                return True
            i += 1
        return False

    def __parse_set_literal(self) -> List[mat.Element]:
        elements = []
        self._next_token()  # skip '{'
        while not self.get_token().is_operator("}"):
            elements.append(self.__evaluate_literal(self._parse_arithmetic_expression()))
            if not self._accept_token(","):
                break
        self._enforce_token_value("}")
        self._next_token()  # skip '}'
        return elements

    def __parse_tuple_set_literal(self, schema: mat.TupleSchema) -> List[mat.TupleInstance]:
        instances = []
        self._next_token()  # skip '{'
        while not self.get_token().is_operator("}"):
            values = [self.__evaluate_literal(n) for n in self._parse_tuple_literal()]
            instances.append(schema.create_instance(values))
            if not self._accept_token(","):
                break
        self._enforce_token_value("}")
        self._next_token()  # skip '}'
        return instances

    def __parse_set_comprehension(self,
                                  symbol: str,
                                  type: str,
                                  outer_iterator: Optional[mat.Iterator]) -> mat.ComputedSet:

        self._next_token()  # skip '{'
        output_index = self._token_index

        # the output expression references the iterators that follow it
        self.__skip_until_operator("|")
        self._next_token()  # skip '|'

        iterators, condition_node = self.__parse_iterators()
        self._enforce_token_value("}")
        end_index = self._token_index + 1

        self._token_index = output_index
        output_node = self._parse_expression()
        self._enforce_token_value("|")

        self._token_index = end_index
        self.__pop_scope()

        if isinstance(output_node, mat.ParameterNode) and output_node.symbol == iterators[0].symbol:
            output_node = None

        return mat.ComputedSet(
            symbol=symbol,
            type=type,
            iterators=iterators,
            condition_node=condition_node,
            output_node=output_node,
            outer_iterator=outer_iterator,
        )

    def __parse_parameter_declaration(self) -> stm.DeclarationStatement:

        type = self._extract_identifier()
        self._accept_token("+")  # sign suffixes do not constrain parameters
        symbol = self._extract_identifier()

        dims = self.__parse_parameter_dimensions()
        idx_set_symbols = [d for _, d in dims]
        iterator_symbols = [i for i, _ in dims]

        param = mat.Parameter(symbol, type, idx_set_symbols)

        if not self._accept_token("="):
            param.is_external = True

        elif self._accept_token("..."):
            param.is_external = True

        elif self.get_token().is_operator("[", "{") and len(dims) > 0:
            if any([i is not None for i in iterator_symbols]):
                raise mat.DeclarationError(
                    "Parameter '{0}' with named indices must be defined by an expression".format(symbol)
                )
            values = self.__parse_array_literal()
            self.__assign_array_literal(param, values)

        else:
            self.__parse_parameter_definition(param, dims)

        self.state.add_parameter(param)

        return stm.DeclarationStatement(self._literal, param)

    def __parse_parameter_dimensions(self) -> List[Tuple[Optional[str], str]]:

        dims = []

        while self.get_token().is_operator("["):
            self._next_token()  # skip '['
            while True:
                if self._peek_token().is_keyword("in"):
                    iter_sym = self._extract_identifier()
                    self._next_token()  # skip 'in'
                    dims.append((iter_sym, self._extract_identifier()))
                else:
                    dims.append((None, self._extract_identifier()))
                if not self._accept_token(","):
                    break
            self._enforce_token_value("]")
            self._next_token()  # skip ']'

        return dims

    def __parse_parameter_definition(self, param: mat.Parameter, dims: List[Tuple[Optional[str], str]]):

        iterator_symbols = [i for i, _ in dims]

        if len(dims) > 0 and any([i is None for i in iterator_symbols]):
            raise mat.DeclarationError(
                "Indexed parameter '{0}' must name every index to be defined by an expression".format(
                    param.symbol
                )
            )

        self.__push_scope(iterator_symbols)
        node = self._parse_expression()
        self.__pop_scope()

        if len(dims) == 0:
            node = simplify(node)
            if isinstance(node, (mat.NumericNode, mat.StringNode)):
                param.set_value(node.evaluate_value(self.state))
                return

        param.definition = node
        param.definition_iterators = [mat.Iterator(i, d) for i, d in dims]

    def __parse_array_literal(self) -> list:
        # arrays are delimited by brackets or braces
        closing_literal = "]" if self.get_token().is_operator("[") else "}"
        values = []
        self._next_token()  # skip opening delimiter
        while not self.get_token().is_operator(closing_literal):
            if self.get_token().is_operator("[", "{"):
                values.append(self.__parse_array_literal())
            else:
                values.append(self.__evaluate_literal(self._parse_arithmetic_expression()))
            if not self._accept_token(","):
                break
        self._enforce_token_value(closing_literal)
        self._next_token()  # skip closing delimiter
        return values

    def __assign_array_literal(self, param: mat.Parameter, values: list):

        domains = [
            self.state.resolve_domain(s, mat.Environment()) for s in param.idx_set_symbols
        ]

        def assign(sub_values, dim: int, idx: tuple):
            elements = list(domains[dim])
            if not isinstance(sub_values, list) or len(sub_values) != len(elements):
                raise mat.DimensionMismatchError(
                    "Array literal of parameter '{0}' does not match the {1} elements of '{2}'".format(
                        param.symbol, len(elements), param.idx_set_symbols[dim]
                    )
                )
            for element, value in zip(elements, sub_values):
                if dim == len(domains) - 1:
                    if isinstance(value, list):
                        raise mat.DimensionMismatchError(
                            "Array literal of parameter '{0}' has too many dimensions".format(param.symbol)
                        )
                    param.set_indexed_value(idx + (element,), value)
                else:
                    assign(value, dim + 1, idx + (element,))

        assign(values, 0, ())

    def __parse_tuple_parameter_declaration(self) -> stm.DeclarationStatement:

        schema = self.state.get_tuple_schema(self._extract_identifier())
        symbol = self._extract_identifier()

        param = mat.TupleParameter(symbol, schema)

        if not self._accept_token("=") or self._accept_token("..."):
            param.is_external = True
        elif self.get_token().is_operator("<"):
            values = [self.__evaluate_literal(n) for n in self._parse_tuple_literal()]
            param.set_value(schema.create_instance(values))
        else:
            param.definition = self._parse_expression()

        self.state.add_parameter(param)

        return stm.DeclarationStatement(self._literal, param)

    def __parse_variable_declaration(self) -> stm.DeclarationStatement:

        self._next_token()  # skip 'dvar'

        type = self._extract_identifier()
        if type not in self.VARIABLE_TYPE_SYMBOLS:
            raise mat.DeclarationError("Variable type '{0}' is not supported".format(type))

        lb_node = None
        ub_node = None
        if self._accept_token("+"):
            lb_node = mat.NumericNode(0)

        symbol = self._extract_identifier()

        idx_set_symbols = []
        while self._accept_token("["):
            while True:
                idx_set_symbols.append(self._extract_identifier())
                if not self._accept_token(","):
                    break
            self._enforce_token_value("]")
            self._next_token()  # skip ']'

        if self._accept_token("in"):
            lb_node = self._parse_arithmetic_expression()
            self._enforce_token_value("..")
            self._next_token()  # skip '..'
            ub_node = self._parse_arithmetic_expression()

        var = mat.IndexedVariable(symbol, type, idx_set_symbols, lb_node, ub_node)
        self.state.add_variable(var)

        return stm.DeclarationStatement(self._literal, var)

    def __parse_dexpr_declaration(self) -> stm.DeclarationStatement:

        self._next_token()  # skip 'dexpr'

        type = self._extract_identifier()
        self._accept_token("+")
        symbol = self._extract_identifier()

        idx_symbol = None
        idx_set_symbol = None
        if self._accept_token("["):
            idx_symbol = self._extract_identifier()
            self._enforce_token_value("in")
            self._next_token()  # skip 'in'
            idx_set_symbol = self._extract_identifier()
            self._enforce_token_value("]")
            self._next_token()  # skip ']'

        self._enforce_token_value("=")
        self._next_token()  # skip '='

        self.__push_scope([idx_symbol] if idx_symbol is not None else [])
        node = self._parse_expression()
        self.__pop_scope()

        dexpr = mat.DecisionExpression(symbol, type, node, idx_symbol, idx_set_symbol)
        self.state.add_dexpr(dexpr)

        return stm.DeclarationStatement(self._literal, dexpr)

    # Model Statements
    # ------------------------------------------------------------------------------------------------------------------

    def __parse_objective(self) -> stm.ObjectiveStatement:

        sense = self._extract_identifier()

        name = None
        if self.get_token().kind == Token.IDENTIFIER and self._peek_token().is_operator(":"):
            name = self._extract_identifier()
            self._next_token()  # skip ':'

        node = self._parse_arithmetic_expression()

        return stm.ObjectiveStatement(self._literal, sense, node, name)

    def __parse_model_statement(self) -> stm.BaseStatement:
        if self.get_token().is_keyword("forall"):
            return self.__parse_forall()
        return self.__parse_constraint()

    def __parse_forall(self) -> stm.ForallStatement:

        start_index = self._token_index

        self._next_token()  # skip 'forall'
        self._enforce_token_value("(")
        self._next_token()  # skip '('

        iterators, condition_node = self.__parse_iterators()

        self._enforce_token_value(")")
        self._next_token()  # skip ')'

        statements = []
        if self._accept_token("{"):
            while not self.get_token().is_operator("}"):
                statements.append(self.__parse_model_statement())
                self._accept_token(";")
            self._next_token()  # skip '}'
        else:
            statements.append(self.__parse_model_statement())

        self.__pop_scope()

        return stm.ForallStatement(
            literal=self.__get_literal_since(start_index),
            iterators=iterators,
            statements=statements,
            condition_node=condition_node,
        )

    def __parse_constraint(self) -> stm.BaseStatement:

        start_index = self._token_index

        label = None
        label_idx_nodes = []
        iterators = None
        condition_node = None

        if self.__is_labeled_constraint():

            label = self._extract_identifier()

            # indexed equation
            if self.get_token().is_operator("[") and self._peek_token(2).is_keyword("in"):
                self._next_token()  # skip '['
                iterators, condition_node = self.__parse_iterators()
                label_idx_nodes = [mat.ParameterNode(it.symbol) for it in iterators]
                self._enforce_token_value("]")
                self._next_token()  # skip ']'

            # indexed label
            else:
                while self._accept_token("["):
                    while True:
                        label_idx_nodes.append(self._parse_arithmetic_expression())
                        if not self._accept_token(","):
                            break
                    self._enforce_token_value("]")
                    self._next_token()  # skip ']'

            self._enforce_token_value(":")
            self._next_token()  # skip ':'

        lhs_node = self._parse_arithmetic_expression()

        operator = self.get_token().literal
        if operator == "=":
            raise mat.ParsingError(
                "OPL parser encountered the assignment operator '=' in a constraint; use '=='"
            )
        if operator not in mat.EQUATION_OPERATORS:
            raise mat.ParsingError(
                "OPL parser encountered the token '{0}' while expecting a relational operator".format(operator)
            )
        self._next_token()  # skip operator

        rhs_node = self._parse_arithmetic_expression()

        if self.get_token().literal in mat.RELATIONAL_OPERATORS:
            raise mat.ParsingError("OPL parser does not support chained relations in constraints")

        constraint = stm.ConstraintStatement(
            literal=self.__get_literal_since(start_index),
            lhs_node=lhs_node,
            operator=operator,
            rhs_node=rhs_node,
            label=label,
            label_idx_nodes=label_idx_nodes,
        )

        if iterators is None:
            return constraint

        self.__pop_scope()
        return stm.ForallStatement(
            literal=constraint.literal,
            iterators=iterators,
            statements=[constraint],
            condition_node=condition_node,
        )

    def __is_labeled_constraint(self) -> bool:

        if self.get_token().kind != Token.IDENTIFIER:
            return False

        i = self._token_index + 1
        depth = 0
        while i < len(self._tokens):
            token = self._tokens[i]
            if token.is_operator("["):
                depth += 1
            elif token.is_operator("]"):
                depth -= 1
            elif depth == 0:
                return token.is_operator(":")
            i += 1

        return False

    # Iterators
    # ------------------------------------------------------------------------------------------------------------------

    def __parse_iterators(self) -> Tuple[List[mat.Iterator], Optional[mat.ExpressionNode]]:
        """
        Parse a comma-separated list of iterators with optional filters, and open a scope holding their symbols.
        A filter that follows the last iterator is returned as the global condition.
        The caller is responsible for closing the scope.
        :return: list of iterators and the global condition
        """

        iterators = []
        condition_node = None

        self.__push_scope()

        while True:

            symbol = self._extract_identifier()
            self._enforce_token_value("in")
            self._next_token()  # skip 'in'

            iterator = self.__parse_iterator_domain(symbol)
            iterators.append(iterator)
            self._iterator_scopes[-1].append(symbol)

            if self._accept_token(":"):
                filter_node = self._parse_expression()
                if self._accept_token(","):
                    iterator.filter_node = filter_node
                    continue
                condition_node = filter_node
                break

            if not self._accept_token(","):
                break

        return iterators, condition_node

    def __parse_iterator_domain(self, symbol: str) -> mat.Iterator:

        token = self.get_token()

        if (
            token.kind == Token.IDENTIFIER
            and not self.__is_iterator(token.literal)
            and not self.state.is_parameter(token.literal)
            and token.literal not in self.PREDEF_PARAM_VALUES
            and not self._peek_token().is_operator("..", *self.ARITH_BIN_OPR_SYMBOLS_1, *self.ARITH_BIN_OPR_SYMBOLS_2)
        ):
            domain_symbol = self._extract_identifier()
            domain_idx_node = None
            if self._accept_token("["):
                domain_idx_node = self._parse_expression()
                self._enforce_token_value("]")
                self._next_token()  # skip ']'
            return mat.Iterator(symbol, domain_symbol=domain_symbol, domain_idx_node=domain_idx_node)

        return mat.Iterator(symbol, domain=self.__parse_range(None))

    # Expression Parsing
    # ------------------------------------------------------------------------------------------------------------------

    def parse_expression(self, literal: str) -> mat.ExpressionNode:
        self._setup(literal)
        node = self._parse_expression()
        if self.get_token().kind != Token.END:
            raise mat.ParsingError(
                "OPL parser encountered an unexpected token '{0}'".format(self.get_token())
                + " in expression '{0}'".format(literal)
            )
        return node

    def _parse_expression(self) -> mat.ExpressionNode:
        return self.__parse_disjunction()

    def __parse_disjunction(self) -> mat.ExpressionNode:
        operands = [self.__parse_conjunction()]
        while self._accept_token(mat.DISJUNCTION_OPERATOR):
            operands.append(self.__parse_conjunction())
        if len(operands) == 1:
            return operands[0]
        return mat.LogicalOperationNode(mat.DISJUNCTION_OPERATOR, operands)

    def __parse_conjunction(self) -> mat.ExpressionNode:
        operands = [self.__parse_negation()]
        while self._accept_token(mat.CONJUNCTION_OPERATOR):
            operands.append(self.__parse_negation())
        if len(operands) == 1:
            return operands[0]
        return mat.LogicalOperationNode(mat.CONJUNCTION_OPERATOR, operands)

    def __parse_negation(self) -> mat.ExpressionNode:
        if self._accept_token(mat.NEGATION_OPERATOR):
            return mat.LogicalOperationNode(mat.NEGATION_OPERATOR, [self.__parse_negation()])
        return self.__parse_relation()

    def __parse_relation(self) -> mat.ExpressionNode:

        lhs_node = self._parse_arithmetic_expression()

        operator = self.get_token().literal
        if self.get_token().kind == Token.OPERATOR and operator in mat.RELATIONAL_OPERATORS:
            self._next_token()  # skip operator
            rhs_node = self._parse_arithmetic_expression()
            return mat.RelationalOperationNode(operator, lhs_node, rhs_node)

        elif self.get_token().is_operator("="):
            raise mat.ParsingError(
                "OPL parser encountered the assignment operator '=' in an expression; use '=='"
            )

        return lhs_node

    def _parse_arithmetic_expression(self, precedence: int = 1) -> mat.ExpressionNode:

        # parse first operand
        if precedence == 1:
            root_node = self._parse_arithmetic_expression(precedence=2)
            operators = self.ARITH_BIN_OPR_SYMBOLS_1
        else:
            root_node = self.__parse_unary_arithmetic_operation()
            operators = self.ARITH_BIN_OPR_SYMBOLS_2

        while self.get_token().kind == Token.OPERATOR and self.get_token().literal in operators:

            operator = self.get_token().literal
            self._next_token()  # skip operator

            if precedence == 1:
                rhs_node = self._parse_arithmetic_expression(precedence=2)
            else:
                rhs_node = self.__parse_unary_arithmetic_operation()

            root_node = mat.BinaryArithmeticOperationNode(operator, root_node, rhs_node)

        return root_node

    def __parse_unary_arithmetic_operation(self) -> mat.ExpressionNode:
        if self._accept_token(mat.UNARY_NEGATION_OPERATOR):
            return mat.UnaryArithmeticOperationNode(self.__parse_unary_arithmetic_operation())
        elif self._accept_token(mat.ADDITION_OPERATOR):
            return self.__parse_unary_arithmetic_operation()
        return self.__parse_arithmetic_operand()

    def __parse_arithmetic_operand(self) -> mat.ExpressionNode:

        node = self.__parse_primary()

        # field access
        while self.get_token().is_operator(".") and self._peek_token().kind == Token.IDENTIFIER:
            self._next_token()  # skip '.'
            node = mat.TupleFieldAccessNode(node, self._extract_identifier())

        return node

    def __parse_primary(self) -> mat.ExpressionNode:

        token = self.get_token()

        # numeric literal
        if token.kind == Token.NUMBER:
            self._next_token()
            return mat.NumericNode(token.value)

        # string literal
        elif token.kind == Token.STRING:
            self._next_token()
            return mat.StringNode(token.value)

        # parenthesized expression
        elif token.is_operator("("):
            self._next_token()  # skip '('
            node = self._parse_expression()
            self._enforce_token_value(")")
            self._next_token()  # skip ')'
            return node

        elif token.is_operator("<"):
            raise mat.ParsingError(
                "OPL parser encountered a tuple literal outside of a tuple definition or item() lookup"
            )

        elif token.kind == Token.IDENTIFIER:

            if token.literal == "sum" and self._peek_token().is_operator("("):
                return self.__parse_summation()

            elif token.literal == "item" and self._peek_token().is_operator("("):
                return self.__parse_item_lookup()

            elif self._peek_token().is_operator("("):
                raise mat.ParsingError(
                    "OPL parser encountered the unsupported function '{0}'".format(token.literal)
                )

            return self.__parse_entity_reference()

        raise mat.ParsingError(
            "OPL parser encountered an unexpected token '{0}' while parsing an operand".format(token)
        )

    def __parse_summation(self) -> mat.SummationNode:

        self._next_token()  # skip 'sum'
        self._enforce_token_value("(")
        self._next_token()  # skip '('

        iterators, condition_node = self.__parse_iterators()

        self._enforce_token_value(")")
        self._next_token()  # skip ')'

        body_node = self._parse_arithmetic_expression(precedence=2)

        self.__pop_scope()

        return mat.SummationNode(iterators, body_node, condition_node)

    def __parse_item_lookup(self) -> mat.ItemLookupNode:

        self._next_token()  # skip 'item'
        self._enforce_token_value("(")
        self._next_token()  # skip '('

        set_symbol = self._extract_identifier()
        self._enforce_token_value(",")
        self._next_token()  # skip ','

        if self.get_token().is_operator("<"):
            key_nodes = self._parse_tuple_literal()
        else:
            key_nodes = [self._parse_arithmetic_expression()]

        self._enforce_token_value(")")
        self._next_token()  # skip ')'

        return mat.ItemLookupNode(set_symbol, key_nodes)

    def __parse_entity_reference(self) -> mat.ExpressionNode:

        symbol = self._extract_identifier()

        # bound iterator
        if self.__is_iterator(symbol):
            return mat.ParameterNode(symbol)

        elif symbol in self.PREDEF_PARAM_VALUES:
            return mat.NumericNode(self.PREDEF_PARAM_VALUES[symbol])

        idx_nodes = self.__parse_index_nodes()

        # decision variable
        if self.state.is_variable(symbol):
            var = self.state.get_variable(symbol)
            if var.get_dim() == 0 and len(idx_nodes) == 0:
                return mat.VariableNode(symbol)
            return mat.IndexedVariableNode(symbol, idx_nodes)

        # decision expression
        elif self.state.is_dexpr(symbol):
            if len(idx_nodes) > 1:
                raise mat.DimensionMismatchError(
                    "Decision expression '{0}' accepts at most one index".format(symbol)
                )
            return mat.DecisionExpressionNode(symbol, idx_nodes[0] if len(idx_nodes) == 1 else None)

        # parameter
        if len(idx_nodes) == 0:
            return mat.ParameterNode(symbol)
        return mat.IndexedParameterNode(symbol, idx_nodes)

    def __parse_index_nodes(self) -> List[mat.ExpressionNode]:
        idx_nodes = []
        while self._accept_token("["):
            while True:
                idx_nodes.append(self._parse_arithmetic_expression())
                if not self._accept_token(","):
                    break
            self._enforce_token_value("]")
            self._next_token()  # skip ']'
        return idx_nodes

    def _parse_tuple_literal(self) -> List[mat.ExpressionNode]:
        nodes = []
        self._enforce_token_value("<")
        self._next_token()  # skip '<'
        while True:
            nodes.append(self._parse_arithmetic_expression())
            if not self._accept_token(","):
                break
        self._enforce_token_value(">")
        self._next_token()  # skip '>'
        return nodes

    def __evaluate_literal(self, node: mat.ExpressionNode):
        return mat.normalize_element(node.evaluate_value(self.state, mat.Environment()))

    # Scopes
    # ------------------------------------------------------------------------------------------------------------------

    def __push_scope(self, symbols: List[str] = None):
        self._iterator_scopes.append(list(symbols) if symbols is not None else [])

    def __pop_scope(self):
        self._iterator_scopes.pop()

    def __is_iterator(self, symbol: str) -> bool:
        return any([symbol in scope for scope in self._iterator_scopes])

    # Utility
    # ------------------------------------------------------------------------------------------------------------------

    def get_token(self) -> Token:
        return self._tokens[self._token_index]

    def _peek_token(self, offset: int = 1) -> Token:
        i = min(self._token_index + offset, len(self._tokens) - 1)
        return self._tokens[i]

    def _next_token(self) -> bool:
        """
        Advance to the next token.
        :return: True if a succeeding token exists, False if the end of the statement has been reached
        """
        if self._token_index < len(self._tokens) - 1:
            self._token_index += 1
            return True
        return False

    def _accept_token(self, literal: str) -> bool:
        token = self.get_token()
        if token.kind in (Token.OPERATOR, Token.IDENTIFIER) and token.literal == literal:
            self._next_token()
            return True
        return False

    def _enforce_token_value(self, expected_token: str):
        if self.get_token().literal != expected_token:
            raise mat.ParsingError(
                "OPL parser encountered an unexpected token '{0}' ".format(self.get_token())
                + "while expecting the token '{0}'".format(expected_token)
            )

    def _extract_identifier(self) -> str:
        token = self.get_token()
        if token.kind != Token.IDENTIFIER:
            raise mat.ParsingError(
                "OPL parser encountered an unexpected token '{0}' while expecting an identifier".format(token)
            )
        self._next_token()
        return token.literal

    def __skip_until_operator(self, literal: str):
        depth = 0
        while True:
            token = self.get_token()
            if token.kind == Token.END:
                raise mat.ParsingError(
                    "OPL parser reached the end of the statement while searching for '{0}'".format(literal)
                )
            if token.is_operator("(", "[", "{"):
                depth += 1
            elif token.is_operator(")", "]", "}"):
                depth -= 1
            elif depth == 0 and token.is_operator(literal):
                return
            self._next_token()

    def __get_literal_since(self, start_index: int) -> str:
        start = self._tokens[start_index].position
        end = self.get_token().position
        return self._literal[start:end].strip()
