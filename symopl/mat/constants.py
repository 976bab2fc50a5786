# Numerical Tolerances
# ----------------------------------------------------------------------------------------------------------------------
EPSILON = 1e-10

# Expansion Limits
# ----------------------------------------------------------------------------------------------------------------------
MAX_ITERATOR_DEPTH = 64
MAX_SUMMATION_EXPANSIONS = 10000
MAX_DISTRIBUTION_PASSES = 1000

# Arithmetic Operators
# ----------------------------------------------------------------------------------------------------------------------
ADDITION_OPERATOR = "+"
SUBTRACTION_OPERATOR = "-"
MULTIPLICATION_OPERATOR = "*"
DIVISION_OPERATOR = "/"
UNARY_NEGATION_OPERATOR = "-"

ARITHMETIC_OPERATOR_PRECEDENCE = {
    ADDITION_OPERATOR: 1,
    SUBTRACTION_OPERATOR: 1,
    MULTIPLICATION_OPERATOR: 2,
    DIVISION_OPERATOR: 2,
}

# Relational Operators
# ----------------------------------------------------------------------------------------------------------------------
EQUALITY_OPERATOR = "=="
INEQUALITY_OPERATOR = "!="
LESS_INEQUALITY_OPERATOR = "<"
LESS_EQUAL_INEQUALITY_OPERATOR = "<="
GREATER_INEQUALITY_OPERATOR = ">"
GREATER_EQUAL_INEQUALITY_OPERATOR = ">="

RELATIONAL_OPERATORS = [
    EQUALITY_OPERATOR,
    INEQUALITY_OPERATOR,
    LESS_INEQUALITY_OPERATOR,
    LESS_EQUAL_INEQUALITY_OPERATOR,
    GREATER_INEQUALITY_OPERATOR,
    GREATER_EQUAL_INEQUALITY_OPERATOR,
]

# operators admissible in a linear equation
EQUATION_OPERATORS = [
    EQUALITY_OPERATOR,
    LESS_INEQUALITY_OPERATOR,
    LESS_EQUAL_INEQUALITY_OPERATOR,
    GREATER_INEQUALITY_OPERATOR,
    GREATER_EQUAL_INEQUALITY_OPERATOR,
]

# Logical Operators
# ----------------------------------------------------------------------------------------------------------------------
CONJUNCTION_OPERATOR = "&&"
DISJUNCTION_OPERATOR = "||"
NEGATION_OPERATOR = "!"

# Types
# ----------------------------------------------------------------------------------------------------------------------
INT_TYPE = "int"
FLOAT_TYPE = "float"
STRING_TYPE = "string"
BOOL_TYPE = "bool"
BOOLEAN_TYPE = "boolean"

PARAMETER_TYPES = [INT_TYPE, FLOAT_TYPE, STRING_TYPE, BOOL_TYPE]
VARIABLE_TYPES = [INT_TYPE, FLOAT_TYPE, BOOLEAN_TYPE]

# Objective Senses
# ----------------------------------------------------------------------------------------------------------------------
MINIMIZE_SENSE = "minimize"
MAXIMIZE_SENSE = "maximize"
