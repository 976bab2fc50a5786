import re
from typing import List, Optional, Tuple

import symopl.mat as mat


class SummationExpander:
    """
    Rewrites the literal of a statement before it is parsed.

    Summations of the form sum(i in I) <term> over a domain whose elements are fixed at declaration time are
    replaced by the explicit addition of one copy of the term per element. A numeric coefficient that multiplies a
    parenthesized addition is then distributed over its terms. Summations over any other domain, and summations with
    filters or several iterators, are left in place and expanded symbolically after parsing.
    """

    SUM_PATTERN = re.compile(r"(?<![\w.])sum\s*\(\s*([A-Za-z_]\w*)\s+in\s+([A-Za-z_]\w*)\s*\)")
    COEFFICIENT_PATTERN = re.compile(r"(?<![\w.])(\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)\s*\*\s*\(")
    STRING_PATTERN = re.compile(r'("(?:\\.|[^"\\])*")')
    EXPONENT_PATTERN = re.compile(r"(?<![\w.])\d+(?:\.\d*)?[eE]$")

    OPERATOR_CHARS = "+-*/([{,:<>=!&|"
    TERMINATOR_CHARS = "<>=!;,:|&"
    TERM_PRECEDING_CHARS = "+-([{,:<>="
    NON_TERM_FOLLOWING_CHARS = "*/[.^"

    def __init__(self, state: mat.State):
        self.state: mat.State = state

    def expand(self, literal: str) -> str:
        return self.distribute_coefficients(self.expand_summations(literal))

    # Summation Expansion
    # ------------------------------------------------------------------------------------------------------------------

    def expand_summations(self, literal: str) -> str:
        """
        Replace every eligible summation with the explicit addition of its terms.
        Nested summations are expanded from the outermost inwards.
        :param literal: literal of a statement
        :return: expanded literal
        """

        pos = 0
        count = 0

        while True:

            match = self.SUM_PATTERN.search(literal, pos)
            if match is None:
                break

            elements = self.__get_fixed_elements(match.group(2))
            if elements is None:
                pos = match.end()
                continue

            count += 1
            if count > mat.MAX_SUMMATION_EXPANSIONS:
                raise mat.ExpansionDepthError(
                    "Summation expander exceeded {0} expansions".format(mat.MAX_SUMMATION_EXPANSIONS)
                )

            term_end = self.find_term_end(literal, match.end())
            while term_end > match.end() and literal[term_end - 1].isspace():
                term_end -= 1
            term = literal[match.end():term_end].strip()
            if term == "":
                raise mat.ParsingError(
                    "Summation '{0}' has no term".format(match.group(0))
                )

            terms = [self.__substitute(term, match.group(1), e) for e in elements]
            if len(terms) == 0:
                expansion = "0"
            elif len(terms) == 1:
                expansion = terms[0]
            else:
                expansion = "(" + " + ".join(terms) + ")"

            literal = literal[:match.start()] + expansion + literal[term_end:]

            # the expansion may hold further summations
            pos = match.start()

        return literal

    def __get_fixed_elements(self, domain_symbol: str) -> Optional[List[mat.Element]]:
        domain = self.state.get_domain(domain_symbol)
        if isinstance(domain, mat.IndexSet):
            return list(domain.get_elements())
        if isinstance(domain, mat.PrimitiveSet) and not domain.is_external:
            return list(domain.get_elements())
        return None

    def __substitute(self, term: str, symbol: str, element: mat.Element) -> str:

        element_literal = mat.get_element_literal(element)
        if element_literal.startswith("-"):
            element_literal = "(" + element_literal + ")"

        pattern = re.compile(r"(?<![\w.])" + re.escape(symbol) + r"(?!\w)")

        # string literals are never substituted
        parts = self.STRING_PATTERN.split(term)
        for i in range(0, len(parts), 2):
            parts[i] = pattern.sub(lambda m: element_literal, parts[i])

        return "".join(parts)

    def find_term_end(self, literal: str, start: int) -> int:
        """
        Find the end of the multiplicative term that starts at the given position.

        The term ends at a relational or logical operator, at a statement or list separator, at a bracket that closes
        an enclosing group, or at a binary addition or subtraction. A '+' or '-' is unary, and continues the term,
        when it follows an operator, an opening bracket, or the start of the term.
        :param literal: literal of a statement
        :param start: position at which the term starts
        :return: position of the first character that follows the term
        """

        depth = 0
        prev = None  # previous significant character of the term

        i = start
        while i < len(literal):

            c = literal[i]

            if c in "([{":
                depth += 1

            elif c in ")]}":
                if depth == 0:
                    return i
                depth -= 1

            elif depth == 0:

                if c in self.TERMINATOR_CHARS:
                    return i

                if c in "+-":
                    is_exponent = self.EXPONENT_PATTERN.search(literal[start:i]) is not None
                    if not (prev is None or prev in self.OPERATOR_CHARS or is_exponent):
                        return i

            if not c.isspace():
                prev = c
            i += 1

        return len(literal)

    # Coefficient Distribution
    # ------------------------------------------------------------------------------------------------------------------

    def distribute_coefficients(self, literal: str) -> str:
        """
        Distribute numeric coefficients over parenthesized additions, e.g. 2*(x + y - z) becomes 2*x + 2*y - 2*z.
        Only coefficients that start a whole term are distributed.
        :param literal: literal of a statement
        :return: literal with distributed coefficients
        """

        pos = 0
        count = 0

        while True:

            match = self.COEFFICIENT_PATTERN.search(literal, pos)
            if match is None:
                break

            count += 1
            if count > mat.MAX_DISTRIBUTION_PASSES:
                break

            open_pos = match.end() - 1
            close_pos = self.__find_closing_paren(literal, open_pos)

            prev_char = self.__get_previous_char(literal, match.start())
            next_char = self.__get_next_char(literal, close_pos + 1)

            if (
                close_pos < 0
                or (prev_char is not None and prev_char not in self.TERM_PRECEDING_CHARS)
                or (next_char is not None and next_char in self.NON_TERM_FOLLOWING_CHARS)
            ):
                pos = match.end()
                continue

            terms = self.__split_terms(literal[open_pos + 1:close_pos])
            if terms is None:
                pos = match.end()
                continue

            distribution = self.__join_terms(match.group(1), terms)
            if prev_char == "-":
                distribution = "(" + distribution + ")"

            literal = literal[:match.start()] + distribution + literal[close_pos + 1:]
            pos = match.start()

        return literal

    def __split_terms(self, literal: str) -> Optional[List[Tuple[str, str]]]:

        terms = []
        sign = "+"
        i = 0

        while i < len(literal):
            end = self.find_term_end(literal, i)
            term = literal[i:end].strip()
            if term == "":
                return None
            terms.append((sign, term))
            if end >= len(literal):
                break
            # the term ended at something other than an addition
            if literal[end] not in "+-":
                return None
            sign = literal[end]
            i = end + 1

        if len(terms) == 0:
            return None

        return terms

    @staticmethod
    def __join_terms(coefficient: str, terms: List[Tuple[str, str]]) -> str:

        is_unity = float(coefficient) == 1

        literal = ""
        for i, (sign, term) in enumerate(terms):

            # absorb a leading unary sign into the sign of the term
            while term.startswith("-") or term.startswith("+"):
                if term[0] == "-":
                    sign = "-" if sign == "+" else "+"
                term = term[1:].strip()

            body = term if is_unity else "{0}*{1}".format(coefficient, term)

            if i == 0:
                literal = body if sign == "+" else "-" + body
            else:
                literal += " {0} {1}".format(sign, body)

        return literal

    @staticmethod
    def __find_closing_paren(literal: str, open_pos: int) -> int:
        depth = 0
        for i in range(open_pos, len(literal)):
            if literal[i] == "(":
                depth += 1
            elif literal[i] == ")":
                depth -= 1
                if depth == 0:
                    return i
        return -1

    @staticmethod
    def __get_previous_char(literal: str, pos: int) -> Optional[str]:
        prefix = literal[:pos].rstrip()
        return prefix[-1] if prefix != "" else None

    @staticmethod
    def __get_next_char(literal: str, pos: int) -> Optional[str]:
        suffix = literal[pos:].lstrip()
        return suffix[0] if suffix != "" else None
