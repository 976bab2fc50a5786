from typing import List, Optional

import symopl.mat as mat


class Token:

    NUMBER = "number"
    STRING = "string"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    END = "end"

    def __init__(self, kind: str, literal: str, value=None, position: int = 0):
        self.kind: str = kind
        self.literal: str = literal
        self.value = value if value is not None else literal
        self.position: int = position

    def __str__(self):
        return self.literal

    def __repr__(self):
        return "Token({0}, {1!r})".format(self.kind, self.literal)

    def is_operator(self, *literals: str) -> bool:
        return self.kind == Token.OPERATOR and self.literal in literals

    def is_keyword(self, *literals: str) -> bool:
        return self.kind == Token.IDENTIFIER and self.literal in literals


class OPLLexer:
    """
    Splits the literal of a single statement into a stream of typed tokens.
    Numeric tokens carry their parsed value; string tokens carry their unquoted value.
    """

    # longest operators first
    OPERATOR_SYMBOLS = [
        "...",
        "..",
        "<=",
        ">=",
        "==",
        "!=",
        "&&",
        "||",
        "<",
        ">",
        "=",
        "+",
        "-",
        "*",
        "/",
        "(",
        ")",
        "[",
        "]",
        "{",
        "}",
        ",",
        ";",
        ":",
        "|",
        ".",
        "!",
    ]

    OPERATOR_ALIASES = {
        "≤": "<=",
        "≥": ">=",
    }

    def __init__(self):
        self.__literal: str = ""
        self.__index: int = 0
        self.__tokens: Optional[List[Token]] = None

    def tokenize(self, literal: str) -> List[Token]:

        self.__literal = literal
        self.__index = 0
        self.__tokens = []

        while self.__index < len(literal):

            c = literal[self.__index]

            if c.isspace():
                self.__index += 1

            elif c == '"':
                self.__tokenize_string()

            elif c.isdigit():
                self.__tokenize_number()

            elif c.isalpha() or c == "_":
                self.__tokenize_identifier()

            elif c in self.OPERATOR_ALIASES:
                self.__add_token(Token.OPERATOR, self.OPERATOR_ALIASES[c], 1)

            else:
                self.__tokenize_operator()

        self.__tokens.append(Token(Token.END, "", position=len(literal)))

        return self.__tokens

    def __add_token(self, kind: str, literal: str, length: int, value=None):
        self.__tokens.append(Token(kind, literal, value, self.__index))
        self.__index += length

    def __tokenize_string(self):

        start = self.__index
        i = start + 1
        chars = []

        while i < len(self.__literal):
            c = self.__literal[i]
            if c == "\\" and i + 1 < len(self.__literal):
                chars.append(self.__literal[i + 1])
                i += 2
                continue
            if c == '"':
                literal = self.__literal[start:i + 1]
                self.__add_token(Token.STRING, literal, len(literal), "".join(chars))
                return
            chars.append(c)
            i += 1

        raise mat.ParsingError(
            "OPL lexer encountered an unterminated string literal"
            + " at position {0} of '{1}'".format(start, self.__literal)
        )

    def __tokenize_number(self):

        literal = self.__literal
        i = self.__index

        while i < len(literal) and literal[i].isdigit():
            i += 1

        is_float = False

        # a '.' followed by another '.' is a range operator
        if i + 1 < len(literal) and literal[i] == "." and literal[i + 1].isdigit():
            is_float = True
            i += 1
            while i < len(literal) and literal[i].isdigit():
                i += 1
        elif i + 1 < len(literal) and literal[i] == "." and literal[i + 1] != ".":
            is_float = True
            i += 1

        # exponent
        if i < len(literal) and literal[i] in "eE":
            j = i + 1
            if j < len(literal) and literal[j] in "+-":
                j += 1
            if j < len(literal) and literal[j].isdigit():
                is_float = True
                i = j
                while i < len(literal) and literal[i].isdigit():
                    i += 1

        token_literal = literal[self.__index:i]
        value = float(token_literal) if is_float else int(token_literal)
        self.__add_token(Token.NUMBER, token_literal, len(token_literal), value)

    def __tokenize_identifier(self):
        literal = self.__literal
        i = self.__index
        while i < len(literal) and (literal[i].isalnum() or literal[i] == "_"):
            i += 1
        token_literal = literal[self.__index:i]
        self.__add_token(Token.IDENTIFIER, token_literal, len(token_literal))

    def __tokenize_operator(self):
        for symbol in self.OPERATOR_SYMBOLS:
            if self.__literal.startswith(symbol, self.__index):
                self.__add_token(Token.OPERATOR, symbol, len(symbol))
                return
        raise mat.ParsingError(
            "OPL lexer encountered an unexpected character '{0}'".format(
                self.__literal[self.__index]
            )
            + " at position {0} of '{1}'".format(self.__index, self.__literal)
        )
