import re
from typing import List


BLOCK_KEYWORDS = ["tuple", "forall", "execute", "main"]
CONSTRAINT_BLOCK_PATTERN = re.compile(r"^(subject\s+to|constraints)\s*\{")


def split_statements(literal: str) -> List[str]:
    """
    Split the literal of a model into the literals of its statements.

    Comments are removed, the braces of 'subject to' and 'constraints' blocks are discarded, and statements are
    separated by semicolons. A statement that opens with 'tuple', 'forall', 'execute' or 'main' and holds a
    brace-delimited body ends with the closing brace of that body.
    :param literal: literal of a model
    :return: list of statement literals without their terminating semicolons
    """

    literal = strip_comments(literal)

    statements = []
    block_depths = []  # brace depths at which constraint blocks were opened

    i = 0
    start = 0
    depth = 0
    paren_depth = 0
    is_string = False

    while i < len(literal):

        c = literal[i]

        if is_string:
            if c == "\\":
                i += 1
            elif c == '"':
                is_string = False

        elif c == '"':
            is_string = True

        elif c == "(":
            paren_depth += 1

        elif c == ")":
            paren_depth -= 1

        elif c == "{":

            pending = literal[start:i + 1].strip()
            if depth == 0 and CONSTRAINT_BLOCK_PATTERN.match(pending):
                block_depths.append(depth)
                start = i + 1
            else:
                depth += 1

        elif c == "}":

            if depth == 0 and len(block_depths) > 0:
                __add_statement(statements, literal[start:i])
                block_depths.pop()
                start = i + 1

            else:
                depth -= 1
                if depth == 0 and paren_depth == 0 and __is_block_statement(literal[start:i]):
                    __add_statement(statements, literal[start:i + 1])
                    start = i + 1
                    # consume an optional terminating semicolon
                    j = i + 1
                    while j < len(literal) and literal[j].isspace():
                        j += 1
                    if j < len(literal) and literal[j] == ";":
                        i = j
                        start = j + 1

        elif c == ";" and depth == 0 and paren_depth == 0:
            __add_statement(statements, literal[start:i])
            start = i + 1

        i += 1

    __add_statement(statements, literal[start:])

    return statements


def strip_comments(literal: str) -> str:
    """
    Remove line comments and block comments, leaving string literals intact.
    """

    chars = []
    i = 0
    is_string = False

    while i < len(literal):

        c = literal[i]

        if is_string:
            chars.append(c)
            if c == "\\" and i + 1 < len(literal):
                chars.append(literal[i + 1])
                i += 1
            elif c == '"':
                is_string = False

        elif c == '"':
            is_string = True
            chars.append(c)

        elif literal.startswith("//", i):
            end = literal.find("\n", i)
            i = len(literal) if end == -1 else end
            continue

        elif literal.startswith("/*", i):
            end = literal.find("*/", i + 2)
            i = len(literal) if end == -1 else end + 2
            chars.append(" ")
            continue

        else:
            chars.append(c)

        i += 1

    return "".join(chars)


def __is_block_statement(literal: str) -> bool:
    words = literal.strip().split(None, 1)
    if len(words) == 0:
        return False
    keyword = re.match(r"[A-Za-z_]\w*", words[0])
    return keyword is not None and keyword.group(0) in BLOCK_KEYWORDS


def __add_statement(statements: List[str], literal: str):
    literal = literal.strip()
    if literal != "":
        statements.append(literal)
