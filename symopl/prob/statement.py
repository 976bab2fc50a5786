from abc import ABC, abstractmethod
from typing import List, Optional, Union

import symopl.mat as mat


# Base Statement
# ----------------------------------------------------------------------------------------------------------------------


class BaseStatement(ABC):
    def __init__(self, literal: str):
        self.literal: str = literal

    def __str__(self):
        return self.get_literal()

    @abstractmethod
    def get_literal(self, indent_level: int = 0) -> str:
        pass

    def is_model_statement(self) -> bool:
        """
        Returns True if the statement contributes equations or an objective to the model.
        """
        return False


class DeclarationStatement(BaseStatement):
    def __init__(self, literal: str, entity: mat.Entity):
        super(DeclarationStatement, self).__init__(literal)
        self.entity: mat.Entity = entity

    def get_literal(self, indent_level: int = 0) -> str:
        return "{0}{1};".format(indent_level * "\t", self.entity.get_literal())


class IgnoredStatement(BaseStatement):
    def get_literal(self, indent_level: int = 0) -> str:
        return "{0}{1}".format(indent_level * "\t", self.literal)


# Model Statements
# ----------------------------------------------------------------------------------------------------------------------


class ConstraintStatement(BaseStatement):
    def __init__(self,
                 literal: str,
                 lhs_node: mat.ExpressionNode,
                 operator: str,
                 rhs_node: mat.ExpressionNode,
                 label: str = None,
                 label_idx_nodes: List[mat.ExpressionNode] = None):
        super(ConstraintStatement, self).__init__(literal)
        self.lhs_node: mat.ExpressionNode = lhs_node
        self.operator: str = operator
        self.rhs_node: mat.ExpressionNode = rhs_node
        self.label: Optional[str] = label
        self.label_idx_nodes: List[mat.ExpressionNode] = (
            label_idx_nodes if label_idx_nodes is not None else []
        )

    def is_model_statement(self) -> bool:
        return True

    def get_literal(self, indent_level: int = 0) -> str:
        literal = indent_level * "\t"
        if self.label is not None:
            literal += self.label
            literal += "".join(["[{0}]".format(n) for n in self.label_idx_nodes])
            literal += ": "
        return literal + "{0} {1} {2};".format(self.lhs_node, self.operator, self.rhs_node)


class ForallStatement(BaseStatement):
    def __init__(self,
                 literal: str,
                 iterators: List[mat.Iterator],
                 statements: List[Union[ConstraintStatement, "ForallStatement"]],
                 condition_node: mat.ExpressionNode = None):
        super(ForallStatement, self).__init__(literal)
        self.iterators: List[mat.Iterator] = iterators
        self.statements: List[Union[ConstraintStatement, ForallStatement]] = statements
        self.condition_node: Optional[mat.ExpressionNode] = condition_node

    def is_model_statement(self) -> bool:
        return True

    def get_literal(self, indent_level: int = 0) -> str:
        literal = "{0}forall({1})".format(
            indent_level * "\t",
            mat.get_iterators_literal(self.iterators, self.condition_node),
        )
        if len(self.statements) == 1:
            return literal + " " + self.statements[0].get_literal().lstrip("\t")
        lines = [literal + " {"]
        for statement in self.statements:
            lines.append(statement.get_literal(indent_level + 1))
        lines.append("{0}}}".format(indent_level * "\t"))
        return "\n".join(lines)


class ObjectiveStatement(BaseStatement):
    def __init__(self,
                 literal: str,
                 sense: str,
                 expression_node: mat.ExpressionNode,
                 name: str = None):
        super(ObjectiveStatement, self).__init__(literal)
        self.sense: str = sense
        self.expression_node: mat.ExpressionNode = expression_node
        self.name: Optional[str] = name

    def is_model_statement(self) -> bool:
        return True

    def get_literal(self, indent_level: int = 0) -> str:
        literal = "{0}{1} ".format(indent_level * "\t", self.sense)
        if self.name is not None:
            literal += self.name + ": "
        return literal + "{0};".format(self.expression_node)
