import os
from typing import Dict, List, Optional, Tuple
import warnings

import symopl.mat as mat
import symopl.prob.statement as stm
from symopl.handlers.linearizer import Linearizer
import symopl.handlers.formulator as fmr


class Problem:

    def __init__(self,
                 symbol: str = None,
                 description: str = None,
                 file_name: str = None,
                 working_dir_path: str = None):

        # --- Name ---
        if symbol is None and file_name is not None:
            file_name = os.path.basename(file_name)
            symbol = os.path.splitext(file_name)[0]

        self.symbol: str = symbol if symbol is not None else "Initial"
        self.description: str = description if description is not None else ""

        # --- I/O ---
        self.working_dir_path: Optional[str] = working_dir_path

        # --- State ---
        self.state: mat.State = mat.State()

        # --- Statements ---
        self.statements: List[stm.BaseStatement] = []

        # --- Model ---
        self.equations: List[mat.LinearEquation] = []
        self.objective: Optional[mat.Objective] = None
        self.variable_map: Dict[str, Tuple[str, Optional[mat.Index]]] = {}
        self.is_built: bool = False

    def __str__(self):
        return "Problem '{0}'".format(self.symbol)

    # Statements
    # ------------------------------------------------------------------------------------------------------------------

    def add_statement(self, statement: stm.BaseStatement):
        if isinstance(statement, stm.ObjectiveStatement) and self.get_objective_statement() is not None:
            raise mat.DeclarationError(
                "Problem '{0}' already has an objective".format(self.symbol),
                statement=statement.literal,
            )
        self.statements.append(statement)
        self.is_built = False

    def get_model_statements(self) -> List[stm.BaseStatement]:
        return [s for s in self.statements if s.is_model_statement()]

    def get_objective_statement(self) -> Optional[stm.ObjectiveStatement]:
        for statement in self.statements:
            if isinstance(statement, stm.ObjectiveStatement):
                return statement
        return None

    # Model Construction
    # ------------------------------------------------------------------------------------------------------------------

    def build(self):
        """
        Expand every constraint statement into linear equations and formulate the objective.
        The model is rebuilt from scratch; if any statement fails to expand, the previous model is kept.
        """

        linearizer = Linearizer(self.state)

        equations = []
        objective = None
        variable_map = {}

        for statement in self.statements:

            if isinstance(statement, stm.ObjectiveStatement):
                objective, obj_variable_map = fmr.formulate_objective(linearizer, statement)
                variable_map.update(obj_variable_map)

            elif isinstance(statement, (stm.ConstraintStatement, stm.ForallStatement)):
                stm_equations, stm_variable_map = fmr.expand_statement(linearizer, statement)
                equations.extend(stm_equations)
                variable_map.update(stm_variable_map)

        labels = set()
        for eq in equations:
            if eq.label is None:
                continue
            if eq.label in labels:
                warnings.warn(
                    "Problem '{0}' holds more than one equation labeled '{1}'".format(self.symbol, eq.label)
                )
            labels.add(eq.label)

        self.equations = equations
        self.objective = objective
        self.variable_map = variable_map
        self.is_built = True

    # Accessors
    # ------------------------------------------------------------------------------------------------------------------

    def get_equation(self, label: str) -> Optional[mat.LinearEquation]:
        for eq in self.equations:
            if eq.get_full_identifier() == label:
                return eq
        return None

    def get_equations_by_base_name(self, base_name: str) -> List[mat.LinearEquation]:
        return [eq for eq in self.equations if eq.base_name == base_name]

    def get_variable_names(self) -> List[str]:
        """
        Retrieve the names of the concrete variables of the model, in order of first appearance.
        Variables of the objective precede those of the equations.
        """

        var_names = []
        seen = set()

        coefficient_maps = []
        if self.objective is not None:
            coefficient_maps.append(self.objective.coefficients)
        coefficient_maps.extend([eq.coefficients for eq in self.equations])

        for coefficients in coefficient_maps:
            for var_name in coefficients:
                if var_name not in seen:
                    seen.add(var_name)
                    var_names.append(var_name)

        return var_names

    def get_variable_declaration(self, var_name: str) -> Optional[mat.IndexedVariable]:
        if var_name not in self.variable_map:
            return None
        base_symbol, _ = self.variable_map[var_name]
        return self.state.get_variable(base_symbol)

    # Reporting
    # ------------------------------------------------------------------------------------------------------------------

    def generate_report(self) -> str:

        state = self.state

        lines = [
            "Problem: {0}".format(self.symbol),
            "Tuple schemas: {0}".format(len(state.tuple_schemas)),
            "Domains: {0}".format(len(state.get_domains())),
            "Parameters: {0}".format(len(state.params)),
            "Variables: {0}".format(len(state.vars)),
            "Decision expressions: {0}".format(len(state.dexprs)),
            "Statements: {0}".format(len(self.statements)),
            "Model statements: {0}".format(len(self.get_model_statements())),
        ]

        if not self.is_built:
            lines.append("Model: not built")
            return "\n".join(lines)

        lines.append("Equations: {0}".format(len(self.equations)))
        lines.append("Concrete variables: {0}".format(len(self.get_variable_names())))

        if self.objective is not None:
            lines.append("Objective: {0}".format(self.objective))
        else:
            lines.append("Objective: none")

        for eq in self.equations:
            lines.append("\t" + str(eq))

        return "\n".join(lines)
