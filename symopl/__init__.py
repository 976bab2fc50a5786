import os
import pathlib

# allow access to the following members from the symopl directory
from symopl.mat import *
from symopl.prob.problem import Problem
from symopl.handlers.problembuilder import read_opl, load_data
from symopl.handlers.linearizer import Linearizer, LinearForm
from symopl.handlers.formulator import simplify
from symopl.parsing.oplparser import OPLParser
from symopl.writing.mpswriter import to_mps
from symopl.writing.matrixwriter import MatrixForm, to_matrix_form


# The directory containing this file
ROOT_DIR = pathlib.Path(__file__).parent

with open(os.path.join(ROOT_DIR, "VERSION")) as version_file:
    version = version_file.read().strip()
__version__ = version
