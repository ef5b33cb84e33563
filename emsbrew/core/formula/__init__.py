from .models import Dependency, Formula, FormulaOption
from .registry import FormulaRegistry
from .builtins import builtin_formulas

__all__ = [
    "Dependency",
    "Formula",
    "FormulaOption",
    "FormulaRegistry",
    "builtin_formulas",
]
