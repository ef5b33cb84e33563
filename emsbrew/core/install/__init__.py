from .installer import FormulaInstaller, InstallResult, default_resolver
from .models import InstallRecord, InstallState
from .plan import InstallPlan, PlanStep, make_install_plan
from .store import InstallStore

__all__ = [
    "FormulaInstaller",
    "InstallPlan",
    "InstallRecord",
    "InstallResult",
    "InstallState",
    "InstallStore",
    "PlanStep",
    "default_resolver",
    "make_install_plan",
]
