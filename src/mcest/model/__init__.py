"""Problem models: samplers and evaluators for each estimation task."""

from mcest.model.assignment import AssignmentProblem, AllOf, Language
from mcest.model.hypersphere import Hypersphere
from mcest.model.height import ConeHeight, DiskPointSampler, unit_square_point
from mcest.model.tasks import TaskNetwork

__all__ = [
    "AssignmentProblem",
    "AllOf",
    "Language",
    "Hypersphere",
    "ConeHeight",
    "DiskPointSampler",
    "unit_square_point",
    "TaskNetwork",
]
