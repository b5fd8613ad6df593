"""XML dialect front ends for mission plans"""
from .exceptions import MissionPlanError, MalformedPlanError, DanglingReferenceError
from .namespaces import strip_namespaces
from .task_graph_parser import TaskGraphParser, parse_task_plan
from .geometry_projector import MissionGeometryProjector, build_plan_geometry

__all__ = [
    'MissionPlanError', 'MalformedPlanError', 'DanglingReferenceError',
    'strip_namespaces', 'TaskGraphParser', 'parse_task_plan',
    'MissionGeometryProjector', 'build_plan_geometry',
]
