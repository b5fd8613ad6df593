"""Custom exceptions for mission plan processing"""

class MissionPlanError(Exception):
    """Base exception for mission plan processing errors"""
    pass

class MalformedPlanError(MissionPlanError):
    """Raised when a plan document cannot be parsed or has no root template"""
    pass

class DanglingReferenceError(MissionPlanError):
    """Raised when an edge refers to a task that was never declared"""

    def __init__(self, task_id: str, role: str = "target"):
        self.task_id = task_id
        self.role = role
        super().__init__(f"Dangling reference: edge {role} {task_id} is undefined")

class ConfigError(Exception):
    """Raised when configuration is invalid"""
    pass
