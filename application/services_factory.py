"""Factory for creating application services"""
import logging
from mission_plan.config_loader import get_config
from mission_plan.dialects.task_graph_parser import TaskGraphParser
from mission_plan.dialects.geometry_projector import MissionGeometryProjector
from services.mission_plan_service import MissionPlanService

logger = logging.getLogger(__name__)

class ServicesFactory:
    """Factory for creating and configuring application services"""
    
    def __init__(self, config=None):
        self._config = config or get_config()
        self._graph_parser = None
        self._projector = None
    
    def get_graph_parser(self) -> TaskGraphParser:
        """Get or create task graph parser"""
        if self._graph_parser is None:
            self._graph_parser = TaskGraphParser()
        return self._graph_parser
    
    def get_projector(self) -> MissionGeometryProjector:
        """Get or create geometry projector configured from YAML"""
        if self._projector is None:
            self._projector = MissionGeometryProjector(
                action_tags=self._config.get_action_tags(),
                **self._config.get_projection_params()
            )
        return self._projector
    
    def create_mission_plan_service(self) -> MissionPlanService:
        """Create mission plan service with dependencies"""
        return MissionPlanService(self.get_graph_parser(), self.get_projector())

# Global factory instance
_factory = None

def get_services_factory() -> ServicesFactory:
    """Get global services factory"""
    global _factory
    if _factory is None:
        _factory = ServicesFactory()
    return _factory
