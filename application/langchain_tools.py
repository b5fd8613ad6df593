"""LangChain tools exposing mission plan parsing to agents"""
import json
import logging
from langchain_core.tools import tool
from application.services_factory import get_services_factory
from mission_plan.dialects.exceptions import MissionPlanError

logger = logging.getLogger(__name__)


def _service():
    return get_services_factory().create_mission_plan_service()

@tool
def parse_task_plan_xml(xml: str) -> str:
    """Parse a TaskTemplate mission plan XML into a JSON task graph with nodes and edges."""
    clarification = _service().clarification_request(xml)
    if clarification is not None:
        return f"CLARIFY: {clarification}"

    try:
        graph = _service().parse_task_plan(xml)
        return json.dumps(graph.to_dict())
    except MissionPlanError as e:
        logger.error(f"Task plan tool error: {e}")
        return f"ERROR: {e}"

@tool
def project_mission_plan_xml(xml: str, longitude: float, latitude: float) -> str:
    """Project a BehaviorTree mission plan XML from a start longitude/latitude into GeoJSON."""
    clarification = _service().clarification_request(xml)
    if clarification is not None:
        return f"CLARIFY: {clarification}"

    geometry = _service().project_mission_plan(xml, (longitude, latitude))
    return json.dumps(geometry.feature_collection)

@tool
def detect_mission_plan_dialect(xml: str) -> str:
    """Report which mission plan dialect an XML document uses: task-template, behavior-tree or unknown."""
    return _service().detect_dialect(xml) or "unknown"
