"""Mission plan service: one front door for both plan dialects"""
import re
import logging
import xml.etree.ElementTree as ET
from typing import Optional, Union

from domain.plan_geometry import Coordinate, PlanGeometry
from domain.plan_graph import PlanGraph
from mission_plan.dialects.geometry_projector import MissionGeometryProjector
from mission_plan.dialects.task_graph_parser import TaskGraphParser
from mission_plan.dialects.tree import local_name, parse_document
from mission_plan.dialects.vocabulary import BehaviorTreeVocabulary, TaskTemplateVocabulary

logger = logging.getLogger(__name__)

TASK_TEMPLATE = "task-template"
BEHAVIOR_TREE = "behavior-tree"

CLARIFY_PREFIX = "CLARIFY:"

_CODE_FENCE = re.compile(r"^```[\w-]*\s*\n?(?P<body>.*?)\n?```$", re.DOTALL)

MissionPlan = Union[PlanGraph, PlanGeometry]

class MissionPlanService:
    """Service that reads model-generated plans in either dialect.

    Task-template plans become a PlanGraph (errors propagate); behavior-tree
    plans become a PlanGeometry (never raises for document content).
    """
    
    def __init__(self, graph_parser: TaskGraphParser, projector: MissionGeometryProjector):
        self.graph_parser = graph_parser
        self.projector = projector
    
    def parse_task_plan(self, xml: str) -> PlanGraph:
        """Parse a task-template plan into a task graph"""
        return self.graph_parser.parse(self.clean_response(xml))
    
    def project_mission_plan(self, xml: str, origin: Coordinate) -> PlanGeometry:
        """Project a behavior-tree plan from an origin (lon, lat)"""
        return self.projector.project(self.clean_response(xml), origin)
    
    def detect_dialect(self, xml: str) -> Optional[str]:
        """Identify which dialect a document is written in, if any"""
        text = self.clean_response(xml)
        if not text:
            return None
        try:
            root = parse_document(text)
        except ET.ParseError as e:
            logger.debug(f"Dialect detection could not parse document: {e}")
            return None

        tags = {local_name(el.tag) for el in root.iter()}
        if TaskTemplateVocabulary.ROOT in tags:
            return TASK_TEMPLATE
        if BehaviorTreeVocabulary.ROOT in tags:
            return BEHAVIOR_TREE
        return None
    
    def read(self, xml: str, origin: Optional[Coordinate] = None) -> Optional[MissionPlan]:
        """Dispatch to the pipeline matching the document's dialect.

        Returns None when the dialect is not recognised. A behavior-tree plan
        read without an origin has nothing to anchor to and yields an empty
        geometry.
        """
        dialect = self.detect_dialect(xml)
        if dialect == TASK_TEMPLATE:
            return self.parse_task_plan(xml)
        if dialect == BEHAVIOR_TREE:
            if origin is None:
                logger.warning("Behavior-tree plan read without an origin")
                return PlanGeometry.empty()
            return self.project_mission_plan(xml, origin)

        logger.warning("Unrecognised mission plan dialect")
        return None
    
    @staticmethod
    def clean_response(content: str) -> str:
        """Strip whitespace and a surrounding Markdown code fence from model output"""
        text = (content or "").strip()
        match = _CODE_FENCE.match(text)
        if match:
            text = match.group("body").strip()
        return text
    
    @staticmethod
    def clarification_request(content: str) -> Optional[str]:
        """Reason given by the model when it asks for clarification instead of a plan"""
        text = (content or "").strip()
        if text.startswith(CLARIFY_PREFIX):
            return text[len(CLARIFY_PREFIX):].strip()
        return None
