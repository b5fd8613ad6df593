"""Task graph builder for the TaskTemplate (Sequence/ConditionalActions) dialect"""
import logging
import xml.etree.ElementTree as ET
from xml.parsers.expat import errors as expat_errors
from typing import Dict, List, Optional, Tuple

from domain.plan_graph import GeoPoint, MissionEdge, MissionNode, PlanGraph
from .exceptions import DanglingReferenceError, MalformedPlanError
from .namespaces import strip_namespaces, strip_prefixes
from .tree import children, child_text, element_to_dict, field_value, first_child, local_name, parse_document, parse_number
from .vocabulary import EdgeLabel, TaskTemplateVocabulary

logger = logging.getLogger(__name__)

V = TaskTemplateVocabulary

UNBOUND_PREFIX = expat_errors.codes[expat_errors.XML_ERROR_UNBOUND_PREFIX]

# Result of walking one sequence: edges it emitted and the ids current at its end
WalkResult = Tuple[List[MissionEdge], List[str]]


class TaskGraphParser:
    """Parse a TaskTemplate document into a PlanGraph.

    Fails loudly: a missing root or an edge pointing at an undeclared task
    raises instead of returning a partial graph.
    """

    def parse(self, xml: str) -> PlanGraph:
        """Parse XML into a PlanGraph.

        Raises:
            MalformedPlanError: the document does not parse or has no TaskTemplate root
            DanglingReferenceError: a sequence references an undeclared task id
        """
        template = self._find_template(strip_namespaces(xml))

        nodes = self.index_atomic_tasks(template)

        edges: List[MissionEdge] = []
        action_sequence = first_child(template, V.ACTION_SEQUENCE)
        for sequence in children(action_sequence, V.SEQUENCE):
            emitted, _ = walk_sequence(sequence, [])
            edges.extend(emitted)

        verify_references(nodes, edges)

        logger.debug(f"Parsed task graph: {len(nodes)} nodes, {len(edges)} edges")
        return PlanGraph.create(nodes, edges)

    def _find_template(self, xml: str) -> ET.Element:
        try:
            root = parse_document(xml)
        except ET.ParseError as e:
            if e.code != UNBOUND_PREFIX:
                logger.error(f"Task plan XML could not be parsed: {e}")
                raise MalformedPlanError(f"Malformed document: {e}") from e
            root = self._parse_without_prefixes(xml)

        for element in root.iter():
            if local_name(element.tag) == V.ROOT:
                return element

        logger.error("TaskTemplate root not found")
        raise MalformedPlanError("Malformed document: TaskTemplate root not found")

    def _parse_without_prefixes(self, xml: str) -> ET.Element:
        # Declarations are already stripped, so leftover prefixes are unbound
        try:
            return parse_document(strip_prefixes(xml))
        except ET.ParseError as e:
            logger.error(f"Task plan XML could not be parsed: {e}")
            raise MalformedPlanError(f"Malformed document: {e}") from e

    def index_atomic_tasks(self, template: ET.Element) -> Dict[str, MissionNode]:
        """Build the node table; a repeated task id replaces the earlier node"""
        nodes: Dict[str, MissionNode] = {}
        for task in children(first_child(template, V.ATOMIC_TASKS), V.ATOMIC_TASK):
            node = self._build_node(task)
            if node is None:
                continue
            if node.id in nodes:
                logger.warning(f"Duplicate task id {node.id}; later declaration wins")
            nodes[node.id] = node
        return nodes

    def _build_node(self, task: ET.Element) -> Optional[MissionNode]:
        task_id = child_text(task, V.TASK_ID)
        if not task_id:
            logger.warning("Skipping AtomicTask without a TaskID")
            return None

        action = first_child(task, V.ACTION)
        return MissionNode(
            id=task_id,
            description=child_text(task, V.TASK_DESCRIPTION),
            action_type=child_text(action, V.ACTION_TYPE),
            geometry=extract_geometry(action),
            raw=element_to_dict(task),
        )


def extract_geometry(action: Optional[ET.Element]) -> Optional[GeoPoint]:
    """Latitude/longitude from the first location payload of an action, if valid"""
    if action is None:
        return None

    for payload_tag, (lat_field, lon_field) in V.LOCATION_PAYLOADS.items():
        payload = first_child(action, payload_tag)
        if payload is None:
            continue
        lat = parse_number(field_value(payload, lat_field))
        lon = parse_number(field_value(payload, lon_field))
        if lat is None or lon is None:
            logger.warning(f"Ignoring non-numeric coordinates in {payload_tag}")
            return None
        return GeoPoint(lat=lat, lon=lon)

    return None


def branch_label(conditional: ET.Element) -> str:
    # ReturnStatus is not part of the published schema; branches without it
    # fall back to an unconditional label
    return EdgeLabel.from_return_status(field_value(conditional, V.RETURN_STATUS))


def walk_sequence(sequence: Optional[ET.Element], frontier: List[str],
                  entry_label: str = EdgeLabel.UNCONDITIONAL) -> WalkResult:
    """Walk a Sequence in document order.

    Returns the edges emitted while walking and the new frontier: the task
    ids that a following step should attach to. ``entry_label`` applies to the
    edges into the sequence's first element when that element is a TaskID.
    """
    edges: List[MissionEdge] = []
    last = list(frontier)
    if sequence is None:
        return edges, last

    for index, item in enumerate(sequence):
        tag = local_name(item.tag)
        if tag == V.TASK_ID:
            task_id = (item.text or '').strip()
            label = entry_label if index == 0 else EdgeLabel.UNCONDITIONAL
            edges.extend(MissionEdge(p, task_id, label) for p in last)
            last = [task_id]
        elif tag == V.CONDITIONAL_ACTIONS:
            emitted, last = walk_conditional(item, last)
            edges.extend(emitted)

    return edges, last


def walk_conditional(block: ET.Element, frontier: List[str]) -> WalkResult:
    """Walk one ConditionalActions block with join semantics.

    Branch i pairs Conditional i with Sequence i; a block with a single
    Sequence shares it between all of its branches, so identical edges and
    exits are kept once. Successors of the block attach to the union of the
    branch exits.
    """
    edges: List[MissionEdge] = []
    joiners: List[str] = []

    sequences = children(block, V.SEQUENCE)
    for i, conditional in enumerate(children(block, V.CONDITIONAL)):
        if i < len(sequences):
            branch_sequence = sequences[i]
        elif len(sequences) == 1:
            branch_sequence = sequences[0]
        else:
            logger.warning(f"Conditional branch {i} has no Sequence")
            continue

        emitted, exits = walk_sequence(branch_sequence, frontier, entry_label=branch_label(conditional))
        for edge in emitted:
            if edge not in edges:
                edges.append(edge)
        for task_id in exits:
            if task_id not in joiners:
                joiners.append(task_id)

    return edges, (joiners if joiners else list(frontier))


def verify_references(nodes: Dict[str, MissionNode], edges: List[MissionEdge]) -> None:
    """Raise on the first edge whose endpoint is not a declared task"""
    for edge in edges:
        if edge.source not in nodes:
            logger.error(f"Edge source {edge.source} is undefined")
            raise DanglingReferenceError(edge.source, role="source")
        if edge.target not in nodes:
            logger.error(f"Edge target {edge.target} is undefined")
            raise DanglingReferenceError(edge.target, role="target")


def parse_task_plan(xml: str) -> PlanGraph:
    """Convenience wrapper around TaskGraphParser().parse"""
    return TaskGraphParser().parse(xml)
