"""Dead-reckoning projector for the flat behavior-tree plan dialect"""
import logging
import xml.etree.ElementTree as ET
from functools import reduce
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from domain.plan_geometry import Coordinate, PlanGeometry, PlanStep, ProjectionState
from .geodesy import (COORDINATE_TOLERANCE, EARTH_RADIUS_M, MIN_COS_LATITUDE,
                      almost_equal_coord, move_relative, normalize_degrees)
from .tree import local_name, parse_document, parse_number
from .vocabulary import BehaviorTreeVocabulary, StepCategory

logger = logging.getLogger(__name__)

V = BehaviorTreeVocabulary

# (state after the last folded action, steps recorded so far)
FoldResult = Tuple[ProjectionState, List[PlanStep]]


class MissionGeometryProjector:
    """Project a behavior-tree plan onto map coordinates.

    Fails soft: empty input, unparseable XML or a document without a
    BehaviorTree yields an empty geometry instead of raising.
    """

    def __init__(self,
                 earth_radius_m: float = EARTH_RADIUS_M,
                 coordinate_tolerance: float = COORDINATE_TOLERANCE,
                 min_cos_latitude: float = MIN_COS_LATITUDE,
                 initial_heading_deg: float = 0.0,
                 action_tags: Optional[Iterable[str]] = None):
        self.earth_radius_m = earth_radius_m
        self.coordinate_tolerance = coordinate_tolerance
        self.min_cos_latitude = min_cos_latitude
        self.initial_heading_deg = normalize_degrees(initial_heading_deg)
        self.action_tags: FrozenSet[str] = frozenset(action_tags) if action_tags else V.ACTION_TAGS

    def project(self, xml: str, origin: Coordinate) -> PlanGeometry:
        """Walk the plan's actions from ``origin`` (lon, lat) and build its geometry"""
        if not xml or not xml.strip():
            return PlanGeometry.empty()

        try:
            root = parse_document(xml)
        except ET.ParseError as e:
            logger.error(f"Failed to parse mission plan XML: {e}")
            return PlanGeometry.empty()

        trees = [el for el in root.iter() if local_name(el.tag) == V.ROOT]
        if not trees:
            logger.debug("No BehaviorTree element found in mission plan")
            return PlanGeometry.empty()

        actions: List[ET.Element] = []
        for tree in trees:
            for child in tree:
                self.collect_actions(child, actions)

        steps = self.build_steps(actions, origin)
        feature_collection, coordinates = self.build_feature_collection(steps)
        return PlanGeometry(
            coordinates=tuple(coordinates),
            feature_collection=feature_collection,
            steps=tuple(steps),
        )

    def collect_actions(self, node: ET.Element, collector: List[ET.Element]) -> None:
        """Depth-first collection of whitelisted actions; actions are leaves"""
        if local_name(node.tag) in self.action_tags:
            collector.append(node)
            return
        for child in node:
            self.collect_actions(child, collector)

    def build_steps(self, actions: Sequence[ET.Element], origin: Coordinate) -> List[PlanStep]:
        """Fold the ordered actions into steps, threading position and heading"""
        start_state = ProjectionState(position=(float(origin[0]), float(origin[1])),
                                      heading=self.initial_heading_deg)
        start = PlanStep(
            coordinate=start_state.position,
            name='Start',
            action='Start',
            category=StepCategory.START,
            draw_segment=False,
        )

        def fold(acc: FoldResult, action: ET.Element) -> FoldResult:
            state, steps = acc
            next_state, step = self.apply_action(state, action)
            return next_state, steps + [step]

        _, steps = reduce(fold, actions, (start_state, [start]))
        return steps

    def apply_action(self, state: ProjectionState, action: ET.Element) -> Tuple[ProjectionState, PlanStep]:
        """Compute the state after one action and the step describing it"""
        tag = local_name(action.tag)
        step = PlanStep(
            coordinate=state.position,
            name=action.get('name') or tag,
            action=tag,
            category=StepCategory.TASK,
            draw_segment=False,
        )

        if tag == V.MOVE_RELATIVE:
            return self._relative_move(state, action, step)
        if tag == V.MOVE_TO_GPS:
            return self._gps_move(state, action, step)
        if tag == V.ORIENT_HEADING:
            return self._orient(state, action, step)
        return state, step

    def _relative_move(self, state: ProjectionState, action: ET.Element, step: PlanStep) -> Tuple[ProjectionState, PlanStep]:
        forward = offset_number(action, 'x')
        left = offset_number(action, 'y')
        if forward is None or left is None or state.position is None:
            logger.warning(f"Relative move '{step.name}' has non-numeric offsets; kept in place")
            return state, step

        position = move_relative(state.position, state.heading, forward, left,
                                 self.earth_radius_m, self.min_cos_latitude)
        return state.moved_to(position), PlanStep(
            coordinate=position,
            name=step.name,
            action=step.action,
            category=StepCategory.RELATIVE_MOVE,
            draw_segment=True,
            details=f"Relative move: forward {forward:.1f}m, left {left:.1f}m",
        )

    def _gps_move(self, state: ProjectionState, action: ET.Element, step: PlanStep) -> Tuple[ProjectionState, PlanStep]:
        lat = parse_number(action.get('latitude'))
        lon = parse_number(action.get('longitude'))
        if lat is None or lon is None:
            logger.warning(f"GPS move '{step.name}' has non-numeric coordinates; kept in place")
            return state, step

        position = (lon, lat)
        return state.moved_to(position), PlanStep(
            coordinate=position,
            name=step.name,
            action=step.action,
            category=StepCategory.GPS_MOVE,
            draw_segment=True,
            details=f"Move to GPS location ({lat:.6f}, {lon:.6f})",
        )

    def _orient(self, state: ProjectionState, action: ET.Element, step: PlanStep) -> Tuple[ProjectionState, PlanStep]:
        yaw = offset_number(action, 'yaw')
        if yaw is None:
            logger.warning(f"Heading change '{step.name}' has a non-numeric yaw; ignored")
            return state, step

        absolute = (action.get('absolute') or '').strip().lower() == 'true'
        heading = normalize_degrees(yaw if absolute else state.heading + yaw)
        return state.turned_to(heading), PlanStep(
            coordinate=state.position,
            name=step.name,
            action=step.action,
            category=StepCategory.ORIENTATION,
            draw_segment=False,
            details=f"{'Absolute' if absolute else 'Relative'} heading set to {heading:.1f}°",
        )

    def build_feature_collection(self, steps: Sequence[PlanStep]) -> Tuple[Dict[str, Any], List[Coordinate]]:
        """Points for every located step, segments between moved steps, path first"""
        point_features: List[Dict[str, Any]] = []
        line_features: List[Dict[str, Any]] = []
        coordinates: List[Coordinate] = []

        segment_origin = steps[0].coordinate if steps else None

        for index, step in enumerate(steps):
            if step.coordinate is None:
                continue

            coordinates.append(step.coordinate)
            point_features.append({
                'type': 'Feature',
                'properties': {
                    'index': index + 1,
                    'label': f"{index + 1}. {step.name}",
                    'action': step.action,
                    'type': step.category,
                    'details': step.details,
                },
                'geometry': {'type': 'Point', 'coordinates': list(step.coordinate)},
            })

            if (segment_origin is not None and step.draw_segment
                    and not almost_equal_coord(segment_origin, step.coordinate, self.coordinate_tolerance)):
                line_features.append({
                    'type': 'Feature',
                    'properties': {
                        'fromStep': index,
                        'toStep': index + 1,
                        'label': step.name,
                        'type': step.category,
                    },
                    'geometry': {
                        'type': 'LineString',
                        'coordinates': [list(segment_origin), list(step.coordinate)],
                    },
                })

            segment_origin = step.coordinate

        if self._has_distinct_points(coordinates):
            line_features.insert(0, {
                'type': 'Feature',
                'properties': {'label': 'Path', 'type': 'path'},
                'geometry': {'type': 'LineString', 'coordinates': [list(c) for c in coordinates]},
            })

        logger.debug(f"Projected {len(steps)} steps into {len(line_features)} lines")
        return {'type': 'FeatureCollection', 'features': line_features + point_features}, coordinates

    def _has_distinct_points(self, coordinates: Sequence[Coordinate]) -> bool:
        if len(coordinates) < 2:
            return False
        first = coordinates[0]
        return any(not almost_equal_coord(first, c, self.coordinate_tolerance) for c in coordinates[1:])


def offset_number(action: ET.Element, name: str) -> Optional[float]:
    """Numeric offset attribute; a missing or blank value counts as zero"""
    raw = action.get(name)
    if raw is None or not raw.strip():
        return 0.0
    return parse_number(raw)

def build_plan_geometry(xml: str, origin: Coordinate) -> PlanGeometry:
    """Convenience wrapper around MissionGeometryProjector().project"""
    return MissionGeometryProjector().project(xml, origin)
