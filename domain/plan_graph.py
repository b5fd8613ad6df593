"""Task graph domain model for the task-template plan dialect"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class GeoPoint:
    """Geographic point in degrees"""
    lat: float
    lon: float

    def to_dict(self) -> Dict[str, float]:
        return {'lat': self.lat, 'lon': self.lon}

@dataclass(frozen=True)
class MissionNode:
    """One atomic task declared in a plan"""
    id: str
    description: Optional[str] = None
    action_type: Optional[str] = None
    geometry: Optional[GeoPoint] = None
    raw: Any = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'description': self.description,
            'actionType': self.action_type,
            'geometry': self.geometry.to_dict() if self.geometry else None,
            'raw': self.raw,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MissionNode':
        geometry = data.get('geometry')
        return cls(
            id=data['id'],
            description=data.get('description'),
            action_type=data.get('actionType'),
            geometry=GeoPoint(lat=float(geometry['lat']), lon=float(geometry['lon'])) if geometry else None,
            raw=data.get('raw'),
        )

@dataclass(frozen=True)
class MissionEdge:
    """Control-flow transition between two tasks"""
    source: str
    target: str
    label: str = 'unconditional'

    def to_dict(self) -> Dict[str, str]:
        return {'from': self.source, 'to': self.target, 'label': self.label}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'MissionEdge':
        return cls(source=data['from'], target=data['to'], label=data.get('label', 'unconditional'))

@dataclass(frozen=True)
class PlanGraph:
    """Immutable task graph: node table keyed by task id plus ordered edges"""
    nodes: Mapping[str, MissionNode]
    edges: Tuple[MissionEdge, ...] = ()

    @classmethod
    def create(cls, nodes: Dict[str, MissionNode], edges: List[MissionEdge]) -> 'PlanGraph':
        """Freeze a freshly built node table and edge list"""
        return cls(nodes=MappingProxyType(dict(nodes)), edges=tuple(edges))

    def successors(self, task_id: str) -> List[MissionEdge]:
        return [edge for edge in self.edges if edge.source == task_id]

    def located_nodes(self) -> List[MissionNode]:
        return [node for node in self.nodes.values() if node.geometry is not None]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the {'nodes': ..., 'edges': ...} interchange shape"""
        return {
            'nodes': {task_id: node.to_dict() for task_id, node in self.nodes.items()},
            'edges': [edge.to_dict() for edge in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlanGraph':
        """Load the interchange shape; raises DanglingReferenceError on unknown edge endpoints"""
        from mission_plan.dialects.task_graph_parser import verify_references

        nodes = {task_id: MissionNode.from_dict(node) for task_id, node in data.get('nodes', {}).items()}
        edges = [MissionEdge.from_dict(edge) for edge in data.get('edges', [])]
        verify_references(nodes, edges)
        return cls.create(nodes, edges)

    def to_feature_collection(self) -> Dict[str, Any]:
        """Map-ready features: one line per located edge, then one marker per located node.

        Edges are kept only when both endpoints carry geometry.
        """
        features: List[Dict[str, Any]] = []
        for edge in self.edges:
            a = self.nodes[edge.source].geometry
            b = self.nodes[edge.target].geometry
            if a is None or b is None:
                continue
            features.append({
                'type': 'Feature',
                'properties': {'label': edge.label, 'from': edge.source, 'to': edge.target},
                'geometry': {
                    'type': 'LineString',
                    'coordinates': [[a.lon, a.lat], [b.lon, b.lat]],
                },
            })

        for node in self.located_nodes():
            features.append({
                'type': 'Feature',
                'properties': {
                    'marker': True,
                    'id': node.id,
                    'description': node.description,
                    'actionType': node.action_type,
                },
                'geometry': {
                    'type': 'Point',
                    'coordinates': [node.geometry.lon, node.geometry.lat],
                },
            })

        logger.debug(f"Graph feature collection: {len(features)} features")
        return {'type': 'FeatureCollection', 'features': features}
