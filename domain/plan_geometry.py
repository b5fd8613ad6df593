"""Projected geometry domain model for the behavior-tree plan dialect"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

Coordinate = Tuple[float, float]  # (longitude, latitude)

@dataclass(frozen=True)
class ProjectionState:
    """Dead-reckoning accumulator threaded through the action fold"""
    position: Optional[Coordinate]
    heading: float = 0.0

    def moved_to(self, position: Coordinate) -> 'ProjectionState':
        return replace(self, position=position)

    def turned_to(self, heading: float) -> 'ProjectionState':
        return replace(self, heading=heading)

@dataclass(frozen=True)
class PlanStep:
    """One projected step of a mission, in document order"""
    coordinate: Optional[Coordinate]
    name: str
    action: str
    category: str = 'task'
    draw_segment: bool = False
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'coordinate': list(self.coordinate) if self.coordinate else None,
            'name': self.name,
            'action': self.action,
            'type': self.category,
            'drawSegment': self.draw_segment,
            'details': self.details,
        }

def empty_feature_collection() -> Dict[str, Any]:
    return {'type': 'FeatureCollection', 'features': []}

@dataclass(frozen=True)
class PlanGeometry:
    """Ordered path coordinates plus a renderer-ready feature collection"""
    coordinates: Tuple[Coordinate, ...] = ()
    # Plain dict so it serializes directly; left out of the hash
    feature_collection: Dict[str, Any] = field(default_factory=empty_feature_collection, hash=False)
    steps: Tuple[PlanStep, ...] = ()

    @classmethod
    def empty(cls) -> 'PlanGeometry':
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.coordinates and not self.feature_collection['features']

    def to_dict(self) -> Dict[str, Any]:
        return {
            'coordinates': [list(c) for c in self.coordinates],
            'featureCollection': self.feature_collection,
        }
