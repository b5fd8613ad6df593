"""Navigable element tree helpers shared by both dialect parsers"""
import math
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def parse_document(xml: str) -> ET.Element:
    """Parse XML text into an element tree root; raises ET.ParseError."""
    return ET.fromstring(xml.strip())


def local_name(tag: str) -> str:
    """Drop a '{namespace}' qualifier from an element tag"""
    if isinstance(tag, str) and tag.startswith('{'):
        return tag.split('}', 1)[1]
    return tag


def as_list(value: Any) -> List[Any]:
    """Treat a missing value, a single value and a list uniformly"""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def children(element: Optional[ET.Element], name: str) -> List[ET.Element]:
    """All direct children with the given local name, in document order"""
    if element is None:
        return []
    return [child for child in element if local_name(child.tag) == name]


def first_child(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    found = children(element, name)
    return found[0] if found else None


def child_text(element: Optional[ET.Element], name: str) -> Optional[str]:
    """Stripped text of the first child with the given name, or None"""
    child = first_child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def field_value(element: Optional[ET.Element], name: str) -> Optional[str]:
    """Read a field written either as a child element or as an attribute"""
    if element is None:
        return None
    text = child_text(element, name)
    if text is not None:
        return text
    value = element.get(name)
    return value.strip() if value is not None else None


def parse_number(text: Optional[str]) -> Optional[float]:
    """Parse a finite float, returning None for missing or non-numeric text"""
    if text is None:
        return None
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def element_to_dict(element: ET.Element) -> Any:
    """Convert an element into plain dicts, lists and strings.

    Attributes become keys, repeated sibling elements become lists and a
    text-only element collapses to its text.
    """
    result: Dict[str, Any] = {}
    for key, value in element.attrib.items():
        result[local_name(key)] = value

    for child in element:
        name = local_name(child.tag)
        value = element_to_dict(child)
        if name in result:
            existing = result[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[name] = [existing, value]
        else:
            result[name] = value

    text = (element.text or '').strip()
    if not result:
        return text
    if text:
        result['#text'] = text
    return result
