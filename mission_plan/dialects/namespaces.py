"""Namespace stripping for plan documents"""
import re

_XMLNS_DECLARATION = re.compile(r'xmlns(:\w+)?="[^"]*"')


def strip_namespaces(xml: str) -> str:
    """Remove xmlns / xmlns:prefix declarations so tags match without namespaces.

    Tag names and all other attributes are left as they are. Malformed XML is
    not detected here.
    """
    return _XMLNS_DECLARATION.sub('', xml)


_TAG_PREFIX = re.compile(r'<(/?)[A-Za-z_][\w.-]*:(?=[A-Za-z_])')
_ATTRIBUTE_PREFIX = re.compile(r'(\s)[A-Za-z_][\w.-]*:([A-Za-z_][\w.-]*\s*=)')


def strip_prefixes(xml: str) -> str:
    """Drop 'prefix:' from element and attribute names.

    Used once declarations are gone and leftover prefixed names such as
    xsi:schemaLocation would otherwise be unbound.
    """
    return _ATTRIBUTE_PREFIX.sub(r'\1\2', _TAG_PREFIX.sub(r'<\1', xml))
