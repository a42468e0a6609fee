# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""
XML helpers and XML/JSON interconversion.

The bridge between the two notations is a plain mapping model:

- the document becomes ``{root_tag: value}``;
- an element with neither attributes nor children becomes its text,
  or None when empty;
- otherwise it becomes a dict where attributes are keys prefixed with ``@``,
  child elements are keys named after their tag (a list when the tag
  repeats) and text is stored under ``#text`` (a list when the text is
  interleaved with children).

Example::

    >>> xml_to_dict('<person id="1"><name>Ann</name><tag>a</tag><tag>b</tag></person>')
    {'person': {'@id': '1', 'name': 'Ann', 'tag': ['a', 'b']}}
    >>> dict_to_xml({'person': {'@id': '1', 'name': 'Ann'}})
    '<person id="1"><name>Ann</name></person>'

Prefix and text key come from the ``xml_attribute_prefix`` and
``xml_text_key`` settings. Whitespace-only text is ignored; namespaced tags
use ElementTree's ``{uri}local`` form.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any

from .config import get_settings
from .errors import ParseError

__all__ = [
    "dict_to_xml",
    "inner_text",
    "json_to_xml",
    "xml_to_dict",
    "xml_to_json",
]

_XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
_NAME_RE = re.compile(r"(?:\{[^}]*\})?[^\W\d][\w.\-]*(?::[^\W\d][\w.\-]*)?")


def inner_text(node: ET.Element | None) -> str:
    """Return the concatenated text of ``node`` and its descendants; '' for None."""
    if node is None:
        return ""
    return "".join(node.itertext())


# -----------------------------------------------------------------------------
# XML -> mapping
# -----------------------------------------------------------------------------


def _text_segments(elem: ET.Element) -> list[str]:
    segments = [elem.text] + [child.tail for child in elem]
    return [s for s in segments if s is not None and s.strip()]


def _element_value(elem: ET.Element, prefix: str, text_key: str) -> Any:
    texts = _text_segments(elem)
    if not elem.attrib and len(elem) == 0:
        return texts[0] if texts else None

    result: dict[str, Any] = {f"{prefix}{k}": v for k, v in elem.attrib.items()}
    for child in elem:
        value = _element_value(child, prefix, text_key)
        # Element values are never lists, so a list here groups repeated tags.
        if child.tag not in result:
            result[child.tag] = value
        elif isinstance(result[child.tag], list):
            result[child.tag].append(value)
        else:
            result[child.tag] = [result[child.tag], value]
    if texts:
        result[text_key] = texts[0] if len(texts) == 1 else texts
    return result


def _parse_xml(text: str | bytes) -> ET.Element:
    if not text:
        raise ParseError("Empty XML document")
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise ParseError(f"Malformed XML: {exc}") from exc


def xml_to_dict(text: str | bytes) -> dict[str, Any]:
    """
    Parse an XML document into the mapping model.

    Raises:
        ParseError: If ``text`` is empty or not well-formed XML.
    """
    settings = get_settings()
    root = _parse_xml(text)
    return {
        root.tag: _element_value(
            root, settings.xml_attribute_prefix, settings.xml_text_key
        )
    }


def xml_to_json(text: str | bytes, indent: int | None = None) -> str:
    """
    Convert an XML document to JSON text.

    Examples:
        >>> xml_to_json('<a x="1">hi</a>')
        '{"a": {"@x": "1", "#text": "hi"}}'

    Raises:
        ParseError: If ``text`` is not well-formed XML.
    """
    return json.dumps(xml_to_dict(text), indent=indent, ensure_ascii=False)


# -----------------------------------------------------------------------------
# mapping -> XML
# -----------------------------------------------------------------------------


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
        raise ParseError(f"Invalid XML name: {name!r}")
    return name


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        raise ParseError(f"Expected a scalar value, got {type(value).__name__}")
    return str(value)


def _build(tag: str, value: Any, prefix: str, text_key: str) -> list[ET.Element]:
    """Build the element(s) for ``tag``; a list value gives repeated elements."""
    if isinstance(value, list):
        elements: list[ET.Element] = []
        for item in value:
            elements.extend(_build(tag, item, prefix, text_key))
        return elements

    elem = ET.Element(_check_name(tag))
    if isinstance(value, Mapping):
        children: list[ET.Element] = []
        texts: list[str] = []
        for key, item in value.items():
            if key == text_key:
                items = item if isinstance(item, list) else [item]
                texts.extend(_scalar_text(t) for t in items)
            elif isinstance(key, str) and key.startswith(prefix):
                elem.set(_check_name(key[len(prefix):]), _scalar_text(item))
            else:
                children.extend(_build(key, item, prefix, text_key))
        elem.extend(children)
        _place_texts(elem, children, texts)
    elif value is not None:
        elem.text = _scalar_text(value)
    return [elem]


def _place_texts(elem: ET.Element, children: list[ET.Element], texts: list[str]) -> None:
    # First segment is the element text, the others follow each child in turn.
    if not texts:
        return
    elem.text = texts[0]
    for child, segment in zip(children, texts[1:]):
        child.tail = segment
    extra = "".join(texts[1 + len(children):])
    if extra:
        if children:
            children[-1].tail = (children[-1].tail or "") + extra
        else:
            elem.text += extra


def dict_to_xml(
    data: Mapping[str, Any],
    root_name: str | None = None,
    xml_declaration: bool = False,
) -> str:
    """
    Serialize the mapping model to an XML document.

    Args:
        data: ``{root_tag: value}``, or the root content when ``root_name``
            is given.
        root_name: Wrap ``data`` in an element with this tag.
        xml_declaration: Prepend ``<?xml version="1.0" encoding="utf-8"?>``.

    Raises:
        ParseError: If ``data`` does not describe exactly one root element or
            contains invalid names.
    """
    settings = get_settings()
    prefix, text_key = settings.xml_attribute_prefix, settings.xml_text_key

    if not isinstance(data, Mapping):
        raise ParseError(f"Expected a mapping, got {type(data).__name__}")
    if root_name is not None:
        roots = _build(root_name, data, prefix, text_key)
    else:
        if len(data) != 1:
            raise ParseError(
                f"Document must have exactly one root element, got {len(data)}; "
                "use root_name to wrap several properties"
            )
        ((tag, value),) = data.items()
        roots = _build(tag, value, prefix, text_key)
    if len(roots) != 1:
        raise ParseError(f"Document must have exactly one root element, got {len(roots)}")

    result = ET.tostring(roots[0], encoding="unicode")
    if xml_declaration:
        result = _XML_DECLARATION + result
    return result


def json_to_xml(
    text: str | bytes,
    root_name: str | None = None,
    xml_declaration: bool = False,
) -> str:
    """
    Convert a JSON document to XML text.

    The JSON document must be an object; see ``dict_to_xml`` for the rules.

    Examples:
        >>> json_to_xml('{"a": {"@x": "1", "#text": "hi"}}')
        '<a x="1">hi</a>'

    Raises:
        ParseError: If ``text`` is not valid JSON or does not describe a
            single-rooted document.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Malformed JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"JSON bytes are not valid text: {exc}") from exc
    except TypeError as exc:
        raise ParseError(f"Invalid JSON input: {exc}") from exc
    return dict_to_xml(data, root_name=root_name, xml_declaration=xml_declaration)
