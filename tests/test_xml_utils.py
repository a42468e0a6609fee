# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for xml_utils module."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET

import pytest

from genro_extensions.config import configure
from genro_extensions.errors import ParseError
from genro_extensions.xml_utils import (
    dict_to_xml,
    inner_text,
    json_to_xml,
    xml_to_dict,
    xml_to_json,
)

PERSON_XML = '<person id="1"><name>Ann</name><tag>a</tag><tag>b</tag></person>'


def assert_round_trip(document: str) -> None:
    """XML -> mapping -> XML gives a document with the same mapping."""
    data = xml_to_dict(document)
    assert xml_to_dict(dict_to_xml(data)) == data


# =============================================================================
# Tests: inner_text
# =============================================================================


class TestInnerText:
    """Tests for inner_text."""

    def test_descendants(self) -> None:
        """Text of all descendants is concatenated in document order."""
        node = ET.fromstring("<a>x<b>y<c>z</c></b>w</a>")
        assert inner_text(node) == "xyzw"

    def test_empty(self) -> None:
        """Empty nodes and None give an empty string."""
        assert inner_text(ET.fromstring("<a/>")) == ""
        assert inner_text(None) == ""


# =============================================================================
# Tests: XML -> mapping / JSON
# =============================================================================


class TestXmlToDict:
    """Tests for xml_to_dict and xml_to_json."""

    def test_structure(self) -> None:
        """Attributes are prefixed, repeated tags become lists."""
        assert xml_to_dict(PERSON_XML) == {
            "person": {"@id": "1", "name": "Ann", "tag": ["a", "b"]}
        }

    def test_leaves(self) -> None:
        """Bare elements become their text, or None when empty."""
        assert xml_to_dict("<a>hi</a>") == {"a": "hi"}
        assert xml_to_dict("<a/>") == {"a": None}
        assert xml_to_dict('<a x="1"/>') == {"a": {"@x": "1"}}

    def test_text_with_attributes(self) -> None:
        """Text next to attributes goes under the text key."""
        assert xml_to_dict('<a x="1">hi</a>') == {"a": {"@x": "1", "#text": "hi"}}

    def test_mixed_content(self) -> None:
        """Text interleaved with children becomes a list of segments."""
        assert xml_to_dict("<p>Hello <b>world</b> again</p>") == {
            "p": {"b": "world", "#text": ["Hello ", " again"]}
        }

    def test_whitespace_is_ignored(self) -> None:
        """Indentation does not produce text entries."""
        assert xml_to_dict("<a>\n  <b>1</b>\n  <c/>\n</a>") == {"a": {"b": "1", "c": None}}

    def test_namespaces(self) -> None:
        """Namespaced tags use the {uri}local form."""
        data = xml_to_dict('<root xmlns="urn:x"><item>1</item></root>')
        assert data == {"{urn:x}root": {"{urn:x}item": "1"}}

    def test_malformed(self) -> None:
        """Broken or empty documents raise ParseError."""
        for text in ("<a>", "", "not xml", "<a></b>"):
            with pytest.raises(ParseError):
                xml_to_dict(text)

    def test_parse_error_is_value_error(self) -> None:
        """ParseError is a ValueError."""
        with pytest.raises(ValueError):
            xml_to_json("<a>")

    def test_to_json(self) -> None:
        """The mapping is serialized as JSON."""
        assert xml_to_json('<a x="1">hi</a>') == '{"a": {"@x": "1", "#text": "hi"}}'
        assert json.loads(xml_to_json(PERSON_XML, indent=2)) == xml_to_dict(PERSON_XML)

    def test_custom_keys(self) -> None:
        """Prefix and text key come from the settings."""
        configure(xml_attribute_prefix="-", xml_text_key="$")
        assert xml_to_dict('<a x="1">hi</a>') == {"a": {"-x": "1", "$": "hi"}}


# =============================================================================
# Tests: mapping / JSON -> XML
# =============================================================================


class TestDictToXml:
    """Tests for dict_to_xml and json_to_xml."""

    def test_structure(self) -> None:
        """Prefixed keys become attributes, lists repeat the element."""
        data = {"person": {"@id": "1", "name": "Ann", "tag": ["a", "b"]}}
        assert dict_to_xml(data) == PERSON_XML

    def test_scalars(self) -> None:
        """Scalars are written as text, booleans in lower case."""
        assert dict_to_xml({"a": {"n": 5, "ok": True, "none": None}}) == (
            "<a><n>5</n><ok>true</ok><none /></a>"
        )

    def test_mixed_content(self) -> None:
        """Text segments are placed around the children."""
        data = {"p": {"b": "world", "#text": ["Hello ", " again"]}}
        assert dict_to_xml(data) == "<p>Hello <b>world</b> again</p>"

    def test_root_name(self) -> None:
        """root_name wraps several top-level keys."""
        assert dict_to_xml({"a": 1, "b": 2}, root_name="root") == "<root><a>1</a><b>2</b></root>"

    def test_needs_single_root(self) -> None:
        """Zero, several or repeated roots raise ParseError."""
        for data in ({}, {"a": 1, "b": 2}, {"a": [1, 2]}):
            with pytest.raises(ParseError):
                dict_to_xml(data)

    def test_invalid_names(self) -> None:
        """Keys that are not XML names raise ParseError."""
        for data in ({"1bad": 1}, {"a b": 1}, {"a": {"@1x": "v"}}):
            with pytest.raises(ParseError):
                dict_to_xml(data)

    def test_nested_value_in_attribute(self) -> None:
        """Attribute values must be scalars."""
        with pytest.raises(ParseError):
            dict_to_xml({"a": {"@x": {"y": 1}}})

    def test_declaration(self) -> None:
        """The XML declaration is prepended on request."""
        assert dict_to_xml({"a": 1}, xml_declaration=True) == (
            '<?xml version="1.0" encoding="utf-8"?><a>1</a>'
        )

    def test_escaping(self) -> None:
        """Special characters are escaped."""
        assert dict_to_xml({"a": {"@q": 'x"y', "#text": "1 < 2 & 3"}}) == (
            '<a q="x&quot;y">1 &lt; 2 &amp; 3</a>'
        )

    def test_from_json(self) -> None:
        """JSON objects are converted through the mapping model."""
        assert json_to_xml('{"a": {"@x": "1", "#text": "hi"}}') == '<a x="1">hi</a>'
        assert json_to_xml('{"n": 1, "m": 2}', root_name="r") == "<r><n>1</n><m>2</m></r>"

    def test_from_bad_json(self) -> None:
        """Invalid JSON or a non-object document raises ParseError."""
        for text in ("not json", "[1, 2]", '"a"'):
            with pytest.raises(ParseError):
                json_to_xml(text)

    def test_from_undecodable_bytes(self) -> None:
        """Bytes that are not valid UTF-8 raise ParseError."""
        with pytest.raises(ParseError) as exc_info:
            json_to_xml(b'{"a": "\xff"}')
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_non_ascii_names(self) -> None:
        """Letters outside ASCII are valid name characters."""
        assert dict_to_xml({"été": {"@größe": "1", "ñame": "x"}}) == (
            '<été größe="1"><ñame>x</ñame></été>'
        )

    def test_custom_keys(self) -> None:
        """Prefix and text key come from the settings."""
        configure(xml_attribute_prefix="-", xml_text_key="$")
        assert dict_to_xml({"a": {"-x": "1", "$": "hi"}}) == '<a x="1">hi</a>'


# =============================================================================
# Tests: round trips
# =============================================================================


class TestRoundTrip:
    """Tests for XML -> mapping -> XML."""

    @pytest.mark.parametrize(
        "document",
        [
            PERSON_XML,
            "<a>hi</a>",
            "<a/>",
            "<p>Hello <b>world</b> again</p>",
            '<root xmlns="urn:x" xmlns:y="urn:y"><item y:k="v">1</item><y:other/></root>',
            '<été><name>x</name><ñame größe="1">y</ñame></été>',
        ],
    )
    def test_structure_is_preserved(self, document: str) -> None:
        """The mapping survives a trip through XML."""
        assert_round_trip(document)

    def test_json_round_trip(self) -> None:
        """XML -> JSON -> XML keeps the mapping."""
        assert xml_to_dict(json_to_xml(xml_to_json(PERSON_XML))) == xml_to_dict(PERSON_XML)

    def test_json_round_trip_non_ascii_names(self) -> None:
        """Non-ASCII tag and attribute names survive XML -> JSON -> XML."""
        document = '<été><name>x</name><ñame größe="1">y</ñame></été>'
        assert xml_to_dict(json_to_xml(xml_to_json(document))) == xml_to_dict(document)
