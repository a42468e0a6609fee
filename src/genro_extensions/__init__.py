"""
Genro-Extensions - Conversion and introspection helpers for the Genro ecosystem.

Strict and defaulting value conversions, name-based member access, string
helpers and XML/JSON interconversion.
"""

__version__ = "0.1.0"

from .config import Settings, configure, get_settings, reset_settings
from .conversion import (
    DB_NULL,
    Unit,
    change_type,
    from_bytes,
    get_value,
    get_value_or,
    stream_to_bytes,
    to_bool,
    to_byte,
    to_byte_or,
    to_bytes,
    to_datetime,
    to_datetime_or,
    to_decimal,
    to_decimal_or,
    to_double,
    to_double_or,
    to_float,
    to_float_or,
    to_guid,
    to_guid_or,
    to_int16,
    to_int16_or,
    to_int32,
    to_int32_or,
    to_int64,
    to_int64_or,
    to_single,
    to_single_or,
    to_timespan,
    to_timespan_or,
    to_unit,
)
from .errors import (
    AmbiguousMatchError,
    DigestEncodingError,
    FormatError,
    GenroExtensionsError,
    InvalidCastError,
    InvocationError,
    MemberAccessError,
    MemberNotFoundError,
    NullInputError,
    NumericOverflowError,
    ParseError,
    SerializationError,
    StreamReadError,
    TypeMismatchError,
)
from .introspection import (
    MethodInfo,
    PropertyInfo,
    get_field_value,
    get_method_info,
    get_property_info,
    get_property_type,
    get_property_value,
    get_property_value_at,
    invoke_method,
    invoke_method_with_args,
    invoke_method_with_types,
    list_methods,
    list_properties,
    set_field_value,
    set_property_value,
    set_property_value_at,
)
from .numbers import NumberFormat, NumberStyle
from .strings import capitalize, join_chars, remove_special_characters, split, to_md5
from .typeutils import is_nullable, safe_is_instance
from .xml_utils import dict_to_xml, inner_text, json_to_xml, xml_to_dict, xml_to_json

__all__ = [
    # config
    "Settings",
    "configure",
    "get_settings",
    "reset_settings",
    # conversion
    "DB_NULL",
    "Unit",
    "change_type",
    "from_bytes",
    "get_value",
    "get_value_or",
    "stream_to_bytes",
    "to_bool",
    "to_byte",
    "to_byte_or",
    "to_bytes",
    "to_datetime",
    "to_datetime_or",
    "to_decimal",
    "to_decimal_or",
    "to_double",
    "to_double_or",
    "to_float",
    "to_float_or",
    "to_guid",
    "to_guid_or",
    "to_int16",
    "to_int16_or",
    "to_int32",
    "to_int32_or",
    "to_int64",
    "to_int64_or",
    "to_single",
    "to_single_or",
    "to_timespan",
    "to_timespan_or",
    "to_unit",
    # numbers
    "NumberFormat",
    "NumberStyle",
    # errors
    "AmbiguousMatchError",
    "DigestEncodingError",
    "FormatError",
    "GenroExtensionsError",
    "InvalidCastError",
    "InvocationError",
    "MemberAccessError",
    "MemberNotFoundError",
    "NullInputError",
    "NumericOverflowError",
    "ParseError",
    "SerializationError",
    "StreamReadError",
    "TypeMismatchError",
    # introspection
    "MethodInfo",
    "PropertyInfo",
    "get_field_value",
    "get_method_info",
    "get_property_info",
    "get_property_type",
    "get_property_value",
    "get_property_value_at",
    "invoke_method",
    "invoke_method_with_args",
    "invoke_method_with_types",
    "list_methods",
    "list_properties",
    "set_field_value",
    "set_property_value",
    "set_property_value_at",
    # strings
    "capitalize",
    "join_chars",
    "remove_special_characters",
    "split",
    "to_md5",
    # typeutils
    "is_nullable",
    "safe_is_instance",
    # xml
    "dict_to_xml",
    "inner_text",
    "json_to_xml",
    "xml_to_dict",
    "xml_to_json",
]
