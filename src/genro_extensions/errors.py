# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Error hierarchy for Genro-Extensions.

Every error derives from ``GenroExtensionsError`` and from the closest
builtin exception, so callers can catch either the package error or the
usual Python one (``ValueError``, ``TypeError``, ...).
"""


class GenroExtensionsError(Exception):
    """Base class for all errors raised by this package."""
    pass


class FormatError(GenroExtensionsError, ValueError):
    """Raised when a text is not a valid literal for the target type."""
    pass


class NumericOverflowError(GenroExtensionsError, OverflowError):
    """Raised when a parsed number does not fit the target type."""
    pass


class NullInputError(GenroExtensionsError, TypeError):
    """Raised when a strict conversion receives None or DB_NULL."""
    pass


class InvalidCastError(GenroExtensionsError, TypeError):
    """Raised when no conversion path exists between two types."""
    pass


class SerializationError(GenroExtensionsError, ValueError):
    """Raised when an object graph cannot be pickled or unpickled."""
    pass


class StreamReadError(GenroExtensionsError, OSError):
    """Raised when draining a stream fails."""
    pass


class MemberNotFoundError(GenroExtensionsError, AttributeError):
    """Raised when a field, property or method does not exist."""
    pass


class MemberAccessError(GenroExtensionsError, AttributeError):
    """Raised when a member exists but cannot be read, written or called."""
    pass


class TypeMismatchError(GenroExtensionsError, TypeError):
    """Raised when a value does not match the member's declared type."""
    pass


class AmbiguousMatchError(GenroExtensionsError, LookupError):
    """Raised when more than one method overload matches."""
    pass


class InvocationError(GenroExtensionsError):
    """Raised when an invoked method fails.

    The original exception is available as ``__cause__``.
    """

    @property
    def inner(self) -> BaseException | None:
        return self.__cause__


class DigestEncodingError(GenroExtensionsError, ValueError):
    """Raised when a digest input is not representable in ASCII."""
    pass


class ParseError(GenroExtensionsError, ValueError):
    """Raised on malformed XML or JSON documents."""
    pass
