"""
Hierarchical identifiers for code entities.

An identifier is a URI prefix followed by an ordered list of qualified
fragments, outermost first::

    http://www.rdfcoder.org/2007/1.0#jpackage:p0.p1.jclass:C1.jmethod:m1

The qualifier is written only when it differs from the previous fragment's
qualifier. Identifiers are immutable values; ``IdentifierBuilder`` is the
mutable stack used to compute them and ``IdentifierReader`` parses the string
form back.
"""
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import EmptyIdentifierError
from .vocabulary import (
    CODER_URI,
    PACKAGE_KEY,
    PACKAGE_SEPARATOR,
    QUALIFIER_SEPARATOR,
    URI_PREFIX_SEPARATOR,
)

_RESERVED = (PACKAGE_SEPARATOR, QUALIFIER_SEPARATOR, URI_PREFIX_SEPARATOR)


def _check_prefix(prefix: str) -> str:
    if not prefix:
        raise ValueError("Identifier prefix cannot be empty")
    if prefix.find(URI_PREFIX_SEPARATOR) != len(prefix) - 1:
        raise ValueError(
            f"Invalid identifier prefix '{prefix}': it must end with '{URI_PREFIX_SEPARATOR}' "
            f"and contain no other '{URI_PREFIX_SEPARATOR}'"
        )
    return prefix


class IdentifierFragment(BaseModel):
    """A single ``qualifier:fragment`` section of an identifier."""

    model_config = ConfigDict(frozen=True)

    fragment: str
    qualifier: str

    @field_validator("fragment")
    @classmethod
    def _validate_fragment(cls, value: str) -> str:
        for reserved in _RESERVED:
            if reserved in value:
                raise ValueError(f"Invalid fragment '{value}': cannot contain '{reserved}'")
        return value

    @field_validator("qualifier")
    @classmethod
    def _validate_qualifier(cls, value: str) -> str:
        if not value:
            raise ValueError("Qualifier cannot be empty")
        for reserved in _RESERVED:
            if reserved in value:
                raise ValueError(f"Invalid qualifier '{value}': cannot contain '{reserved}'")
        return value

    def __str__(self) -> str:
        return f"{self.qualifier}{QUALIFIER_SEPARATOR}{self.fragment}"


class Identifier(BaseModel):
    """
    Immutable hierarchical identifier.

    Two identifiers are equal when their prefixes and fragment sequences are
    equal, which is the same as having the same string form.
    """

    model_config = ConfigDict(frozen=True)

    prefix: str = CODER_URI
    fragments: Tuple[IdentifierFragment, ...] = ()

    @field_validator("prefix")
    @classmethod
    def _validate_prefix(cls, value: str) -> str:
        return _check_prefix(value)

    @property
    def identifier(self) -> str:
        """The canonical string form, used as triple subject and object."""
        parts = []
        current_qualifier = None
        for fragment in self.fragments:
            if fragment.qualifier != current_qualifier:
                current_qualifier = fragment.qualifier
                parts.append(f"{fragment.qualifier}{QUALIFIER_SEPARATOR}{fragment.fragment}")
            else:
                parts.append(fragment.fragment)
        return self.prefix + PACKAGE_SEPARATOR.join(parts)

    def __str__(self) -> str:
        return self.identifier

    def __len__(self) -> int:
        return len(self.fragments)

    def size(self) -> int:
        """Return the number of fragments."""
        return len(self.fragments)

    def _derive(self, fragments) -> "Identifier":
        return Identifier(prefix=self.prefix, fragments=tuple(fragments))

    def fragment(self, index: int) -> IdentifierFragment:
        return self.fragments[index]

    def head(self) -> "Identifier":
        """Return the identifier made of the first fragment only."""
        if not self.fragments:
            raise EmptyIdentifierError("Cannot take the head of an empty identifier")
        return self._derive(self.fragments[:1])

    def tail(self) -> "Identifier":
        """Return the identifier made of the last fragment only (empty if there is none)."""
        return self._derive(self.fragments[-1:])

    def pre_tail(self) -> "Identifier":
        """Return all but the last fragment (empty if there is none)."""
        return self._derive(self.fragments[:-1])

    parent = pre_tail

    def sections(self, start: int, end: Optional[int] = None) -> "Identifier":
        """
        Return the fragments between two indexes.

        Args:
            start: First fragment, inclusive
            end: Last fragment, exclusive. When omitted ``start`` is used as the
                exclusive end and the slice starts at zero.

        Returns:
            The sub identifier
        """
        if end is None:
            start, end = 0, start
        if start < 0 or end > len(self.fragments) or start > end:
            raise IndexError(f"Invalid sections [{start}, {end}) for identifier of size {len(self.fragments)}")
        return self._derive(self.fragments[start:end])

    @property
    def tail_fragment(self) -> IdentifierFragment:
        if not self.fragments:
            raise EmptyIdentifierError("Empty identifier has no tail fragment")
        return self.fragments[-1]

    def first_fragment_with_qualifier(self, qualifier: str) -> Optional[str]:
        """Return the outermost fragment carrying ``qualifier``, or None."""
        for fragment in self.fragments:
            if fragment.qualifier == qualifier:
                return fragment.fragment
        return None

    def last_fragment_with_qualifier(self, qualifier: str) -> Optional[str]:
        """Return the innermost fragment carrying ``qualifier``, or None."""
        for fragment in reversed(self.fragments):
            if fragment.qualifier == qualifier:
                return fragment.fragment
        return None

    def strongest_qualifier(self) -> str:
        """Return the qualifier of the tail fragment."""
        if not self.fragments:
            raise EmptyIdentifierError("Invalid identifier size to perform this operation")
        return self.fragments[-1].qualifier

    def copy_builder(self) -> "IdentifierBuilder":
        """Return a builder seeded with this identifier."""
        return IdentifierBuilder(self)

    def child(self, fragment: str, qualifier: str) -> "Identifier":
        """Return a new identifier with one more fragment appended."""
        return self._derive(self.fragments + (IdentifierFragment(fragment=fragment, qualifier=qualifier),))


class IdentifierBuilder:
    """Mutable fragment stack producing immutable identifiers."""

    def __init__(self, identifier: Optional[Identifier] = None):
        if identifier is not None:
            self._prefix = identifier.prefix
            self._fragments: List[IdentifierFragment] = list(identifier.fragments)
        else:
            self._prefix = CODER_URI
            self._fragments = []

    def push_fragment(self, fragment: str, qualifier: str) -> "IdentifierBuilder":
        self._fragments.append(IdentifierFragment(fragment=fragment, qualifier=qualifier))
        return self

    def pop_fragment(self) -> "IdentifierBuilder":
        if not self._fragments:
            raise EmptyIdentifierError("Cannot pop a fragment from an empty builder")
        self._fragments.pop()
        return self

    def set_prefix(self, prefix: str) -> "IdentifierBuilder":
        self._prefix = _check_prefix(prefix)
        return self

    def size(self) -> int:
        return len(self._fragments)

    def clear(self) -> "IdentifierBuilder":
        self._fragments.clear()
        return self

    def build(self) -> Identifier:
        return Identifier(prefix=self._prefix, fragments=tuple(self._fragments))


class IdentifierReader:
    """Parses identifiers from their canonical string form and from Java names."""

    @staticmethod
    def read_identifier(value: str) -> Identifier:
        """
        Parse a canonical identifier string.

        A string without ``#`` is read with the default ``CODER_URI`` prefix.

        Args:
            value: The identifier string

        Returns:
            The parsed identifier

        Raises:
            ValueError: If a fragment cannot be attributed a qualifier
        """
        index = value.find(URI_PREFIX_SEPARATOR)
        if index == -1:
            prefix, local = CODER_URI, value
        else:
            prefix, local = value[:index + 1], value[index + 1:]

        fragments = []
        if local:
            qualifier = None
            for token in local.split(PACKAGE_SEPARATOR):
                if QUALIFIER_SEPARATOR in token:
                    qualifier, token = token.split(QUALIFIER_SEPARATOR, 1)
                elif qualifier is None:
                    raise ValueError(f"Invalid identifier '{value}': first fragment has no qualifier")
                fragments.append(IdentifierFragment(fragment=token, qualifier=qualifier))
        return Identifier(prefix=prefix, fragments=tuple(fragments))

    @staticmethod
    def read_package(package_name: str) -> Identifier:
        """Return the identifier of a dotted package name; ``""`` is the default package."""
        return IdentifierReader.read_identifier(f"{PACKAGE_KEY}{QUALIFIER_SEPARATOR}{package_name}")

    @staticmethod
    def read_fully_qualified_type(name: str, qualifier: str) -> Identifier:
        """
        Return the identifier of a type given its dotted name.

        Every segment but the last is read as a package; a name with no dot
        lives directly under the URI prefix.
        """
        package_name, _, simple_name = name.rpartition(PACKAGE_SEPARATOR)
        builder = IdentifierBuilder()
        if package_name:
            for segment in package_name.split(PACKAGE_SEPARATOR):
                builder.push_fragment(segment, PACKAGE_KEY)
        builder.push_fragment(simple_name, qualifier)
        return builder.build()


DEFAULT_PACKAGE = IdentifierReader.read_package("")
