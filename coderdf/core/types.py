"""
Java visibilities, modifiers and type references.
"""
from enum import Enum, IntFlag
from typing import ClassVar, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .identifier import IdentifierReader
from .vocabulary import (
    ARRAY_KEY,
    CLASS_KEY,
    ENUMERATION_KEY,
    INTERFACE_KEY,
    PACKAGE_KEY,
    PACKAGE_SEPARATOR,
    PRIMITIVE_KEY,
    QUALIFIER_SEPARATOR,
    to_uri,
)


class Visibility(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    DEFAULT = "default"
    PRIVATE = "private"

    @property
    def identifier(self) -> str:
        return self.value

    @classmethod
    def from_keywords(cls, keywords: Iterable[str]) -> "Visibility":
        """Pick the visibility among a list of Java modifier keywords."""
        keywords = set(keywords)
        for visibility in (cls.PUBLIC, cls.PROTECTED, cls.PRIVATE):
            if visibility.value in keywords:
                return visibility
        return cls.DEFAULT


class Modifier(IntFlag):
    ABSTRACT = 0x01
    FINAL = 0x02
    STATIC = 0x04
    VOLATILE = 0x08
    NATIVE = 0x10
    TRANSIENT = 0x20
    SYNCHRONIZED = 0x40

    @staticmethod
    def to_byte(modifiers: Iterable["Modifier"]) -> int:
        """Fold modifiers into the bit mask stored in the model."""
        result = 0
        for modifier in modifiers:
            result |= int(modifier)
        return result

    @classmethod
    def from_byte(cls, value: int) -> Tuple["Modifier", ...]:
        """Expand a bit mask back into modifiers, in declaration order."""
        return tuple(modifier for modifier in cls if value & modifier)

    @classmethod
    def from_keywords(cls, keywords: Iterable[str]) -> Tuple["Modifier", ...]:
        """Map Java modifier keywords to modifiers, ignoring visibilities and annotations."""
        result = []
        for keyword in keywords:
            modifier = cls.__members__.get(keyword.upper())
            if modifier is not None and modifier not in result:
                result.append(modifier)
        return tuple(result)


class JType(BaseModel):
    """Base of every type reference."""

    model_config = ConfigDict(frozen=True)

    @property
    def identifier(self) -> str:
        """The string stored in the model for this type."""
        raise NotImplementedError

    @property
    def referenced_name(self) -> Optional[str]:
        """Dotted name to resolve, None for types that always resolve."""
        return None

    def __str__(self) -> str:
        return self.identifier


class PrimitiveType(JType):
    name: str

    @property
    def identifier(self) -> str:
        return to_uri(f"{PRIMITIVE_KEY}{QUALIFIER_SEPARATOR}{self.name}")


class ObjectType(JType):
    """
    Reference to a class by fully qualified name.

    ``enclosing`` is the identifier of the type declaring this one, when the
    reference names a nested type. Without it every outer segment of ``name``
    is read as a package.
    """

    name: str
    enclosing: Optional[str] = None

    qualifier: ClassVar[str] = CLASS_KEY

    @property
    def simple_name(self) -> str:
        return self.name.rpartition(PACKAGE_SEPARATOR)[2]

    @property
    def identifier(self) -> str:
        if self.enclosing is not None:
            enclosing = IdentifierReader.read_identifier(self.enclosing)
            return enclosing.child(self.simple_name, self.qualifier).identifier
        return IdentifierReader.read_fully_qualified_type(self.name, self.qualifier).identifier

    @property
    def referenced_name(self) -> Optional[str]:
        return self.name


class InterfaceType(ObjectType):
    """Reference to an interface by fully qualified name."""

    qualifier: ClassVar[str] = INTERFACE_KEY


class ExceptionType(ObjectType):
    """Reference to a throwable class."""
    pass


class ArrayType(JType):
    element: JType
    dimensions: int = 1

    @property
    def identifier(self) -> str:
        return to_uri(f"{ARRAY_KEY}{QUALIFIER_SEPARATOR}{self.dimensions}{QUALIFIER_SEPARATOR}{self.element.identifier}")

    @property
    def referenced_name(self) -> Optional[str]:
        return self.element.referenced_name


VOID = PrimitiveType(name="void")
BOOL = PrimitiveType(name="boolean")
CHAR = PrimitiveType(name="char")
BYTE = PrimitiveType(name="byte")
SHORT = PrimitiveType(name="short")
INT = PrimitiveType(name="int")
LONG = PrimitiveType(name="long")
FLOAT = PrimitiveType(name="float")
DOUBLE = PrimitiveType(name="double")

PRIMITIVES = {t.name: t for t in (VOID, BOOL, CHAR, BYTE, SHORT, INT, LONG, FLOAT, DOUBLE)}
_PRIMITIVES_BY_IDENTIFIER = {t.identifier: t for t in PRIMITIVES.values()}

_ARRAY_PREFIX = to_uri(ARRAY_KEY + QUALIFIER_SEPARATOR)


def primitive_type(name: str) -> Optional[PrimitiveType]:
    """Return the primitive type for a Java keyword such as ``int``, or None."""
    return PRIMITIVES.get(name)


def type_from_identifier(value: str) -> JType:
    """
    Convert a stored type identifier back to a type reference.

    Args:
        value: A string produced by ``JType.identifier``

    Returns:
        The matching type

    Raises:
        ValueError: If the string is not a type identifier
    """
    if value in _PRIMITIVES_BY_IDENTIFIER:
        return _PRIMITIVES_BY_IDENTIFIER[value]
    if value.startswith(_ARRAY_PREFIX):
        dimensions, _, element = value[len(_ARRAY_PREFIX):].partition(QUALIFIER_SEPARATOR)
        return ArrayType(element=type_from_identifier(element), dimensions=int(dimensions))

    identifier = IdentifierReader.read_identifier(value)
    if not identifier.fragments:
        raise ValueError(f"Cannot convert '{value}' to a type")
    name = PACKAGE_SEPARATOR.join(f.fragment for f in identifier.fragments if f.fragment)
    qualifier = identifier.strongest_qualifier()
    enclosing = None
    if len(identifier) > 1 and identifier.fragment(-2).qualifier != PACKAGE_KEY:
        enclosing = identifier.pre_tail().identifier
    if qualifier == INTERFACE_KEY:
        return InterfaceType(name=name, enclosing=enclosing)
    if qualifier in (CLASS_KEY, ENUMERATION_KEY):
        return ObjectType(name=name, enclosing=enclosing)
    raise ValueError(f"Cannot convert '{value}' to a type: unexpected qualifier '{qualifier}'")
