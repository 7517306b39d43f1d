"""
Read-side entities of the Java code model.
"""
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field

from .types import Modifier, Visibility


class JEntity(BaseModel):
    """Base class for all entities read back from a model."""

    id: str
    name: str
    qualified_name: str

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name}, qualified_name={self.qualified_name})"

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, JEntity):
            return False
        return self.id == other.id


class JPackage(JEntity):
    """A Java package."""

    pass


class JStructure(JEntity):
    """A user-defined type (class, interface, enumeration)."""

    visibility: Optional[Visibility] = None
    modifiers: Tuple[Modifier, ...] = ()


class JClass(JStructure):
    extended_class: Optional[str] = None
    implemented_interfaces: List[str] = Field(default_factory=list)


class JInterface(JStructure):
    extended_interfaces: List[str] = Field(default_factory=list)


class JEnumeration(JStructure):
    elements: List[str] = Field(default_factory=list)
    implemented_interfaces: List[str] = Field(default_factory=list)


class JAttribute(JEntity):
    """A field of a type."""

    type: str
    value: Optional[str] = None
    visibility: Optional[Visibility] = None
    modifiers: Tuple[Modifier, ...] = ()


class JParameter(JEntity):
    """A parameter of a signature."""

    type: str
    index: int


class JSignature(JEntity):
    """One overload of a method or constructor."""

    parameters: List[JParameter] = Field(default_factory=list)
    return_type: Optional[str] = None
    exceptions: List[str] = Field(default_factory=list)


class JMember(JEntity):
    """An executable member: method or constructor."""

    visibility: Optional[Visibility] = None
    modifiers: Tuple[Modifier, ...] = ()
    signatures: List[JSignature] = Field(default_factory=list)


class JMethod(JMember):
    pass


class JConstructor(JMember):
    pass


class JLibrary(JEntity):
    """A parsed library hanging from the asset node."""

    location: Optional[str] = None
    date: Optional[str] = None
