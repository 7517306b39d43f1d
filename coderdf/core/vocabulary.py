"""
URIs, qualifier keys and predicates of the Java code model.

Every resource written by CodeRDF lives under ``CODER_URI``. Entity
identifiers append qualified fragments to it (see ``coderdf.core.identifier``),
predicates append their local name.
"""

CODER_URI = "http://www.rdfcoder.org/2007/1.0#"

RDFS_URI = "http://www.w3.org/2000/01/rdf-schema#"
SUBCLASSOF = RDFS_URI + "subClassOf"

URI_PREFIX_SEPARATOR = "#"
QUALIFIER_SEPARATOR = ":"
PACKAGE_SEPARATOR = "."


def to_prefix(key: str) -> str:
    """Return the fragment prefix for a qualifier key, e.g. ``jclass:``."""
    return key + QUALIFIER_SEPARATOR


def to_uri(name: str) -> str:
    """Return the URI of a local name under ``CODER_URI``."""
    return CODER_URI + name


# Qualifier keys
PACKAGE_KEY = "jpackage"
CLASS_KEY = "jclass"
INTERFACE_KEY = "jinterface"
ENUMERATION_KEY = "jenumeration"
ATTRIBUTE_KEY = "jattribute"
CONSTRUCTOR_KEY = "jconstructor"
METHOD_KEY = "jmethod"
SIGNATURE_KEY = "jsignature"
PARAMETER_KEY = "jparameter"
PRIMITIVE_KEY = "jprimitive"
ARRAY_KEY = "jarray"
ASSET_KEY = "asset"

# Entity prefixes, used as ontology patterns
PACKAGE_PREFIX = to_prefix(PACKAGE_KEY)
CLASS_PREFIX = to_prefix(CLASS_KEY)
INTERFACE_PREFIX = to_prefix(INTERFACE_KEY)
ENUMERATION_PREFIX = to_prefix(ENUMERATION_KEY)
ATTRIBUTE_PREFIX = to_prefix(ATTRIBUTE_KEY)
CONSTRUCTOR_PREFIX = to_prefix(CONSTRUCTOR_KEY)
METHOD_PREFIX = to_prefix(METHOD_KEY)
SIGNATURE_PREFIX = to_prefix(SIGNATURE_KEY)
PARAMETER_PREFIX = to_prefix(PARAMETER_KEY)
ASSET_PREFIX = to_prefix(ASSET_KEY)

# Kind URIs, objects of the rdfs:subClassOf triples
JPACKAGE = to_uri(PACKAGE_KEY)
JCLASS = to_uri(CLASS_KEY)
JINTERFACE = to_uri(INTERFACE_KEY)
JENUMERATION = to_uri(ENUMERATION_KEY)
JATTRIBUTE = to_uri(ATTRIBUTE_KEY)
JCONSTRUCTOR = to_uri(CONSTRUCTOR_KEY)
JMETHOD = to_uri(METHOD_KEY)
JSIGNATURE = to_uri(SIGNATURE_KEY)
JPARAMETER = to_uri(PARAMETER_KEY)

KIND_URIS = {
    PACKAGE_KEY: JPACKAGE,
    CLASS_KEY: JCLASS,
    INTERFACE_KEY: JINTERFACE,
    ENUMERATION_KEY: JENUMERATION,
    ATTRIBUTE_KEY: JATTRIBUTE,
    CONSTRUCTOR_KEY: JCONSTRUCTOR,
    METHOD_KEY: JMETHOD,
    SIGNATURE_KEY: JSIGNATURE,
    PARAMETER_KEY: JPARAMETER,
}

# The asset node every library hangs from
ASSET = to_uri(ASSET_PREFIX)

# Predicates
CONTAINS_PACKAGE = to_uri("contains_package")
CONTAINS_CLASS = to_uri("contains_class")
CONTAINS_INTERFACE = to_uri("contains_interface")
CONTAINS_ENUMERATION = to_uri("contains_enumeration")
CONTAINS_ATTRIBUTE = to_uri("contains_attribute")
CONTAINS_CONSTRUCTOR = to_uri("contains_constructor")
CONTAINS_METHOD = to_uri("contains_method")
CONTAINS_ELEMENT = to_uri("contains_element")
CONTAINS_SIGNATURE = to_uri("contains_signature")
CONTAINS_PARAMETER = to_uri("contains_parameter")

ATTRIBUTE_TYPE = to_uri("attribute_type")
ATTRIBUTE_VALUE = to_uri("attribute_value")
PARAMETER_TYPE = to_uri("parameter_type")
PARAMETER_INDEX = to_uri("parameter_index")
RETURN_TYPE = to_uri("return_type")

EXTENDS_CLASS = to_uri("extends_class")
IMPLEMENTS_INT = to_uri("implements_int")
EXTENDS_INT = to_uri("extends_int")
THROWS = to_uri("throws")

HAS_VISIBILITY = to_uri("has_visibility")
HAS_MODIFIERS = to_uri("has_modifiers")

CONTAINS_LIBRARY = to_uri("contains_library")
LIBRARY_LOCATION = to_uri("library_location")
LIBRARY_DATETIME = to_uri("library_date")

LIBRARY_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Container predicate by contained kind
CONTAINMENT_PREDICATES = {
    PACKAGE_KEY: CONTAINS_PACKAGE,
    CLASS_KEY: CONTAINS_CLASS,
    INTERFACE_KEY: CONTAINS_INTERFACE,
    ENUMERATION_KEY: CONTAINS_ENUMERATION,
    ATTRIBUTE_KEY: CONTAINS_ATTRIBUTE,
    CONSTRUCTOR_KEY: CONTAINS_CONSTRUCTOR,
    METHOD_KEY: CONTAINS_METHOD,
}
