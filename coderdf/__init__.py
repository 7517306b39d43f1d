"""
CodeRDF: a schema-validated triple model of Java code bases.
"""

__version__ = "0.1.0"

from .core.code_model import CodeModel

__all__ = ["CodeModel", "__version__"]
