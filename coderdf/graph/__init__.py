"""
Graph storage for CodeRDF.
"""
