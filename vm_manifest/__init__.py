"""CSV machine manifest importer: normalize, filter and enrich VM definitions."""

__version__ = "0.1.0"
