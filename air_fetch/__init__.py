"""Fetch and keep in sync model files named by AIR URNs (urn:air:...)."""

__version__ = "0.3.0"
