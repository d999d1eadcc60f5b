"""Subgraph build tool: typed bindings, mapping compilation and watch mode."""

__version__ = "0.1.0"
