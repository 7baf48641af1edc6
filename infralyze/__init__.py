"""Infrastructure config parsing, normalization and diagramming."""

__version__ = "0.1.0"
