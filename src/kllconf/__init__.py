"""kllconf — editable model and mutation layer for KLL keyboard configurations."""

__version__ = "0.1.0"
