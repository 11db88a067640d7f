"""Local-first data layer for field-inspection projects."""

__version__ = "0.1.0"
