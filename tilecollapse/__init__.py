"""tilecollapse - Wave Function Collapse tile generation."""

__version__ = "0.1.0"
