"""Food trigger correlation analysis."""

__version__ = "0.1.0"
