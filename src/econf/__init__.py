"""e-Conference: paper submission, reviewer assignment and conference management."""

__version__ = "0.1.0"
