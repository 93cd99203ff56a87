"""Team task management backend with role-ranked authorization."""

__version__ = "0.1.0"
