"""vendaudit — audit vendored files against their upstream sources."""

__version__ = "0.1.0"
