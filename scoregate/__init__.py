"""scoregate - scoring and quality-gate engine for quality-tool results."""

__version__ = "1.0.0"

__all__ = ["__version__"]
