"""Price-level aggregated market depth: visible and excess levels per side."""

__version__ = "0.1.0"
__all__ = ["depth", "level"]