"""
ghfolio

Top-level package for the GitHub portfolio proxy service.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal; `__version__` feeds the OpenAPI metadata and `/system/health`.
