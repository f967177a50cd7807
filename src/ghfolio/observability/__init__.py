"""
ghfolio.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Request context propagation for consistent log enrichment.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing here talks to GitHub or Redis; it only shapes log output.
