"""
ghfolio.services

Service layer.

Responsibilities:
- Project classification, metrics aggregation, cache sync and webhook handling.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services take their collaborators as keyword arguments; the API layer builds them per request.
