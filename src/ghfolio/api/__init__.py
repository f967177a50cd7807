"""
ghfolio.api

API package for the GitHub portfolio proxy.

Responsibilities:
- FastAPI app factory and router modules.
- Response envelope, error mapping, rate limiting and dependency wiring.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: request validation + caching + delegation to services.
