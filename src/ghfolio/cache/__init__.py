"""
ghfolio.cache

Redis-backed TTL cache package.

Responsibilities:
- Build the async Redis client from settings.
- Provide `CacheService`, the JSON cache facade used by every endpoint.
- Define the cache key / TTL catalogue.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Redis is the only state this service keeps; losing it only costs GitHub quota.
