"""
ghfolio.github

GitHub REST API boundary.

Responsibilities:
- DTOs mirroring the GitHub payloads this service uses.
- An async client that fetches and normalizes them.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services depend on `GitHubClient`, never on httpx directly.
