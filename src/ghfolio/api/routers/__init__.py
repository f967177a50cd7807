"""
ghfolio.api.routers

HTTP routers: health, system, github, projects and metrics.
"""

# Package marker.
