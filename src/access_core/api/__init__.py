"""
access_core.api

HTTP boundary (FastAPI app factory, dependencies, routers).
"""

# Package marker.
