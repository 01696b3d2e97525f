"""
access_core.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and validation.
- Credential resolution (cookie bridging, principal loading).
- FastAPI guard dependencies (authentication, permission, role).
"""

# Package marker.
