"""
access_core.security

Request-level security gate.

Responsibilities:
- Rate limiting, payload validation/sanitization and credential resolution,
  composed into one pre-handler decision.
"""

# Package marker.
