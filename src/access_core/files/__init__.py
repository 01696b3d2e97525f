"""
access_core.files

Resource-level authorization for uploaded files.

Responsibilities:
- Strategy registry keyed by content type.
- File access authorizer combining ownership with strategies.
"""

# Package marker.
