"""
access_core.entitlements

Entitlement gatekeeping (ticket scanning).
"""

# Package marker.
