"""
access_core.api.routers

HTTP routers (health, auth session, scan-ticket, uploads).
"""
