"""
access_core.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and the read repositories the
  authorization layers consume.
"""

# Package marker.
