"""
coach_gateway.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide the User model, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Production runs against Postgres (asyncpg); local dev and tests use SQLite (aiosqlite).
