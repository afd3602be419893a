"""
coach_gateway.auth

Authentication package.

Responsibilities:
- Session credential issuing and verification.
- FastAPI auth guard dependency (bearer token -> Principal).
"""

# Package marker.
