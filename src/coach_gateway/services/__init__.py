"""
coach_gateway.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Orchestrate the login flow across the identity client, DB and token service.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable with fake clients/sessions.
