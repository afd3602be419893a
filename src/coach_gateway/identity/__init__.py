"""
coach_gateway.identity

External identity provider clients.

Responsibilities:
- Turn a provider authorization code or ID token into a `VerifiedIdentity`.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Only Google is wired up; multi-provider federation is out of scope.
