"""
coach_gateway.api

API package for the gateway.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, error handling and request/response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: request validation + auth + delegation to services.
