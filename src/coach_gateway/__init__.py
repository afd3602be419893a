"""
coach_gateway

Authentication gateway: exchanges Google sign-in assertions for local session
credentials and provisions users on first sign-in.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
