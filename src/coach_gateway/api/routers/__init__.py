"""
coach_gateway.api.routers

HTTP routers (auth exchange, current user, health).
"""
