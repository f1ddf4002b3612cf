"""
market_auth.api

HTTP surface: app factory, dependencies and routers.
"""
