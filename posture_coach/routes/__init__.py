"""
FastAPI routers for all API endpoints.

Each module defines a router for one domain (exercises, products, health).
Routes stay thin: validate input, call the service layer, map the result.
"""
