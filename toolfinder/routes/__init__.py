"""
FastAPI routers for all API endpoints.

Each module defines a router for one area (auth, user, search, health);
main.py includes them all.
"""
