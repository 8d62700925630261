# backend/app/__init__.py
"""
PetKeeper family notification backend application package.

This package contains:
- main: FastAPI application entrypoint
- family: family resolution, token hygiene, statistics and HTTP routes
- notifications: push payloads, multicast dispatcher and FCM transport
"""
