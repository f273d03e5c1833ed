"""
FastAPI routers grouped by API version and domain.

Each module exposes an APIRouter that is included in the application built by
account_api.app.create_app. Routers only translate HTTP to service calls.
"""
