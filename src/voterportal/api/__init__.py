"""HTTP interface of the reference voter sheet store."""

from voterportal.api.endpoints import create_store_app, create_store_router

__all__ = ["create_store_app", "create_store_router"]
