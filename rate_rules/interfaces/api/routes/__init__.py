from fastapi import FastAPI

from .scoped_rules import commission_router, vat_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(commission_router)
    app.include_router(vat_router)
