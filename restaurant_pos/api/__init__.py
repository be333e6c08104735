# restaurant_pos/api/__init__.py
from fastapi import FastAPI

from restaurant_pos.api.routers import carts, catalog, customers, health, orders, reports


def include_routers(app: FastAPI) -> FastAPI:
    app.include_router(health.router)
    app.include_router(catalog.router)
    app.include_router(customers.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(reports.router)
    return app
