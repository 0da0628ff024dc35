import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api.admin import admin_router
from storefront.api.errors import register_storefront_exception_handlers
from storefront.api.routes import (
    address_router,
    cart_router,
    location_router,
    order_router,
    voucher_router,
)
from storefront.api.webhooks import webhook_router


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (
        cart_router,
        address_router,
        order_router,
        voucher_router,
        location_router,
        admin_router,
        webhook_router,
    ):
        app.include_router(router)
    register_storefront_exception_handlers(app)
    return TestClient(app)
