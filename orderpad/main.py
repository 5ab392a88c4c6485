"""
FastAPI Application Entry Point

Table Order Desk - restaurant point-of-sale order taking.
Runs on either the in-memory store (development) or a relational
database (staging/production), selected at startup.

Endpoints:
    - GET   /api/menu-items: Known menu items, newest first
    - POST  /api/menu-items: Remember a menu item (existing names are returned as-is)
    - GET   /api/orders: Active orders with items, oldest first
    - POST  /api/orders: Create order
    - GET   /api/orders/{order_number}: Order with items
    - PUT   /api/orders/{order_number}: Replace order details and items
    - PATCH /api/orders/{order_number}/complete: Mark order completed
    - GET   /api/orders/{order_number}/kot: Kitchen order ticket (text)
    - GET   /api/orders/{order_number}/bill: Customer bill (text)
    - GET   /health: System health check
"""

import logging
from datetime import datetime
from typing import Any, Optional
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Depends, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from orderpad.core.config import Settings, get_settings, setup_logging
from orderpad.errors import OrderPadError, StorageError
from orderpad.schemas import (
    OrderCreate,
    OrderResponse,
    MenuItemCreate,
    MenuItemResponse,
    ErrorResponse,
    HealthResponse,
)
from orderpad.services.orders import OrderService
from orderpad.storage import create_storage, BaseStorage

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_storage(request: Request) -> BaseStorage:
    """The store created by the application lifespan."""
    return request.app.state.storage


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[BaseStorage] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to cached environment settings)
        storage: Pre-built store; when omitted one is created from settings
            at startup

    Returns:
        FastAPI: Application whose lifespan owns the store
    """
    settings = settings or get_settings()
    setup_logging(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Debug: {settings.debug}")
        logger.info("=" * 60)

        if settings.is_production:
            problems = settings.validate_production_config()
            if problems:
                logger.warning(f"⚠️ Production config problems: {problems}")

        store = storage or create_storage(settings)
        await store.startup()
        app.state.storage = store
        app.state.order_service = OrderService(store, settings)
        logger.info(f"✅ Storage: {store.provider_name}")

        logger.info("=" * 60)
        logger.info("✅ Application ready!")
        logger.info("=" * 60)

        yield  # Application runs

        # Shutdown
        logger.info("Shutting down...")
        await store.shutdown()
        logger.info("✅ Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Restaurant order taking: table orders, kitchen order tickets, "
            "bills and order completion."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    register_exception_handlers(app)
    return app


# =============================================================================
# ROUTES
# =============================================================================

def register_routes(app: FastAPI) -> None:

    @app.get("/", tags=["Root"])
    async def root(request: Request) -> dict[str, str]:
        """API root with navigation links."""
        settings = request.app.state.settings
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
            "orders": "/api/orders",
            "health": "/health",
        }

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="System Health Check",
    )
    async def health_check(
        storage: BaseStorage = Depends(get_storage),
    ) -> HealthResponse:
        """Verify the order store is operational."""
        healthy = await storage.health_check()

        return HealthResponse(
            status="operational" if healthy else "degraded",
            storage=storage.provider_name,
            storage_status="healthy" if healthy else "unhealthy",
            timestamp=datetime.now(),
        )

    # =========================================================================
    # MENU ITEM ENDPOINTS
    # =========================================================================

    @app.get(
        "/api/menu-items",
        response_model=list[MenuItemResponse],
        responses={500: {"model": ErrorResponse}},
        tags=["Menu Items"],
        summary="List Menu Items",
    )
    async def list_menu_items(
        service: OrderService = Depends(get_order_service),
    ) -> list[MenuItemResponse]:
        """Menu items remembered from previous orders, for suggestions."""
        items = await service.list_menu_items()
        return [MenuItemResponse.model_validate(item) for item in items]

    @app.post(
        "/api/menu-items",
        response_model=MenuItemResponse,
        status_code=201,
        responses=ERROR_RESPONSES,
        tags=["Menu Items"],
        summary="Create Menu Item",
    )
    async def create_menu_item(
        data: MenuItemCreate,
        response: Response,
        service: OrderService = Depends(get_order_service),
    ) -> MenuItemResponse:
        """
        Remember a menu item.

        If an item with the same name (ignoring case) exists it is returned
        unchanged with status 200.
        """
        item, created = await service.create_menu_item(data.name, data.price)
        if not created:
            response.status_code = 200
        return MenuItemResponse.model_validate(item)

    # =========================================================================
    # ORDER ENDPOINTS
    # =========================================================================

    @app.get(
        "/api/orders",
        response_model=list[OrderResponse],
        responses={500: {"model": ErrorResponse}},
        tags=["Orders"],
        summary="List Active Orders",
    )
    async def list_orders(
        service: OrderService = Depends(get_order_service),
    ) -> list[OrderResponse]:
        """Active orders with their items, oldest first."""
        orders = await service.list_active_orders()
        return [OrderResponse.model_validate(order) for order in orders]

    @app.get(
        "/api/orders/{order_number}",
        response_model=OrderResponse,
        responses=ERROR_RESPONSES,
        tags=["Orders"],
    )
    async def get_order(
        order_number: str,
        service: OrderService = Depends(get_order_service),
    ) -> OrderResponse:
        """Get a specific order by its order number."""
        order = await service.get_order(order_number)
        return OrderResponse.model_validate(order)

    @app.post(
        "/api/orders",
        response_model=OrderResponse,
        status_code=201,
        responses=ERROR_RESPONSES,
        tags=["Orders"],
        summary="Create Order",
    )
    async def create_order(
        order_data: OrderCreate,
        service: OrderService = Depends(get_order_service),
    ) -> OrderResponse:
        """
        Create a new order for a table.

        New item names are remembered as menu items for suggestions.
        """
        logger.info(f"Creating order for table {order_data.table_number}")
        order = await service.create_order(order_data)
        return OrderResponse.model_validate(order)

    @app.put(
        "/api/orders/{order_number}",
        response_model=OrderResponse,
        responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}},
        tags=["Orders"],
        summary="Edit Order",
    )
    async def update_order(
        order_number: str,
        order_data: OrderCreate,
        service: OrderService = Depends(get_order_service),
    ) -> OrderResponse:
        """Replace an order's table, customer details and items."""
        order = await service.update_order(order_number, order_data)
        return OrderResponse.model_validate(order)

    @app.patch(
        "/api/orders/{order_number}/complete",
        response_model=OrderResponse,
        responses=ERROR_RESPONSES,
        tags=["Orders"],
        summary="Complete Order",
    )
    async def complete_order(
        order_number: str,
        service: OrderService = Depends(get_order_service),
    ) -> OrderResponse:
        """Mark an order completed (bill generated)."""
        order = await service.complete_order(order_number)
        return OrderResponse.model_validate(order)

    # =========================================================================
    # TICKET ENDPOINTS
    # =========================================================================

    @app.get(
        "/api/orders/{order_number}/kot",
        response_class=PlainTextResponse,
        responses=ERROR_RESPONSES,
        tags=["Tickets"],
        summary="Kitchen Order Ticket",
    )
    async def order_kot(
        order_number: str,
        service: OrderService = Depends(get_order_service),
    ) -> PlainTextResponse:
        return PlainTextResponse(await service.render_kot(order_number))

    @app.get(
        "/api/orders/{order_number}/bill",
        response_class=PlainTextResponse,
        responses=ERROR_RESPONSES,
        tags=["Tickets"],
        summary="Customer Bill",
    )
    async def order_bill(
        order_number: str,
        service: OrderService = Depends(get_order_service),
    ) -> PlainTextResponse:
        return PlainTextResponse(await service.render_bill(order_number))


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({
            "field": ".".join(location) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return errors


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed or missing input -> 400 with field-level detail."""
        subject = "menu item" if "/menu-items" in request.url.path else "order"
        logger.info(f"Rejected {request.method} {request.url.path}: invalid {subject} data")

        return JSONResponse(
            status_code=400,
            content={
                "message": f"Invalid {subject} data",
                "errors": _field_errors(exc),
            },
        )

    @app.exception_handler(OrderPadError)
    async def orderpad_exception_handler(request: Request, exc: OrderPadError) -> JSONResponse:
        """Not-found, state and storage errors."""
        content: dict[str, Any] = {"message": exc.message}

        if isinstance(exc, StorageError):
            logger.error(f"Storage error on {request.method} {request.url.path}: {exc.message}")
            content = {"message": "A storage error occurred"}
            if request.app.state.settings.debug:
                content["detail"] = str(exc.original or exc.message)

        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content={
                "message": "Internal Server Error",
                "detail": str(exc) if request.app.state.settings.debug else "An unexpected error occurred",
            },
        )


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = create_app()


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "orderpad.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
