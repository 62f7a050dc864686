from __future__ import annotations

import uuid
from typing import Optional

import strawberry
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from strawberry.fastapi import GraphQLRouter

from .api.rest import router as rest_router
from .container import build_container
from .domain import InventoryItem, InventoryQuery
from .errors import DomainError, NoItemsToOrderError, NotFoundError
from .logging import ServiceLogger, setup_logging
from .middleware.rate_limit import configure_rate_limiting
from .observability import configure_observability
from .services import InventoryService
from .settings import Settings, load_settings


@strawberry.type
class GraphQLProduct:
    id: int
    distributor_id: int
    product_name: str
    description: str
    price: float
    quantity: int
    is_active: bool


def to_graphql_product(item: InventoryItem) -> GraphQLProduct:
    return GraphQLProduct(
        id=item.id,
        distributor_id=item.distributor_id,
        product_name=item.product_name,
        description=item.description,
        price=float(item.price),
        quantity=item.quantity,
        is_active=item.is_active,
    )


def graphql_schema() -> strawberry.Schema:
    @strawberry.type
    class Query:
        @strawberry.field
        def product(self, info: strawberry.Info, id: int) -> Optional[GraphQLProduct]:
            service: InventoryService = info.context["container"].inventory_service
            try:
                item = service.get(id)
            except NotFoundError:
                return None
            return to_graphql_product(item)

        @strawberry.field
        def products(
            self,
            info: strawberry.Info,
            distributor_id: Optional[int] = None,
            q: Optional[str] = None,
            in_stock_only: bool = False,
            limit: int = 50,
        ) -> list[GraphQLProduct]:
            service: InventoryService = info.context["container"].inventory_service
            query = InventoryQuery(
                distributor_id=distributor_id,
                q=q,
                in_stock_only=in_stock_only,
                limit=max(1, min(limit, 100)),
            )
            return [to_graphql_product(item) for item in service.browse(query).items]

    return strawberry.Schema(query=Query)


def error_body(exc: DomainError) -> dict:
    body = {"success": False, "error": exc.code, **exc.extra}
    if isinstance(exc, NoItemsToOrderError):
        body["skipped"] = [entry.model_dump(mode="json", exclude_none=True) for entry in exc.skipped]
    return body


def create_app(settings: Settings) -> FastAPI:
    setup_logging(settings.log_level)
    log = ServiceLogger("api")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        description="Shopkeeper carts, multi-distributor order placement, inventory and payments.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    configure_rate_limiting(app, settings)

    container = build_container(settings)
    app.state.container = container

    configure_observability(app, settings, engine=container.db.engine)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        container.db.dispose()

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        if exc.status_code >= 500:
            log.error("Request failed", path=request.url.path, error=exc.code)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation(_, exc: RequestValidationError):
        details = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "invalid_request", "details": details},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        log.exception("Unhandled error", exc, path=request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": "server_error"})

    async def graphql_context(request: Request):
        return {"container": request.app.state.container}

    schema = graphql_schema()
    app.include_router(GraphQLRouter(schema, context_getter=graphql_context), prefix="/graphql")

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get(settings.request_id_header, "") or uuid.uuid4().hex
        response = await call_next(request)
        response.headers[settings.request_id_header] = request_id
        return response

    app.include_router(rest_router)
    app.include_router(rest_router, prefix="/v1")

    return app


app = create_app(load_settings())
