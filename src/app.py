"""AgriMarket FastAPI application.

Composes the identity, catalogue, ordering and messaging contexts into one
HTTP service. Every handler is built once per application instance and
reached by routes through ``app.state.services``.

Usage:
    uvicorn app:create_app --factory --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalogue.api import product_router
from catalogue.product.browsing import ProductQueries
from catalogue.product.creation import CreateProductHandler
from catalogue.product.management import ProductManagementHandler
from identity.account.profile import ProfileHandler
from identity.account.registration import RegistrationHandler
from identity.api import auth_router, users_router
from identity.auth.tokens import TokenService
from messaging.api import router as messaging_router
from messaging.conversation.messaging import MessagingService
from messaging.store import InMemoryMessageStore, MessageStore
from ordering.api import router as ordering_router
from ordering.order.cancellation import CancelOrderHandler
from ordering.order.placement import OrderPlacementHandler
from ordering.order.queries import OrderQueries
from ordering.order.rating import RateOrderHandler
from ordering.order.status import OrderStatusHandler
from shared.api import register_exception_handlers, register_request_context
from shared.config import Settings, load_settings
from shared.database import Database
from shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


@dataclass
class Services:
    settings: Settings
    database: Database
    tokens: TokenService
    registration: RegistrationHandler
    profiles: ProfileHandler
    product_creation: CreateProductHandler
    product_management: ProductManagementHandler
    product_queries: ProductQueries
    order_placement: OrderPlacementHandler
    order_status: OrderStatusHandler
    order_cancellation: CancelOrderHandler
    order_rating: RateOrderHandler
    order_queries: OrderQueries
    messaging: MessagingService


def build_services(settings: Settings, database: Database, message_store: MessageStore | None = None) -> Services:
    tokens = TokenService(settings)
    cancellations = CancelOrderHandler(database, settings)
    return Services(
        settings=settings,
        database=database,
        tokens=tokens,
        registration=RegistrationHandler(database, tokens),
        profiles=ProfileHandler(database),
        product_creation=CreateProductHandler(database, currency=settings.currency),
        product_management=ProductManagementHandler(
            database, retries=settings.reservation_retries, backoff=settings.retry_backoff_seconds
        ),
        product_queries=ProductQueries(database, list_limit=settings.product_list_limit),
        order_placement=OrderPlacementHandler(database, settings),
        order_status=OrderStatusHandler(database, settings, cancellations),
        order_cancellation=cancellations,
        order_rating=RateOrderHandler(database, settings),
        order_queries=OrderQueries(database),
        messaging=MessagingService(database, message_store or InMemoryMessageStore()),
    )


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(env=settings.env, level=settings.log_level, log_dir=settings.log_dir)

    database = database or Database(settings.database_uri)
    database.create_all()

    app = FastAPI(
        title="AgriMarket API",
        description="Farm-to-consumer marketplace: accounts, produce catalogue, orders and messages",
    )
    app.state.services = build_services(settings, database)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_request_context(app)
    register_exception_handlers(app)

    for router in (auth_router, users_router, product_router, ordering_router, messaging_router):
        app.include_router(router, prefix="/api")

    @app.get("/health")
    @app.get("/api/health")
    def health():
        return JSONResponse(content={"status": "ok", "env": settings.env})

    logger.info("app_created", env=settings.env, database=database.engine.url.render_as_string(hide_password=True))
    return app
