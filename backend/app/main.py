import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.routers import (
    admin_notifications,
    bookings,
    realtime,
    shipments,
    user_notifications,
)
from app.services.realtime import ConnectionManager

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "Bookings", "description": "Book shipments and manage the booking lifecycle."},
    {"name": "Shipments", "description": "Publish shipments and query their availability."},
    {"name": "Admin Notifications", "description": "Inbox shared by all administrators."},
    {"name": "User Notifications", "description": "Per-user notification inbox."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Booking backend for a logistics marketplace. "
        "Drivers claim published shipments, admins approve them, and both "
        "sides are kept current through notifications and a realtime channel."
    ),
    openapi_tags=OPENAPI_TAGS,
    debug=settings.DEBUG,
)

connections = ConnectionManager()
app.state.connections = connections
app.state.broadcaster = connections

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "code": "VALIDATION_ERROR",
                "message": "Validation error",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


app.include_router(bookings.router, prefix="/v1/bookings", tags=["Bookings"])
app.include_router(shipments.router, prefix="/v1/shipments", tags=["Shipments"])
app.include_router(
    admin_notifications.router,
    prefix="/v1/admin/notifications",
    tags=["Admin Notifications"],
)
app.include_router(
    user_notifications.router,
    prefix="/v1/users/notifications",
    tags=["User Notifications"],
)
app.include_router(realtime.router)


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "status": "running",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
