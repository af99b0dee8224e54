import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from westudy.db.init_db import create_database, seed_demo_data
from westudy.db.base import Base
from westudy.db.session import engine, SessionLocal
from westudy.core.config import settings
from westudy.core.errors import ERRORS_BY_STATUS, WeStudyError, UnexpectedError, error_for_status
from westudy.api.v1.router import api_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def _booking_sweep_loop() -> None:
    """Background task: complete bookings whose check-out date has passed."""
    from westudy.services.bookings import complete_past_bookings

    while True:
        try:
            db = SessionLocal()
            try:
                count = complete_past_bookings(db)
                if count:
                    logger.info("Completed %d past booking(s).", count)
            finally:
                db.close()
        except Exception:
            logger.exception("Error during past-booking sweep.")
        await asyncio.sleep(settings.BOOKING_SWEEP_INTERVAL_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Ensure DB exists and create tables
    if settings.uses_postgres:
        create_database()
    Base.metadata.create_all(bind=engine)

    if settings.SEED_DEMO_DATA:
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()

    sweep_task = asyncio.create_task(_booking_sweep_loop())
    yield

    # Shutdown: cancel background task
    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        pass


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers: every failure leaves as {"error": ..., "message": ...}
# ---------------------------------------------------------------------------


def _error_response(exc: WeStudyError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
        headers=headers,
    )


@app.exception_handler(WeStudyError)
async def westudy_error_handler(request: Request, exc: WeStudyError):
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{where}: {first.get('msg')}" if where else first.get("msg")
    else:
        message = None
    return _error_response(error_for_status(status.HTTP_400_BAD_REQUEST, message))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code in ERRORS_BY_STATUS:
        return _error_response(error_for_status(exc.status_code, str(exc.detail)))
    # 405 and friends keep their status
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_response(UnexpectedError())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(UnexpectedError())


app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"Hello": "WeStudy"}
