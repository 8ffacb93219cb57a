"""
Expense Tracker FastAPI application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from expense_tracker import config
from expense_tracker.db.core import Base, engine
from expense_tracker.logging_config import get_logger, setup_logging
from expense_tracker.routers.users import router as users_router
from expense_tracker.routers.transactions import router as transactions_router

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    if config.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
    logger.info("Expense Tracker API started")
    yield
    logger.info("Expense Tracker API shutting down")


app = FastAPI(title="Expense Tracker API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


# ===== ERROR RESPONSES =====
# Every error body is {"message": str}

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    missing = []
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        if error.get("type") == "missing":
            missing.append(field)
        else:
            problems.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    if missing:
        return "Missing required fields: " + ", ".join(missing)
    return "; ".join(problems) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": _describe_validation_errors(exc)},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


@app.get("/health")
async def health_check():
    return {"status": "ok"}


app.include_router(users_router, prefix=config.API_PREFIX)
app.include_router(transactions_router, prefix=config.API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("expense_tracker.main:app", host="0.0.0.0", port=8000, reload=True)
