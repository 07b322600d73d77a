import os
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from journal_insights.routes import (
    auth_router,
    journals_router,
    insights_router,
)
from journal_insights.background_jobs import scheduler
from journal_insights.database import init_db, DATABASE_URL

# Create FastAPI app
app = FastAPI(
    title="Journal Insights",
    description="Journaling backend with daily quotes, summaries and emotion trends",
    version="1.0.0"
)

# Include routers
app.include_router(auth_router)
app.include_router(journals_router)
app.include_router(insights_router)


@app.on_event("startup")
def on_startup():
    """Ensure DB is reachable and initialized, then start the daily jobs.
    If initialization fails the app will raise and stop with a clear error message.
    """
    try:
        init_db()
    except Exception as e:
        # Re-raise as RuntimeError so the server fails loudly
        raise RuntimeError(
            f"Database initialization failed for DATABASE_URL={DATABASE_URL}: {e}"
        ) from e
    scheduler.start()


@app.on_event("shutdown")
def on_shutdown():
    scheduler.stop()


@app.get("/health")
async def health():
    return {"status": "ok"}


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"message": ...}."""
    return JSONResponse({"message": exc.detail}, status_code=exc.status_code)


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    """Log storage failures with context; the caller only sees a generic 500."""
    logger.exception(f"Storage failure on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse({"message": "Internal server error"}, status_code=500)


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse({"message": "Internal server error"}, status_code=500)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("journal_insights.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
