import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lms_gradebook.core.config import LOG_LEVEL
from lms_gradebook.core.errors import add_error_handlers
from lms_gradebook.core.logging_middleware import LoggingMiddleware
from lms_gradebook.db.init_db import init_db
from lms_gradebook.routers.auth import router as auth_router
from lms_gradebook.routers.gradebook import router as gradebook_router

logging.basicConfig(level=LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="LMS Gradebook", lifespan=lifespan)

# Middleware
app.add_middleware(LoggingMiddleware)
add_error_handlers(app)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(gradebook_router, prefix="/courses", tags=["gradebook"])
