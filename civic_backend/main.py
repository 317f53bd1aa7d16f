"""
Application entry point: logging, the document store lifespan, error envelope
handlers and router registration.

Run with: uvicorn civic_backend.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from civic_backend import config
from civic_backend.admin.router import router as admin_router
from civic_backend.authentication.router import router as auth_router
from civic_backend.database import DocumentStore
from civic_backend.departments.router import router as departments_router
from civic_backend.errors import CivicError
from civic_backend.notifications.router import router as notifications_router
from civic_backend.reports.router import router as reports_router
from civic_backend.uploads.router import router as uploads_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = DocumentStore(config.DATA_DIR).open()
    app.state.store = store
    try:
        yield
    finally:
        store.close()


app = FastAPI(title="Civic Issue Reporter API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------- Error envelope --------------------

@app.exception_handler(CivicError)
async def civic_error_handler(request: Request, exc: CivicError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)},
                        headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"error": f"{field}: {message}" if field else message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# -------------------- Routers --------------------

app.include_router(auth_router)
app.include_router(reports_router)
app.include_router(departments_router)
app.include_router(notifications_router)
app.include_router(admin_router)
app.include_router(uploads_router)

app.mount(config.UPLOAD_URL_PREFIX, StaticFiles(directory=config.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/")
def read_root():
    return {"message": "Civic Issue Reporter API"}
