import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from pathlib import Path
from core.config import ALLOWED_ORIGINS, APP_ENV, IS_PRODUCTION, PORT
from core.database import Base, engine, wait_for_database
from core.logging_config import setup_logging
from core.middleware import AccessLogMiddleware, RateLimitMiddleware, SecurityHeadersMiddleware
from routers.upload_router import router as upload_router
from routers.data_router import router as data_router
import models.applicant_record

setup_logging()
logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).resolve().parent / "public"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting applicant ingest backend in {APP_ENV} mode...")
    wait_for_database()
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database tables created")
    logger.info(f"Listening on port {PORT}, database {engine.url.render_as_string(hide_password=True)}")

    yield

    engine.dispose()
    logger.info("Database connections closed")
    logger.info("Applicant ingest backend stopped")


app = FastAPI(title="Scheme Applicant Data Ingest", lifespan=lifespan)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AccessLogMiddleware)

app.include_router(upload_router)
app.include_router(data_router)
app.mount("/static", StaticFiles(directory=PUBLIC_DIR), name="static")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = "Endpoint not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"success": False, "message": f"Invalid request: {errors}"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    message = "An unexpected error occurred" if IS_PRODUCTION else str(exc)
    return JSONResponse(status_code=500, content={"success": False, "message": message})


@app.get("/", include_in_schema=False)
def root():
    return FileResponse(PUBLIC_DIR / "index.html")


@app.get("/health")
def health():
    return {
        "status": "Applicant ingest API is running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
