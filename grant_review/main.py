import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from grant_review.config import settings
from grant_review.core.logging import configure_logging

# IMPORT ROUTERS
from grant_review.routers.common import validation_exception_handler
from grant_review.routers.health import router as health_router
from grant_review.routers.results import router as results_router
from grant_review.routers.progress import router as progress_router
from grant_review.routers.assignments import router as assignments_router
from grant_review.routers.assessments import router as assessments_router
from grant_review.routers.scoring import router as scoring_router
from grant_review.services.cache import reset_cache

configure_logging(settings)
logger = logging.getLogger(__name__)


# SWAGGER UI - tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Results"},
    {"name": "Progress"},
    {"name": "Assignments"},
    {"name": "Assessments"},
    {"name": "Scoring"},
]

# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# REGISTER EXCEPTION HANDLERS
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)        # Health
app.include_router(results_router)       # Results
app.include_router(progress_router)      # Progress
app.include_router(assignments_router)   # Assignments
app.include_router(assessments_router)   # Assessments
app.include_router(scoring_router)       # Scoring


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


@app.on_event("startup")
async def startup_event():
    logger.info(
        "service_starting",
        extra={"env": settings.APP_ENV, "store_backend": settings.STORE_BACKEND},
    )


@app.on_event("shutdown")
async def shutdown_event():
    reset_cache()
    logger.info("service_stopped")


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "grant_review.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
