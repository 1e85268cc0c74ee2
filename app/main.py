import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.core.rate_limiter import limiter

from app.api.api import api_router
from app.core.config import settings
from app.database.session import check_database

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("Application startup...")
    if not settings.DATABASE_URI:
        logger.warning("⚠️ DATABASE_URI is not set; database endpoints will fail.")
    logger.info(f"🤖 Chat assistant model '{settings.OLLAMA_MODEL}' at {settings.OLLAMA_BASE_URL}")
    yield
    # Shutdown logic
    logger.info("Application shutdown...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Multi-tenant task management API with a chat assistant",
    version="1.0.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.API_V1_STR else "/openapi.json",
    lifespan=lifespan
)


class HealthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/health":
            return Response("OK", status_code=200)
        return await call_next(request)


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

origins = settings.BACKEND_CORS_ORIGINS
regex_parts = [o.replace('.', r'\.').replace('*', r'[a-zA-Z0-9-]+') for o in origins]
origin_regex = r"|".join(regex_parts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=origin_regex or None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(HealthMiddleware)
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health-detailed")
async def health_check_detailed():
    """Detailed health check including database reachability"""
    health_status = {"status": "healthy", "timestamp": time.time()}
    database = await check_database()
    health_status["database"] = database
    if not database.get("healthy"):
        health_status["status"] = "degraded"
    return health_status


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": f"{settings.PROJECT_NAME} is running"}
