import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from resume_tailor.api.v1.health import router as health_router
from resume_tailor.api.v1.generate import router as generate_router
from resume_tailor.api.v1.ingest import router as ingest_router
from resume_tailor.core.cors import cors_allow_credentials, cors_allowed_origins
from resume_tailor.core.errors import ResumeTailorError, resume_tailor_error_handler
from resume_tailor.core.rate_limit import limiter
from resume_tailor.core.config import settings
from dotenv import load_dotenv
from resume_tailor.core.lifespan import lifespan

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Resume Tailor API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=cors_allow_credentials(),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(ResumeTailorError, resume_tailor_error_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/api", tags=["Health"])
app.include_router(generate_router, prefix="/api", tags=["Generate"])
app.include_router(ingest_router, prefix="/api", tags=["Ingest"])
app.mount("/files", StaticFiles(directory=settings.files_dir, check_dir=False), name="files")
