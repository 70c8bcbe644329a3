import logging

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from resume_review.api.v1.health import router as health_router
from resume_review.api.v1.analysis import router as analysis_router
from resume_review.api.v1.matching import router as matching_router
from resume_review.api.v1.text_tools import router as text_tools_router
from resume_review.core.cors import install_cors
from resume_review.core.rate_limit import limiter
from resume_review.core.config import settings
from dotenv import load_dotenv
from resume_review.core.lifespan import lifespan

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Resume Review API", version="0.1.0", lifespan=lifespan)

install_cors(app)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(analysis_router, prefix="/v1", tags=["Analysis"])
app.include_router(matching_router, prefix="/v1", tags=["Matching"])
app.include_router(text_tools_router, prefix="/v1", tags=["Text Tools"])
