"""
FastAPI app assembly: logging, middleware, error mapping and router wiring.
"""
import logging
import os

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from realtyhub import __version__
from realtyhub.errors import AuthorizationError, Conflict, NotFound, RealtyHubError, ValidationError
from realtyhub.api.teams import router as teams_router
from realtyhub.api.roles import router as roles_router, permissions_router
from realtyhub.api.users import router as users_router
from realtyhub.api.social import router as social_router
from realtyhub.api.properties import router as properties_router
from realtyhub.api.posts import router as posts_router

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="RealtyHub Service",
    description="Multi-tenant blog and real-estate listings API with teams and role-based access control.",
    version=__version__,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8000",
]
extra_origins = os.getenv("CORS_ORIGINS", "")
origins.extend(o.strip() for o in extra_origins.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthorizationError)
async def handle_authorization_error(request: Request, exc: AuthorizationError):
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_403_FORBIDDEN)


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError):
    return JSONResponse(
        {"detail": str(exc), "errors": exc.errors, "bag": exc.bag},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


@app.exception_handler(NotFound)
async def handle_not_found(request: Request, exc: NotFound):
    return JSONResponse({"detail": str(exc) or "Not found"}, status_code=status.HTTP_404_NOT_FOUND)


@app.exception_handler(Conflict)
async def handle_conflict(request: Request, exc: Conflict):
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_409_CONFLICT)


@app.exception_handler(RealtyHubError)
async def handle_domain_error(request: Request, exc: RealtyHubError):
    logger.error("unhandled_domain_error: %s: %s", exc.__class__.__name__, exc)
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)


app.include_router(teams_router)
app.include_router(roles_router)
app.include_router(permissions_router)
app.include_router(users_router)
app.include_router(social_router)
app.include_router(properties_router)
app.include_router(posts_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "realtyhub-service"}
