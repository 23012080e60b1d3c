"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import Base, engine
from app.services.errors import WorkflowError, ValidationError

# Import routers
from app.routers import accounts, event_requests, proposals, documents

# Import all models so Base.metadata knows about them
from app.models.account import Account                       # noqa: F401
from app.models.event_request import EventRequest            # noqa: F401
from app.models.proposal import Proposal                     # noqa: F401
from app.models.request_transition import RequestTransition  # noqa: F401
from app.models.ledger_entry import LedgerEntry              # noqa: F401
from app.models.notification import Notification             # noqa: F401

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Customization Requests",
    description="Paid event briefs, provider proposals and the accept-one workflow",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    """Every workflow failure becomes ``{"code", "detail"}`` with its own status."""
    body = {"code": exc.code, "detail": exc.detail}
    if isinstance(exc, ValidationError) and exc.fields:
        body["fields"] = exc.fields
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"code": ValidationError.code, "detail": jsonable_encoder(exc.errors())},
    )


# Register routers
app.include_router(accounts.router, prefix="/api/accounts", tags=["Accounts"])
app.include_router(event_requests.router, prefix="/api/event-requests", tags=["EventRequests"])
app.include_router(proposals.router, prefix="/api/event-requests", tags=["Proposals"])
app.include_router(documents.router, prefix="/api/proposal-documents", tags=["Documents"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
