"""
Main FastAPI application
IELTS practice: email-link sign-in, random question rounds, favorites and wrong-book
"""
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool
import logging
import time

from ielts_trainer.config import settings
from ielts_trainer.database import init_db
from ielts_trainer.api import auth, collections, dashboard, practice
from ielts_trainer.exceptions import NotAuthenticatedError
from ielts_trainer.services.auth_service import get_auth_provider
from ielts_trainer.utils.route_guard import (
    ACCESS_COOKIE, HOME_PATH, LOGIN_PATH, REFRESH_COOKIE,
    GuardDecision, RouteGuard, set_session_cookies,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

UNGUARDED_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="IELTS practice with random questions, favorites and a wrong-answer book",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.state.route_guard = RouteGuard(get_auth_provider())

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Route guard middleware
@app.middleware("http")
async def route_guard_middleware(request: Request, call_next):
    """Resolve the session and redirect before any page logic runs"""

    request.state.user = None
    # Preflights carry no cookies; CORSMiddleware answers them
    if request.method == "OPTIONS" or request.url.path in UNGUARDED_PATHS:
        return await call_next(request)

    guard: RouteGuard = request.app.state.route_guard
    decision, session = await run_in_threadpool(
        guard.check,
        request.url.path,
        request.cookies.get(ACCESS_COOKIE),
        request.cookies.get(REFRESH_COOKIE),
    )

    if decision == GuardDecision.REDIRECT_LOGIN:
        response = RedirectResponse(LOGIN_PATH, status_code=307)
    elif decision == GuardDecision.REDIRECT_HOME:
        response = RedirectResponse(HOME_PATH, status_code=307)
    else:
        request.state.user = session.user
        response = await call_next(request)

    if session.refreshed is not None:
        set_session_cookies(response, session.refreshed)

    return response


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing"""

    start_time = time.time()

    # Process request
    response = await call_next(request)

    # Calculate duration
    duration = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration:.3f}s"
    )

    return response


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors gracefully"""

    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "detail": str(exc) if settings.DEBUG else None
        }
    )


# HTTP exception handler
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Format HTTP exceptions consistently"""

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "message": exc.detail,
            "status_code": exc.status_code
        }
    )


# Pages that need a user send everyone else to the login page
@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    return RedirectResponse(LOGIN_PATH, status_code=303)


# Health check endpoint
@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring

    Returns service status
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": time.time()
    }


# Root endpoint; the route guard redirects before this runs when auth is configured
@app.get("/")
async def root():
    return RedirectResponse(LOGIN_PATH, status_code=307)


# Include routers
app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(practice.router)
app.include_router(collections.router)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if settings.AUTO_CREATE_TABLES:
        try:
            init_db()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {str(e)}")
            raise

    logger.info("Application startup complete")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down application")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "ielts_trainer.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
