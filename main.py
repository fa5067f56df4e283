# main.py
# Entry point for the FastAPI application

import logging
import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Load environment variables before the service modules read them
load_dotenv()

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from streamify.routes import auth, users, chat
from streamify.services.otp_service import cleanup_expired_otps
from streamify.utils.db_setup import get_mongo_client, setup_db_indexes, close_mongo_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s: %(message)s",
    handlers=[logging.FileHandler("backend.log"), logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

# Suppress pymongo debug logs
logging.getLogger("pymongo").setLevel(logging.WARNING)

# Validate required environment variables
required_env_vars = ["MONGO_URI"]
missing_vars = [var for var in required_env_vars if not os.getenv(var)]
if missing_vars:
    logger.error(f"Missing required environment variables: {missing_vars}")
    raise Exception(f"Missing required environment variables: {missing_vars}")

# Validate optional but important environment variables
optional_vars = [
    "JWT_SECRET_KEY",
    "STREAM_API_KEY",
    "STREAM_API_SECRET",
    "SMTP_HOST",
    "SMTP_USER",
    "SMTP_PASS",
    "EMAIL_SENDER",
]
missing_optional = [var for var in optional_vars if not os.getenv(var)]
if missing_optional:
    logger.warning(
        f"Missing optional environment variables (some features may not work): {missing_optional}"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        get_mongo_client().server_info()  # Test connection
        logger.info("Successfully connected to MongoDB")
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {str(e)}")
        raise Exception(f"MongoDB connection failed: {str(e)}")

    setup_db_indexes()
    cleanup_expired_otps()
    yield
    close_mongo_client()


# Initialize FastAPI app
app = FastAPI(
    title="Streamify API",
    description="API for the Streamify social chat application",
    version="1.0.0",
    docs_url="/docs" if os.getenv("ENVIRONMENT") == "development" else None,
    redoc_url="/redoc" if os.getenv("ENVIRONMENT") == "development" else None,
    lifespan=lifespan,
)

# Add security middleware
if os.getenv("ENVIRONMENT") == "production":
    allowed_hosts = (
        os.getenv("ALLOWED_HOSTS", "").split(",")
        if os.getenv("ALLOWED_HOSTS")
        else ["*"]
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)


# Add security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    if os.getenv("ENVIRONMENT") == "production":
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
    return response


# The web client sends cookies, so origins must be explicit
origins = os.getenv("CLIENT_URL", "http://localhost:5173").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)
logger.info(f"CORS middleware configured with origins: {origins}")


# Clients read error text from the "message" key
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


# Password reset routes answer with the {message, error, success} envelope
PASSWORD_RESET_PATHS = {
    "/api/auth/forgot-password",
    "/api/auth/verify-forgot-password-otp",
    "/api/auth/reset-password",
}


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        fields = [str(part) for part in error.get("loc", ()) if part != "body"]
        if fields and error.get("type") != "json_invalid":
            return f"Invalid value for {fields[-1]}"
    return "Invalid request body"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = _validation_message(exc)
    logger.warning(f"Rejected request body on {request.url.path}: {message}")
    content = {"message": message}
    if request.url.path in PASSWORD_RESET_PATHS:
        content.update({"error": True, "success": False})
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


# Include API routes
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])
logger.info("API routes included")


@app.get("/health")
def health():
    """Return a basic health check message."""
    logger.info("Health check endpoint accessed")
    try:
        get_mongo_client().server_info()  # Verify MongoDB connection
        return {"message": "Streamify API is running"}
    except Exception as e:
        logger.error(f"MongoDB health check failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Database connection error")


class SPAStaticFiles(StaticFiles):
    """Static files that fall back to index.html for client-side routes."""

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404:
                raise
            return await super().get_response("index.html", scope)


frontend_dist = os.getenv("FRONTEND_DIST_DIR", os.path.join("frontend", "dist"))
if os.path.isdir(frontend_dist):
    app.mount("/", SPAStaticFiles(directory=frontend_dist, html=True), name="frontend")
    logger.info(f"Serving frontend from {frontend_dist}")
