"""
Clinic Practice API
Practice-management backend for a psychology clinic
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import uvicorn
from contextlib import asynccontextmanager
import logging
import os
from datetime import datetime

# Import our modules
from app.database import engine, Base, SessionLocal
from app.models import activity_log, clinical_session, company, patient, role, user  # noqa: F401 (register tables)
from app.routers import auth, companies, dashboard, patients
from app.services.role_seeder import seed_roles
from app.utils.error_handler import DatabaseManager, register_exception_handlers
from app.utils.rate_limit import limiter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Startup
    logger.info("Starting Clinic Practice API...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    with DatabaseManager(SessionLocal) as db:
        seed_roles(db)

    yield

    # Shutdown
    logger.info("Shutting down Clinic Practice API...")

# Create FastAPI app
app = FastAPI(
    title="Clinic Practice API",
    description="Authentication, company directory, patient records and dashboard for a psychology clinic",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Uniform error envelopes
register_exception_handlers(app)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(companies.router, prefix="/api/companies", tags=["companies"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(patients.router, prefix="/api/patients", tags=["patients"])

@app.get("/")
@limiter.limit("10/minute")
async def root(request: Request):
    """Root endpoint with API information - publicly accessible"""
    return {
        "message": "Clinic Practice API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "timestamp": datetime.utcnow().isoformat()
    }

@app.get("/health")
@limiter.limit("30/minute")
async def health_check(request: Request):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
