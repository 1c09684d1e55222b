import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from parkpass import __version__
from parkpass.auth import router as auth_router
from parkpass.bookings import router as bookings_router
from parkpass.config import settings
from parkpass.database import Base, engine
from parkpass.parks import router as parks_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__,
    description="Park visit booking and ticketing API",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    auth_router.router,
    prefix=f"{settings.API_V1_STR}/auth",
    tags=["Authentication"]
)

app.include_router(
    parks_router.districts_router,
    prefix=f"{settings.API_V1_STR}/districts",
    tags=["Districts"]
)

app.include_router(
    parks_router.parks_router,
    prefix=f"{settings.API_V1_STR}/parks",
    tags=["Parks"]
)

app.include_router(
    bookings_router.router,
    prefix=f"{settings.API_V1_STR}/bookings",
    tags=["Booking & Ticketing"]
)

@app.on_event("startup")
def create_tables():
    """Create any missing tables"""
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started", settings.PROJECT_NAME, __version__)

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": __version__,
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("parkpass.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
