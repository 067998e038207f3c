from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from api.routers import itinerary, packing
from services.firebase_service import initialize_firebase

@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_firebase()
    yield

app = FastAPI(
    title="Packing List Generator API",
    description="Generates AI-assisted, rule-checked packing lists and itineraries, and stores saved ones.",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS (Cross-Origin Resource Sharing)
# This allows the frontend to call the API from another origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

@app.get("/health", tags=["Root"])
def health():
    """Liveness probe."""
    return {"status": "ok"}

# Mount all routers with the /api prefix
app.include_router(packing.router, prefix="/api")
app.include_router(itinerary.router, prefix="/api")
