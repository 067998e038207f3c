from fastapi import APIRouter, HTTPException
from typing import List
import logging

from schemas.itinerary_schema import (
    BudgetBreakdown,
    BudgetRequest,
    DestinationOverview,
    DestinationOverviewRequest,
    ItineraryGenerateRequest,
    ItineraryGenerateResult,
    SavedItinerary,
    SaveItineraryRequest,
)
from services import ai_service, itinerary_service
from services.ai_service import AIServiceError, RateLimitError
from services.budget_logic import calculate_trip_budget

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/itinerary",
    tags=["itinerary"],
    responses={404: {"description": "Not found"}},
)

@router.post("/generate", response_model=ItineraryGenerateResult)
async def generate_itinerary(request: ItineraryGenerateRequest):
    """
    Generates a day-by-day itinerary with a cost estimate and saves it.
    """
    try:
        return await itinerary_service.generate_itinerary(request)
    except RateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except AIServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception("Unhandled error while generating itinerary")
        raise HTTPException(status_code=500, detail=f"Failed to generate itinerary: {e}")

@router.post("/budget", response_model=BudgetBreakdown)
def estimate_budget(request: BudgetRequest):
    """
    Estimates the cost of an itinerary for the whole party.
    """
    return calculate_trip_budget(request.itinerary, request.budget, request.days, request.travel_companions)

@router.post("/overview", response_model=DestinationOverview)
async def destination_overview(request: DestinationOverviewRequest):
    """
    Returns background content for a destination: overview, FAQs, hidden gems, experiences and food.
    """
    try:
        return await ai_service.draft_destination_overview(request.destination)
    except RateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))

@router.post("/save")
def save_itinerary(request: SaveItineraryRequest):
    """
    Saves an itinerary and returns its sequential ID.
    """
    try:
        saved = itinerary_service.save_itinerary(request)
        return {"success": True, "id": saved.id}
    except Exception as e:
        logger.exception("Error saving itinerary")
        raise HTTPException(status_code=500, detail=f"Failed to save itinerary: {e}")

@router.get("", response_model=List[SavedItinerary])
def get_all_itineraries():
    """
    Retrieves all saved itineraries, newest first.
    """
    try:
        return itinerary_service.get_all_itineraries()
    except Exception as e:
        logger.exception("Error reading saved itineraries")
        raise HTTPException(status_code=500, detail=f"Failed to load saved itineraries: {e}")

@router.get("/{itinerary_id}", response_model=SavedItinerary)
def get_itinerary(itinerary_id: str):
    """
    Retrieves a single saved itinerary by its ID.
    """
    try:
        saved = itinerary_service.get_itinerary(itinerary_id)
    except Exception as e:
        logger.exception("Error reading itinerary %s", itinerary_id)
        raise HTTPException(status_code=500, detail=f"Failed to load itinerary: {e}")
    if not saved:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return saved
