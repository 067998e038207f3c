from fastapi import APIRouter, HTTPException, Response, status
from typing import List
import logging

from schemas.packing_schema import (
    PackingGenerateRequest,
    PackingGenerateResult,
    SavedPackingList,
    SavePackingListRequest,
)
from services import packing_service
from services.ai_service import RateLimitError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/packing",
    tags=["packing"],
    responses={404: {"description": "Not found"}},
)

@router.post("/generate", response_model=PackingGenerateResult)
async def generate_packing_list(request: PackingGenerateRequest):
    """
    Generates a packing list for a trip.
    The AI draft is merged with the rule baseline; if the AI answer is unusable the rules are used alone.
    """
    try:
        return await packing_service.generate_packing_list(request)
    except RateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except Exception as e:
        logger.exception("Unhandled error while generating packing list")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {e}")

@router.post("/save")
def save_packing_list(request: SavePackingListRequest):
    """
    Saves a generated packing list and returns its sequential ID.
    """
    try:
        saved = packing_service.save_packing_list(request)
        return {"success": True, "id": saved.id}
    except Exception as e:
        logger.exception("Error saving packing list")
        raise HTTPException(status_code=500, detail=f"Failed to save packing list: {e}")

@router.get("", response_model=List[SavedPackingList])
def get_all_packing_lists():
    """
    Retrieves all saved packing lists, newest first.
    """
    try:
        return packing_service.get_all_packing_lists()
    except Exception as e:
        logger.exception("Error reading saved packing lists")
        raise HTTPException(status_code=500, detail=f"Failed to load saved packing lists: {e}")

@router.get("/{packing_id}", response_model=SavedPackingList)
def get_packing_list(packing_id: str):
    """
    Retrieves a single saved packing list by its ID.
    """
    try:
        saved = packing_service.get_packing_list(packing_id)
    except Exception as e:
        logger.exception("Error reading packing list %s", packing_id)
        raise HTTPException(status_code=500, detail=f"Failed to load packing list: {e}")
    if not saved:
        raise HTTPException(status_code=404, detail="Packing list not found")
    return saved

@router.delete("/{packing_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_packing_list(packing_id: str):
    """
    Deletes a saved packing list.
    """
    try:
        deleted = packing_service.delete_packing_list(packing_id)
    except Exception as e:
        logger.exception("Error deleting packing list %s", packing_id)
        raise HTTPException(status_code=500, detail=f"Failed to delete packing list: {e}")
    if not deleted:
        raise HTTPException(status_code=404, detail="Packing list not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
