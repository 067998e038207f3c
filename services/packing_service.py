from firebase_admin import db
import datetime
import logging
from typing import List, Optional

from schemas.packing_schema import (
    FAQItem,
    GeneratorInput,
    PackingGenerateResult,
    PackingResponse,
    SavedPackingList,
    SavePackingListRequest,
)
from services import ai_service, photo_service
from services.firebase_service import next_sequential_id, snapshot_records
from services.packing_logic import generate_baseline, reconcile

logger = logging.getLogger(__name__)

PACKING_LISTS_PATH = 'packing_lists'
COUNTER_PATH = 'packing_list_counter'
MIN_FAQS = 5


def default_faqs(destination: str, packing: PackingResponse) -> List[FAQItem]:
    """Five generic destination FAQs, answered from the destination details where possible."""
    details = packing.destination_details
    return [
        FAQItem(
            question=f"What is the best time to visit {destination}?",
            answer=details.best_time_to_visit if details else "Check local climate and events for the best time.",
        ),
        FAQItem(
            question=f"What are the must-pack essentials for {destination}?",
            answer="Essentials include passport, weather-appropriate clothing, chargers, and any destination-specific items.",
        ),
        FAQItem(
            question=f"Are there any cultural tips for travelers to {destination}?",
            answer=details.cultural_tips if details else "Respect local customs and etiquette.",
        ),
        FAQItem(
            question=f"What is the local currency and how should I handle money in {destination}?",
            answer=details.currency if details else "Check the local currency and consider carrying some cash.",
        ),
        FAQItem(
            question=f"Is it safe to travel to {destination}?",
            answer=details.safety_tips if details else "Follow general safety precautions and stay aware of your surroundings.",
        ),
    ]


async def generate_packing_list(request: GeneratorInput) -> PackingGenerateResult:
    """
    Generates a packing list for a trip.
    A valid AI draft is reconciled with the rules; otherwise the rules alone are used.
    """
    logger.info("Generating packing list for %s (%d days, %s)", request.destination, request.days, request.season.value)

    raw, is_sample = await ai_service.draft_packing_response(request)
    draft, errors = ai_service.extract_and_validate_json(raw)

    if draft is not None:
        packing = reconcile(draft, request)
        used_strategy = "sample-fallback" if is_sample else "ai+rules"
    else:
        logger.warning("AI JSON invalid, falling back to rules-only. Details: %s", errors)
        packing = generate_baseline(request)
        used_strategy = "rules-only"

    if not packing.faqs or len(packing.faqs) < MIN_FAQS:
        packing.faqs = default_faqs(request.destination, packing)

    destination_image = await photo_service.fetch_destination_image(request.destination)

    return PackingGenerateResult(
        packing_data=packing,
        destination_image=destination_image,
        used_strategy=used_strategy,
    )


def _title_case_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def build_title(request: SavePackingListRequest) -> str:
    return (
        f"{request.destination} - {request.days} Day {_title_case_first(request.trip_type)} "
        f"Trip ({_title_case_first(request.season.value)})"
    )


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def save_packing_list(request: SavePackingListRequest) -> SavedPackingList:
    """Saves a generated packing list and returns it with its new ID."""
    packing_id = next_sequential_id(COUNTER_PATH)
    now = _now_iso()

    saved = SavedPackingList(
        **request.model_dump(),
        id=packing_id,
        title=build_title(request),
        created_at=now,
        updated_at=now,
    )
    db.reference(f'{PACKING_LISTS_PATH}/{packing_id}').set(saved.model_dump(mode="json"))
    logger.info("Saved packing list %s: %s", packing_id, saved.title)
    return saved


def get_packing_list(packing_id: str) -> Optional[SavedPackingList]:
    """Retrieves a saved packing list by ID."""
    data = db.reference(f'{PACKING_LISTS_PATH}/{packing_id}').get()
    if not data:
        return None
    return SavedPackingList(**data)


def get_all_packing_lists() -> List[SavedPackingList]:
    """Retrieves every saved packing list, newest first."""
    records = snapshot_records(db.reference(PACKING_LISTS_PATH).get())
    saved = [SavedPackingList(**record) for record in records]
    saved.sort(key=lambda item: item.created_at, reverse=True)
    return saved


def delete_packing_list(packing_id: str) -> bool:
    """Deletes a saved packing list. Returns False when it does not exist."""
    ref = db.reference(f'{PACKING_LISTS_PATH}/{packing_id}')
    if not ref.get():
        return False
    ref.delete()
    return True
