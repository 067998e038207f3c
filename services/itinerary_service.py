from firebase_admin import db
import asyncio
import datetime
import logging
from typing import List, Optional

from schemas.itinerary_schema import (
    DestinationOverview,
    ItineraryGenerateRequest,
    ItineraryGenerateResult,
    SavedItinerary,
    SaveItineraryRequest,
)
from services import ai_service, photo_service
from services.ai_service import AIServiceError
from services.budget_logic import calculate_trip_budget
from services.firebase_service import next_sequential_id, snapshot_records

logger = logging.getLogger(__name__)

ITINERARIES_PATH = 'itineraries'
COUNTER_PATH = 'itinerary_counter'

TITLE_MAX_LENGTH = 60
TITLE_MIN_LENGTH = 50
TITLE_SUFFIX = " Itinerary"
TITLE_PADDING_WORDS = ("Perfect", "Complete", "Ultimate", "Detailed", "Comprehensive")

# Checked in order; the first match labels the title
COMPANION_LABELS = (
    ("solo", "Solo"),
    ("couple", "Couple"),
    ("family with young", "Family"),
    ("family with teen", "Family"),
    ("group of friends", "Group"),
    ("business", "Business"),
)

INTEREST_LABELS = (
    (("museums",), "Museums"),
    (("historical sites",), "Historical Sites"),
    (("architecture",), "Architecture"),
    (("local traditions",), "Local Traditions"),
    (("culture", "historical"), "Museums"),
    (("local cuisine",), "Local Cuisine"),
    (("street food",), "Street Food"),
    (("fine dining",), "Fine Dining"),
    (("food markets",), "Food Markets"),
    (("cooking classes",), "Cooking Classes"),
    (("food", "dining", "cuisine"), "Local Cuisine"),
    (("hiking",), "Hiking"),
    (("water sports",), "Water Sports"),
    (("extreme sports",), "Extreme Sports"),
    (("cycling",), "Cycling"),
    (("rock climbing",), "Rock Climbing"),
    (("adventure", "sports"), "Hiking"),
    (("national parks",), "National Parks"),
    (("wildlife watching",), "Wildlife Watching"),
    (("gardens",), "Gardens"),
    (("beaches",), "Beaches"),
    (("scenic views",), "Scenic Views"),
    (("nature", "wildlife", "beach"), "National Parks"),
    (("nightlife",), "Nightlife"),
    (("live music",), "Live Music"),
    (("theater",), "Theater"),
    (("festivals",), "Festivals"),
    (("casinos",), "Casinos"),
    (("entertainment",), "Nightlife"),
    (("local markets",), "Local Markets"),
    (("shopping centers",), "Shopping Centers"),
    (("antiques",), "Antiques"),
    (("souvenirs",), "Souvenirs"),
    (("fashion",), "Fashion"),
    (("shopping",), "Local Markets"),
    (("spas",), "Spas"),
    (("yoga",), "Yoga"),
    (("meditation",), "Meditation"),
    (("hot springs",), "Hot Springs"),
    (("wellness retreats",), "Wellness Retreats"),
    (("wellness", "spa", "relaxation"), "Spas"),
    (("photography spots",), "Photography Spots"),
    (("art galleries",), "Art Galleries"),
    (("street art",), "Street Art"),
    (("instagrammable places",), "Instagrammable Places"),
    (("photography", "art"), "Photography Spots"),
)


def budget_label(budget: str) -> str:
    if "Budget-friendly" in budget:
        return "Budget"
    if "Mid-range" in budget:
        return "Mid-Range"
    if "Luxury" in budget and "Ultra" not in budget:
        return "Luxury"
    if "Ultra-luxury" in budget:
        return "Ultra-Luxury"
    return ""


def companion_label(travel_companions: str) -> str:
    for keyword, label in COMPANION_LABELS:
        if keyword in travel_companions:
            return label
    return ""


def interest_label(interests: str) -> str:
    text = interests.lower()
    for keywords, label in INTEREST_LABELS:
        if any(keyword in text for keyword in keywords):
            return label
    return ""


def build_itinerary_title(destination: str, days: int, budget: str, travel_companions: str, interests: str) -> str:
    """
    Builds a 50-60 character search-friendly title such as
    "Perfect 3-Day Paris Couple Museums Mid-Range Itinerary".
    """
    base = f"{days}-Day {destination}"
    room = TITLE_MAX_LENGTH - len(base) - len(TITLE_SUFFIX)

    qualifiers = []
    companion = companion_label(travel_companions)
    if companion and room > len(companion) + 1:
        qualifiers.append(companion)
    for label in (interest_label(interests), budget_label(budget)):
        if label and room > len(" ".join(qualifiers)) + len(label) + 2:
            qualifiers.append(label)

    title = base
    if qualifiers:
        title += " " + " ".join(qualifiers)
    title += TITLE_SUFFIX

    if len(title) > TITLE_MAX_LENGTH:
        title = f"{base} Travel Itinerary"
        if len(title) > TITLE_MAX_LENGTH:
            title = f"{base} Guide"

    if len(title) < TITLE_MIN_LENGTH:
        for word in TITLE_PADDING_WORDS:
            padded = f"{word} {title}"
            if TITLE_MIN_LENGTH <= len(padded) <= TITLE_MAX_LENGTH:
                return padded
    return title


async def _overview_or_none(destination: str) -> Optional[DestinationOverview]:
    try:
        return await ai_service.draft_destination_overview(destination)
    except AIServiceError as e:
        logger.warning("Destination overview unavailable for %s: %s", destination, e)
        return None


async def generate_itinerary(request: ItineraryGenerateRequest) -> ItineraryGenerateResult:
    """
    Generates an itinerary with Gemini, estimates its cost and saves it.
    A failed save is logged and leaves `saved_id` empty.
    """
    logger.info("Generating %d-day itinerary for %s", request.days, request.destination)

    days = await ai_service.draft_itinerary(request)

    destination_image, overview = await asyncio.gather(
        photo_service.fetch_destination_image(request.destination),
        _overview_or_none(request.destination),
    )

    title = build_itinerary_title(
        request.destination, request.days, request.budget, request.travel_companions, request.interests
    )
    budget_breakdown = calculate_trip_budget(days, request.budget, request.days, request.travel_companions)

    saved_id = None
    try:
        saved = save_itinerary(SaveItineraryRequest(
            title=title,
            destination=request.destination,
            days=request.days,
            budget=request.budget,
            travel_companions=request.travel_companions,
            interests=request.interests,
            itinerary=days,
            destination_image=destination_image,
            overview=overview,
        ))
        saved_id = saved.id
    except Exception as e:
        logger.error("Failed to auto-save itinerary: %s", e)

    return ItineraryGenerateResult(
        destination=request.destination,
        title=title,
        itinerary=days,
        budget_breakdown=budget_breakdown,
        destination_image=destination_image,
        overview=overview,
        saved_id=saved_id,
    )


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def save_itinerary(request: SaveItineraryRequest) -> SavedItinerary:
    """Saves an itinerary and returns it with its new ID."""
    itinerary_id = next_sequential_id(COUNTER_PATH)
    now = _now_iso()

    saved = SavedItinerary(
        **request.model_dump(),
        id=itinerary_id,
        created_at=now,
        updated_at=now,
    )
    db.reference(f'{ITINERARIES_PATH}/{itinerary_id}').set(saved.model_dump(mode="json"))
    logger.info("Saved itinerary %s: %s", itinerary_id, saved.title)
    return saved


def get_itinerary(itinerary_id: str) -> Optional[SavedItinerary]:
    """Retrieves a saved itinerary by ID."""
    data = db.reference(f'{ITINERARIES_PATH}/{itinerary_id}').get()
    if not data:
        return None
    return SavedItinerary(**data)


def get_all_itineraries() -> List[SavedItinerary]:
    """Retrieves every saved itinerary, newest first."""
    records = snapshot_records(db.reference(ITINERARIES_PATH).get())
    saved = [SavedItinerary(**record) for record in records]
    saved.sort(key=lambda item: item.created_at, reverse=True)
    return saved
