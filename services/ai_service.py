import httpx
import json
import logging
import re
from typing import List, Optional, Tuple

from pydantic import ValidationError

from core.config import settings
from schemas.itinerary_schema import DayItinerary, DestinationOverview, ItineraryDraft, ItineraryGenerateRequest
from schemas.packing_schema import CATEGORIES, GeneratorInput, PackingResponse

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
PLACEHOLDER_KEYS = {"", "your_gemini_api_key_here", "your_new_api_key_here"}

DESTINATION_DETAIL_FIELDS = (
    "overview", "best_time_to_visit", "weather_summary", "cultural_tips",
    "local_transport", "currency", "language", "power_plugs", "safety_tips",
)

_TRAILING_COMMA = re.compile(r",\s*(\]|\})")
_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


class AIServiceError(Exception):
    """The AI service could not produce a usable answer."""


class RateLimitError(AIServiceError):
    """HTTP 429 from the AI service."""


def build_packing_prompt(data: GeneratorInput) -> str:
    """
    Builds the JSON-only prompt describing the packing response schema.
    """
    return f"""You are a packing assistant. Produce ONLY valid JSON (no prose) following the exact schema below.

Generate a comprehensive packing list for a {data.days}-day trip to {data.destination} during {data.season.value} season, for a {data.trip_type} trip focusing on {data.activities or "general sightseeing"}.

Guidelines:
1. Consider the destination's climate, culture, and local customs.
2. Include essentials based on trip duration and activities.
3. Suggest quantities for each item when relevant.
4. Include both must-have items and optional/recommended items.
5. Consider seasonal weather conditions and appropriate clothing.
6. Include destination-specific items (adapters, medications, etc.).
7. Organize items by category for easy packing.
8. Target item descriptions to <= 25 words, clear and concrete.

Return a structured JSON object with these fields:
- packing_list: categories for {", ".join(CATEGORIES)}; each a list of objects with "item", "quantity", "description" and "priority" ("essential", "recommended" or "optional")
- packing_tips: array of tips
- destination_notes: string
- destination_details: {", ".join(DESTINATION_DETAIL_FIELDS)}
- faqs: array of 5 objects with question and answer

FAQ Guidelines:
- Provide 5 frequently asked questions and answers about travel to {data.destination}.
- Cover topics like best time to visit, essentials, cultural tips, currency, and safety.
- Each answer should be concise (max 40 words).

Output: JSON only."""


async def generate_text_with_gemini(
    prompt: str,
    model: Optional[str] = None,
    generation_config: Optional[dict] = None,
) -> str:
    """
    Generic function to generate text using the Gemini generateContent API.
    Raises RateLimitError on HTTP 429 and AIServiceError for every other failure.
    """
    api_key = settings.GEMINI_API_KEY
    if not api_key or api_key.strip() in PLACEHOLDER_KEYS:
        raise AIServiceError("Gemini API key is not configured.")

    model = model or settings.GEMINI_MODEL
    body = {"contents": [{"parts": [{"text": prompt}]}]}
    if generation_config:
        body["generationConfig"] = generation_config

    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        try:
            logger.info("Sending request to Gemini with model: %s", model)
            response = await client.post(
                GEMINI_URL.format(model=model),
                params={"key": api_key},
                json=body,
                headers={"Content-Type": "application/json"},
            )
            logger.info("Gemini response status: %s", response.status_code)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("HTTP error from Gemini: %s - %s", status, e.response.text[:500])
            if status == 429:
                raise RateLimitError("Rate limit exceeded. Please try again later.") from e
            raise AIServiceError(f"Error from Gemini: {status}") from e
        except httpx.RequestError as e:
            logger.error("Request error to Gemini: %s", e)
            raise AIServiceError(f"Failed to connect to Gemini: {e}") from e

    try:
        data = response.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (json.JSONDecodeError, KeyError, IndexError, TypeError) as e:
        logger.error("Unexpected response structure from Gemini: %s", response.text[:500])
        raise AIServiceError("Gemini returned an unexpected response structure") from e


async def draft_packing_response(data: GeneratorInput) -> Tuple[str, bool]:
    """
    Asks Gemini for a packing draft.
    Returns the raw text and whether it is the bundled sample rather than a live answer.
    """
    prompt = build_packing_prompt(data)
    logger.debug("Generated prompt length: %d", len(prompt))
    try:
        return await generate_text_with_gemini(prompt), False
    except RateLimitError:
        raise
    except AIServiceError as e:
        logger.warning("Using sample packing data: %s", e)
        return json.dumps(SAMPLE_PACKING_RESPONSE), True


def _check_structure(candidate) -> Optional[str]:
    """Returns a description of the first structural problem, or None."""
    if not isinstance(candidate, dict) or not isinstance(candidate.get("packing_list"), dict):
        return "Invalid packing_list structure"

    packing_list = candidate["packing_list"]
    for category in CATEGORIES:
        items = packing_list.get(category)
        if not isinstance(items, list):
            return f"Missing or invalid category: {category}"
        for item in items:
            if not isinstance(item, dict) or not all(
                item.get(field) for field in ("item", "quantity", "description", "priority")
            ):
                return f"Invalid item structure in category: {category}"

    if not isinstance(candidate.get("packing_tips"), list):
        return "Invalid packing_tips structure"
    if not isinstance(candidate.get("destination_notes"), str):
        return "Invalid destination_notes structure"

    details = candidate.get("destination_details")
    if details:
        if not isinstance(details, dict):
            return "Invalid destination_details structure"
        for field in DESTINATION_DETAIL_FIELDS:
            if not isinstance(details.get(field), str):
                return f"Invalid destination_details field: {field}"

    faqs = candidate.get("faqs")
    if faqs:
        if not isinstance(faqs, list):
            return "Invalid faqs structure"
        for faq in faqs:
            if not isinstance(faq, dict) or not isinstance(faq.get("question"), str) or not isinstance(faq.get("answer"), str):
                return "Invalid faq item fields"
    return None


def _validate(candidate) -> Tuple[Optional[PackingResponse], Optional[dict]]:
    problem = _check_structure(candidate)
    if problem:
        return None, {"error": problem}
    try:
        return PackingResponse.model_validate(candidate), None
    except ValidationError as e:
        return None, {"error": "Packing response failed validation", "message": str(e)}


def load_model_json(text: str):
    """
    Decodes a model answer as JSON.
    Falls back to the outermost {...} block with trailing commas removed when
    the answer is wrapped in prose or code fences. Returns None when there is
    no such block; raises json.JSONDecodeError when the block will not parse.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    match = _JSON_BLOCK.search(text or "")
    if not match:
        return None
    return json.loads(_TRAILING_COMMA.sub(r"\1", match.group(0)))


def extract_and_validate_json(text: str) -> Tuple[Optional[PackingResponse], Optional[dict]]:
    """Parses the model's answer into a PackingResponse, or describes why it could not."""
    try:
        candidate = load_model_json(text)
    except json.JSONDecodeError as e:
        return None, {"error": "JSON parsing failed", "message": str(e)}
    if candidate is None:
        return None, {"error": "No valid JSON found in the response"}
    return _validate(candidate)


SAMPLE_PACKING_RESPONSE = {
    "packing_list": {
        "clothing": [
            {"item": "Lightweight t-shirts", "quantity": "4-5 pieces", "description": "Breathable cotton or moisture-wicking fabric for comfort in warm weather", "priority": "essential"},
            {"item": "Comfortable walking shorts", "quantity": "2-3 pairs", "description": "Quick-dry material ideal for sightseeing and casual activities", "priority": "essential"},
            {"item": "Light sweater or cardigan", "quantity": "1 piece", "description": "For air-conditioned spaces and cooler evenings", "priority": "recommended"},
            {"item": "Comfortable walking shoes", "quantity": "1 pair", "description": "Well-broken-in shoes for extensive walking and sightseeing", "priority": "essential"},
            {"item": "Sandals", "quantity": "1 pair", "description": "For beach, pool, or casual evening wear", "priority": "recommended"},
        ],
        "toiletries": [
            {"item": "Toothbrush and toothpaste", "quantity": "1 set", "description": "Essential dental hygiene items for daily use", "priority": "essential"},
            {"item": "Sunscreen (SPF 30+)", "quantity": "1 bottle", "description": "High SPF protection for outdoor activities and sun exposure", "priority": "essential"},
            {"item": "Shampoo and conditioner", "quantity": "Travel size", "description": "Personal hair care products in airline-friendly sizes", "priority": "essential"},
            {"item": "Deodorant", "quantity": "1 piece", "description": "Essential for personal hygiene during travel", "priority": "essential"},
        ],
        "electronics": [
            {"item": "Phone charger", "quantity": "1 piece", "description": "Essential for staying connected and using travel apps", "priority": "essential"},
            {"item": "Universal power adapter", "quantity": "1 piece", "description": "For charging devices in different countries", "priority": "essential"},
            {"item": "Portable power bank", "quantity": "1 piece", "description": "Backup power for long sightseeing days", "priority": "recommended"},
            {"item": "Camera", "quantity": "1 piece", "description": "For capturing travel memories and experiences", "priority": "recommended"},
        ],
        "documents": [
            {"item": "Passport", "quantity": "1 piece", "description": "Essential travel document for international travel", "priority": "essential"},
            {"item": "Travel insurance documents", "quantity": "1 set", "description": "Important coverage for medical emergencies and trip disruptions", "priority": "essential"},
            {"item": "Flight tickets", "quantity": "1 set", "description": "Printed or digital copies of flight confirmations", "priority": "essential"},
            {"item": "Hotel reservations", "quantity": "1 set", "description": "Confirmation documents for accommodation bookings", "priority": "essential"},
        ],
        "health_safety": [
            {"item": "First aid kit", "quantity": "1 small kit", "description": "Basic medical supplies for minor injuries and ailments", "priority": "recommended"},
            {"item": "Personal medications", "quantity": "As needed", "description": "All prescription and over-the-counter medications you regularly take", "priority": "essential"},
            {"item": "Hand sanitizer", "quantity": "1 small bottle", "description": "For maintaining hygiene when soap and water unavailable", "priority": "recommended"},
        ],
        "activity_specific": [
            {"item": "Guidebook or travel app", "quantity": "1 piece", "description": "For discovering attractions, restaurants, and local insights", "priority": "recommended"},
            {"item": "Comfortable day pack", "quantity": "1 piece", "description": "For carrying essentials during sightseeing and day trips", "priority": "recommended"},
        ],
        "miscellaneous": [
            {"item": "Travel pillow", "quantity": "1 piece", "description": "For comfort during long flights and travel", "priority": "optional"},
            {"item": "Laundry detergent packets", "quantity": "2-3 packets", "description": "For washing clothes during extended trips", "priority": "optional"},
            {"item": "Snacks", "quantity": "As desired", "description": "Familiar comfort foods for travel days and emergencies", "priority": "optional"},
        ],
    },
    "packing_tips": [
        "Roll clothes instead of folding to save space and reduce wrinkles",
        "Pack versatile items that can be mixed and matched for different occasions",
        "Keep essentials like medications and important documents in your carry-on bag",
    ],
    "destination_notes": "This is a sample packing list. For personalized recommendations, please configure your Gemini API key.",
    "destination_details": {
        "overview": "Vibrant city with rich culture, great food, and efficient transport.",
        "best_time_to_visit": "Spring and autumn for mild weather and fewer crowds.",
        "weather_summary": "Warm days, cooler evenings; occasional showers possible.",
        "cultural_tips": "Be polite, queue orderly, and respect local customs.",
        "local_transport": "Metro and buses are fast, safe, and affordable.",
        "currency": "Local currency; cards widely accepted.",
        "language": "Local language; basic phrases appreciated.",
        "power_plugs": "Type A/B 110-120V or local equivalent.",
        "safety_tips": "Stay aware in crowds; use licensed taxis at night.",
    },
}


ITINERARY_GENERATION_CONFIG = {"temperature": 0.7, "maxOutputTokens": 4000}
OVERVIEW_GENERATION_CONFIG = {"temperature": 0.7, "maxOutputTokens": 3000}


def build_itinerary_prompt(request: ItineraryGenerateRequest) -> str:
    return f"""You are an expert travel planner. Always respond with valid JSON only, no additional text or formatting.

Generate a detailed {request.days}-day itinerary for {request.destination}, with a budget of {request.budget}, for a {request.travel_companions} group, prioritizing {request.interests}.

Guidelines:
1. Mix popular attractions and off-the-beaten-path experiences.
2. Consider group dynamics and interests for activities.
3. Include budget-friendly and splurge experiences within budget.
4. Suggest local cuisines and dining experiences.
5. Include practical travel tips and logistical information.
6. Ensure activities suit the time of year and weather.
7. For each day, identify a specific primary location/area/district and create an accurate Google Maps URL.

Return a structured JSON object:
{{
  "itinerary": [
    {{
      "day": "Day {{n}} - {{Specific Area/District}}",
      "location": "Specific location/area name",
      "google_map_url": "https://www.google.com/maps/search/{{location_encoded_properly}}",
      "morning": [{{"activity": "Activity 1", "details": "15-word description"}}],
      "afternoon": [{{"activity": "Activity 2", "details": "15-word description"}}],
      "evening": [{{"activity": "Activity 3", "details": "15-word description"}}],
      "travel_tip": "A useful travel tip for the day"
    }}
  ]
}}

Google Maps URLs must follow this exact format: https://www.google.com/maps/search/{{encoded_location}}
Replace spaces with + signs and include the city/country context, e.g. "https://www.google.com/maps/search/Eiffel+Tower+Paris".

Ensure:
- Two activities per part of the day, each with a short description.
- Activities are safe, group-appropriate, and within budget.
- Provide a useful travel tip for each day.
- The JSON is clean, valid, and follows the exact structure."""


def parse_itinerary(text: str) -> List[DayItinerary]:
    """Parses the model's itinerary answer; raises AIServiceError when it is unusable."""
    try:
        candidate = load_model_json(text)
    except json.JSONDecodeError as e:
        raise AIServiceError("Failed to parse AI response. The AI returned invalid JSON.") from e
    if not isinstance(candidate, dict):
        raise AIServiceError("Failed to parse AI response. The AI returned invalid JSON.")
    try:
        return ItineraryDraft.model_validate(candidate).itinerary
    except ValidationError as e:
        raise AIServiceError("The AI itinerary did not match the expected structure.") from e


async def draft_itinerary(request: ItineraryGenerateRequest) -> List[DayItinerary]:
    """
    Asks Gemini for a day-by-day itinerary.
    There is no sample to fall back to, so every failure is raised.
    """
    text = await generate_text_with_gemini(
        build_itinerary_prompt(request),
        generation_config=ITINERARY_GENERATION_CONFIG,
    )
    return parse_itinerary(text)


def build_overview_prompt(destination: str) -> str:
    return f"""You are an expert travel advisor with deep knowledge of global destinations. Always respond with valid JSON only, no additional text or formatting.

Generate a comprehensive destination overview for {destination}.
Provide the following sections:
1. Destination Overview: A 100-word description of what makes this destination special
2. You Might Want to Ask: 5 common questions travelers ask about this destination with short answers
3. Best Time to Visit: A brief 20-word summary of the optimal time to visit
4. Hidden Gems: 5 lesser-known places worth visiting
5. Local Experiences: 5 unique cultural experiences
6. Food & Dining: 5 must-try local dishes and restaurant types

Return a structured JSON object:
{{
  "destinationOverview": "100-word overview",
  "youMightWantToAsk": [{{"question": "Question?", "answer": "Short 30-word answer"}}],
  "bestTimeToVisit": "20-word summary",
  "hiddenGems": [{{"name": "Hidden Gem Name", "description": "25-word description"}}],
  "localExperiences": [{{"name": "Experience Name", "description": "30-word description"}}],
  "foodAndDining": [{{"name": "Dish/Restaurant Type", "description": "25-word description"}}]
}}"""


def fallback_destination_overview(destination: str) -> DestinationOverview:
    """Generic overview used when the AI is unavailable or answers badly."""
    name = destination or "your destination"
    return DestinationOverview(
        destination_overview=(
            f"{name} offers a mix of iconic sights, local culture, and memorable experiences. "
            "Explore landmark attractions, stroll vibrant neighborhoods, discover hidden gems, and taste regional flavors. "
            "Plan time for museums, parks, scenic viewpoints, markets, and authentic eateries. "
            "Balance busy sightseeing with relaxing moments in cafes or along waterfronts. "
            "Public transport and walkable areas make getting around easy."
        ),
        you_might_want_to_ask=[
            {"question": "How to get around?", "answer": "Combine public transit, walking, and occasional rideshares or taxis. Consider transit passes or city cards for savings."},
            {"question": "Typical daily budget?", "answer": "Plan a budget that fits your style, from street food and hostels to fine dining and boutique hotels."},
            {"question": "Any safety tips?", "answer": "Stay aware of your surroundings, keep valuables secure, and use licensed transport."},
            {"question": "Do I need reservations?", "answer": "Book popular attractions, restaurants, and special tours in advance, especially on weekends and in peak season."},
            {"question": "What to pack?", "answer": "Comfortable walking shoes, weather-appropriate clothes, chargers, medications, and copies of important documents."},
        ],
        best_time_to_visit="Spring and fall offer pleasant weather, fewer crowds, and reasonable prices for most activities.",
        hidden_gems=[
            {"name": "Neighborhood Cafe Lane", "description": "Quiet alleyway of indie cafes and bakeries frequented by locals."},
            {"name": "Community Art Space", "description": "Small gallery hosting rotating exhibits and evening cultural meetups."},
            {"name": "Riverside Boardwalk Nook", "description": "Secluded benches for reading, people-watching, and sunset photos."},
            {"name": "Local Designer Shops", "description": "Boutiques with handmade goods and unique souvenirs off the main drag."},
            {"name": "Pocket Park Pavilion", "description": "Tiny green retreat with sculptures and lunchtime food trucks."},
        ],
        local_experiences=[
            {"name": "Market-to-Table Walk", "description": "Market tour and tasting with a local, learning ingredients and recipes."},
            {"name": "Neighborhood Photo Stroll", "description": "Street scenes, hidden murals, and classic architecture at golden hour."},
            {"name": "Craft Workshop", "description": "Hands-on session with artisans to make a small regional keepsake."},
            {"name": "Evening Food Crawl", "description": "Small plates across several eateries with stories about the neighborhood."},
            {"name": "Park Fitness or Yoga", "description": "Morning class in a scenic park to start the day."},
        ],
        food_and_dining=[
            {"name": "Signature Street Snack", "description": "Beloved grab-and-go treat showcasing regional flavors."},
            {"name": "Traditional Set Menu", "description": "Home-style dishes served in a cozy setting."},
            {"name": "Seafood/Grill House", "description": "Fresh catches or grilled specialties with seasonal sides."},
            {"name": "Vegetarian Bistro", "description": "Plant-forward plates using market produce."},
            {"name": "Dessert Parlor", "description": "Classic sweets, pastries, and coffee after a day of sightseeing."},
        ],
    )


async def draft_destination_overview(destination: str) -> DestinationOverview:
    """
    Asks Gemini for destination background content.
    Falls back to a generic overview on any failure except rate limiting.
    """
    try:
        text = await generate_text_with_gemini(
            build_overview_prompt(destination),
            generation_config=OVERVIEW_GENERATION_CONFIG,
        )
    except RateLimitError:
        raise
    except AIServiceError as e:
        logger.warning("Using fallback destination overview: %s", e)
        return fallback_destination_overview(destination)

    try:
        candidate = load_model_json(text)
        if isinstance(candidate, dict):
            return DestinationOverview.model_validate(candidate)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Failed to parse destination overview: %s", e)
    return fallback_destination_overview(destination)
