import math
from typing import Callable, List, NamedTuple, Tuple, Union

from schemas.packing_schema import (
    CATEGORIES,
    PRIORITY_ORDER,
    DestinationDetails,
    GeneratorInput,
    PackingItem,
    PackingList,
    PackingResponse,
    Priority,
    Season,
)

DESCRIPTION_WORD_LIMIT = 25
BASELINE_TIP_LIMIT = 6
MERGED_TIP_LIMIT = 8

PriorityRule = Union[Priority, Callable[[GeneratorInput], Priority]]
ItemRecord = Tuple[str, str, str, PriorityRule]


def clamp(n: int, low: int, high: int) -> int:
    return max(low, min(high, n))


def qty(n: int, unit: str = "") -> str:
    return f"{n} {unit}" if unit else str(n)


def _key(name: str) -> str:
    return name.strip().lower()


def _rank(priority: Priority) -> int:
    return PRIORITY_ORDER.index(Priority(priority))


def add_or_promote(items: List[PackingItem], candidate: PackingItem) -> List[PackingItem]:
    """
    Adds `candidate` to `items` unless an item with the same name (trimmed,
    case-insensitive) is already there.

    For an existing match:
    - a strictly higher candidate priority replaces the existing entry outright;
    - otherwise the existing priority stays, a longer candidate quantity is
      adopted, and an empty description is filled from the candidate.

    New items are appended, so the first occurrence fixes display order.
    """
    key = _key(candidate.item)
    for index, existing in enumerate(items):
        if _key(existing.item) == key:
            break
    else:
        items.append(candidate.model_copy())
        return items

    if _rank(candidate.priority) > _rank(existing.priority):
        items[index] = candidate.model_copy()
        return items

    updates = {}
    # Longer quantity text is taken as the more specific one
    if len(existing.quantity) < len(candidate.quantity):
        updates["quantity"] = candidate.quantity
    if not existing.description and candidate.description:
        updates["description"] = candidate.description
    if updates:
        items[index] = existing.model_copy(update=updates)
    return items


class Layering(NamedTuple):
    base: int
    mid: int
    outer: int


class ClothingQuantities(NamedTuple):
    underwear: int
    socks: int
    tshirts: int
    longsleeve: int
    pants: int
    shorts: int
    layers: Layering


SEASON_LAYERING = {
    Season.WINTER: Layering(base=2, mid=2, outer=1),
    Season.AUTUMN: Layering(base=1, mid=1, outer=1),
    Season.SPRING: Layering(base=1, mid=1, outer=0),
    Season.SUMMER: Layering(base=1, mid=0, outer=0),
}

TSHIRT_FACTOR = {
    Season.SUMMER: 0.8,
    Season.SPRING: 0.6,
    Season.AUTUMN: 0.6,
    Season.WINTER: 0.5,
}


def season_layering(season: Season) -> Layering:
    return SEASON_LAYERING[Season(season)]


def compute_clothing_quantities(days: int, season: Season) -> ClothingQuantities:
    """Scales the core clothing counts by trip length and season."""
    season = Season(season)
    winter = season == Season.WINTER

    underwear = clamp(days + 2, 3, 20)
    socks = clamp(days + 2, 3, 20)
    tshirts = clamp(math.ceil(days * TSHIRT_FACTOR[season]) + 1, 2, 14)
    if winter:
        longsleeve = clamp(math.ceil(days * 0.5), 1, 10)
    else:
        longsleeve = clamp(math.ceil(days * 0.3), 0, 8)
    pants = clamp(math.ceil(days / (2 if winter else 3)), 1, 6)
    shorts = clamp(math.ceil(days / 3), 1, 5) if season == Season.SUMMER else 0

    return ClothingQuantities(
        underwear=underwear,
        socks=socks,
        tshirts=tshirts,
        longsleeve=longsleeve,
        pants=pants,
        shorts=shorts,
        layers=season_layering(season),
    )


def _item(name: str, quantity: str, description: str, priority: Priority) -> PackingItem:
    return PackingItem(item=name, quantity=quantity, description=description, priority=priority)


def common_basics(data: GeneratorInput) -> PackingList:
    """Builds the duration- and season-scaled baseline for every category."""
    season = data.season
    winter = season == Season.WINTER
    q = compute_clothing_quantities(data.days, season)
    cold_weather = Priority.ESSENTIAL if winter else Priority.RECOMMENDED

    packing = PackingList()
    clothing = packing.clothing
    add_or_promote(clothing, _item("Underwear", qty(q.underwear), "Fresh pair per day plus spares", Priority.ESSENTIAL))
    add_or_promote(clothing, _item("Socks", qty(q.socks), "Daily pairs; add moisture-wicking for long walks", Priority.ESSENTIAL))
    add_or_promote(clothing, _item("T-shirts", qty(q.tshirts, "pieces"), "Breathable tops for layering and casual wear", Priority.ESSENTIAL))
    if q.longsleeve > 0:
        add_or_promote(clothing, _item("Long-sleeve shirts", qty(q.longsleeve, "pieces"), "Layering for cooler mornings/evenings", cold_weather))
    add_or_promote(clothing, _item("Pants", qty(q.pants, "pairs"), "Versatile bottoms for day and evening", Priority.ESSENTIAL))
    if q.shorts > 0:
        add_or_promote(clothing, _item("Shorts", qty(q.shorts, "pairs"), "For warm days and casual outings", Priority.RECOMMENDED))
    if q.layers.mid:
        add_or_promote(clothing, _item("Sweater/Fleece", qty(q.layers.mid, "piece"), "Mid-layer for warmth", cold_weather))
    if q.layers.outer:
        outer_description = "Insulated outer layer for cold weather" if winter else "Light jacket or shell for wind/rain"
        add_or_promote(clothing, _item("Jacket/Coat", qty(q.layers.outer, "piece"), outer_description, cold_weather))
    add_or_promote(clothing, _item("Comfortable walking shoes", "1 pair", "Broken-in shoes for long days on your feet", Priority.ESSENTIAL))
    if not winter:
        add_or_promote(clothing, _item("Hat/Cap", "1", "Sun protection for outdoor time", Priority.RECOMMENDED))

    if data.is_business:
        outfits = clamp(math.ceil(data.days / 2), 1, 4)
        add_or_promote(clothing, _item("Business attire", qty(outfits, "outfits"), "Blazer/jacket with slacks/skirt for meetings", Priority.ESSENTIAL))
        add_or_promote(clothing, _item("Dress shoes", "1 pair", "Closed-toe shoes suitable for meetings", Priority.RECOMMENDED))

    sunscreen = Priority.ESSENTIAL if season == Season.SUMMER else Priority.RECOMMENDED
    for item in (
        _item("Toothbrush & toothpaste", "1 set", "Daily dental hygiene", Priority.ESSENTIAL),
        _item("Deodorant", "1", "Personal hygiene", Priority.ESSENTIAL),
        _item("Sunscreen SPF 30+", "1 bottle", "UV protection during outdoor activities", sunscreen),
        _item("Shampoo/Conditioner (travel size)", "1 set", "Hair care in carry-on-friendly sizes", Priority.RECOMMENDED),
        _item("Basic makeup & skincare", "As needed", "Daily routine essentials", Priority.OPTIONAL),
    ):
        add_or_promote(packing.toiletries, item)

    for item in (
        _item("Phone + charger", "1", "Connectivity and travel apps", Priority.ESSENTIAL),
        _item("Portable power bank", "1", "Backup power for long days", Priority.RECOMMENDED),
        _item("Universal travel adapter", "1", "Plug and voltage compatibility in many regions", Priority.ESSENTIAL),
    ):
        add_or_promote(packing.electronics, item)
    if data.is_business:
        add_or_promote(packing.electronics, _item("Laptop + charger", "1", "Work and presentations", Priority.ESSENTIAL))
        add_or_promote(packing.electronics, _item("Presentation clicker/HDMI adaptor", "1", "Smooth meeting setups", Priority.RECOMMENDED))

    for item in (
        _item("Passport/ID", "1", "Primary identification for travel", Priority.ESSENTIAL),
        _item("Travel insurance", "1 policy", "Coverage for emergencies and disruptions", Priority.ESSENTIAL),
        _item("Itineraries & reservations", "1 set", "Flight, hotel, and booking confirmations", Priority.ESSENTIAL),
        _item("Payment methods", "Cards + some cash", "Local currency and backup card", Priority.ESSENTIAL),
    ):
        add_or_promote(packing.documents, item)

    for item in (
        _item("Personal medications", "Sufficient for trip", "Bring prescriptions and a few spare days", Priority.ESSENTIAL),
        _item("Mini first aid kit", "1 small kit", "Plasters, pain reliever, antiseptic wipes", Priority.RECOMMENDED),
        _item("Hand sanitizer", "1 small bottle", "Hygiene when soap/water unavailable", Priority.RECOMMENDED),
    ):
        add_or_promote(packing.health_safety, item)

    for item in (
        _item("Reusable water bottle", "1", "Stay hydrated while exploring", Priority.RECOMMENDED),
        _item("Daypack", "1", "Carry essentials on day trips", Priority.RECOMMENDED),
        _item("Travel pillow", "1", "Comfort on flights or long rides", Priority.OPTIONAL),
        _item("Laundry detergent sheets", "2-3", "Quick sink washes on longer trips", Priority.OPTIONAL),
    ):
        add_or_promote(packing.miscellaneous, item)

    return packing


class ActivityRule(NamedTuple):
    """Gear added to `activity_specific` when any keyword appears in the activities text."""
    name: str
    keywords: Tuple[str, ...]
    items: Tuple[ItemRecord, ...]
    trip_types: Tuple[str, ...] = ()


def _rain_jacket_priority(data: GeneratorInput) -> Priority:
    return Priority.RECOMMENDED if data.season == Season.SUMMER else Priority.ESSENTIAL


ACTIVITY_RULES: Tuple[ActivityRule, ...] = (
    ActivityRule(
        name="hiking",
        keywords=("hiking",),
        items=(
            ("Hiking boots/shoes", "1 pair", "Trail-appropriate footwear with grip", Priority.ESSENTIAL),
            ("Moisture-wicking socks", "2-3 pairs", "Reduce blisters on trails", Priority.RECOMMENDED),
            ("Trekking poles", "1 pair", "Stability on uneven terrain", Priority.OPTIONAL),
            ("Trail snacks", "2-3 packs", "Energy for longer hikes", Priority.RECOMMENDED),
            ("Rain jacket", "1", "Weather protection in the mountains", _rain_jacket_priority),
        ),
    ),
    ActivityRule(
        name="beach",
        keywords=("beach", "swimming"),
        items=(
            ("Swimwear", "2-3", "Quick-dry suits for beach/pool", Priority.ESSENTIAL),
            ("Reef-safe sunscreen", "1 bottle", "Sun protection that's ocean-friendly", Priority.ESSENTIAL),
            ("Water shoes", "1 pair", "Protect feet on rocky shores", Priority.OPTIONAL),
            ("Microfiber towel", "1", "Fast-drying beach or hostel towel", Priority.RECOMMENDED),
        ),
    ),
    ActivityRule(
        name="diving",
        keywords=("diving", "snorkel"),
        items=(
            ("Snorkel mask", "1", "Better fit and hygiene than rentals", Priority.RECOMMENDED),
            ("Dry bag", "1", "Keep valuables dry on boats", Priority.RECOMMENDED),
        ),
    ),
    ActivityRule(
        name="ski",
        keywords=("ski", "snowboard"),
        items=(
            ("Thermal base layers", "2-3 sets", "Warmth and moisture control", Priority.ESSENTIAL),
            ("Ski gloves", "1 pair", "Insulated waterproof gloves", Priority.ESSENTIAL),
            ("Goggles", "1", "Visibility in snow and wind", Priority.RECOMMENDED),
            ("Ski socks", "2-3 pairs", "Cushioned socks for boots", Priority.RECOMMENDED),
        ),
    ),
    ActivityRule(
        name="photography",
        keywords=("photography",),
        items=(
            ("Camera + charger", "1", "Capture high-quality shots", Priority.RECOMMENDED),
            ("Spare batteries & SD cards", "2-3", "Avoid running out of storage/power", Priority.RECOMMENDED),
        ),
    ),
    ActivityRule(
        name="business",
        keywords=("business",),
        items=(
            ("Business cards", "10-20", "Networking at meetings/events", Priority.OPTIONAL),
            ("Collapsible garment bag", "1", "Keep suits/dresses wrinkle-free", Priority.OPTIONAL),
        ),
        trip_types=("business",),
    ),
)


def matching_activity_rules(data: GeneratorInput) -> List[ActivityRule]:
    """Returns the rules triggered by the activities text or the trip type, in table order."""
    activities = (data.activities or "").lower()
    trip_type = data.trip_type.strip().lower()
    return [
        rule for rule in ACTIVITY_RULES
        if any(keyword in activities for keyword in rule.keywords) or trip_type in rule.trip_types
    ]


def add_activity_items(packing: PackingList, data: GeneratorInput) -> PackingList:
    for rule in matching_activity_rules(data):
        for name, quantity, description, priority in rule.items:
            if callable(priority):
                priority = priority(data)
            add_or_promote(packing.activity_specific, _item(name, quantity, description, priority))
    return packing


def ensure_weather_specifics(packing: PackingList, data: GeneratorInput) -> PackingList:
    """Adds the season-driven items that must be present whatever else was suggested."""
    if data.season in (Season.SPRING, Season.AUTUMN):
        add_or_promote(packing.clothing, _item("Light rain jacket", "1", "Showers are common in shoulder seasons", Priority.RECOMMENDED))
    if data.season == Season.SUMMER:
        add_or_promote(packing.toiletries, _item("After-sun lotion", "1 small", "Soothe sun-exposed skin", Priority.OPTIONAL))
    if data.season == Season.WINTER:
        add_or_promote(packing.clothing, _item("Thermal base layers", "2-3 sets", "Stay warm in cold climates", Priority.ESSENTIAL))
        add_or_promote(packing.clothing, _item("Warm hat and gloves", "1 set", "Prevent heat loss outdoors", Priority.ESSENTIAL))
        add_or_promote(packing.toiletries, _item("Lip balm & moisturizer", "1 each", "Protect against dry, cold air", Priority.RECOMMENDED))
    return packing


BASE_TIPS = (
    "Roll clothes to save space and minimize wrinkles",
    "Pack versatile layers that mix and match",
    "Keep essentials and documents in your carry-on",
)
LAUNDRY_TIP = "Plan a laundry day to reduce how much you pack"
HYDRATION_TIP = "Carry a reusable water bottle and refill often"
BUSINESS_TECH_TIP = "Pack extra chargers and a backup presentation on a USB stick"


def dedupe_tips(tips, limit: int) -> List[str]:
    """Trims tips, drops blanks and case-insensitive repeats, and keeps the first `limit`."""
    seen = set()
    result = []
    for tip in tips:
        trimmed = (tip or "").strip()
        if not trimmed or trimmed.lower() in seen:
            continue
        seen.add(trimmed.lower())
        result.append(trimmed)
    return result[:limit]


def finalize_tips(data: GeneratorInput) -> List[str]:
    tips = list(BASE_TIPS)
    if data.days >= 10:
        tips.append(LAUNDRY_TIP)
    if data.season != Season.WINTER:
        tips.append(HYDRATION_TIP)
    if data.is_business:
        tips.append(BUSINESS_TECH_TIP)
    return dedupe_tips(tips, BASELINE_TIP_LIMIT)


def default_destination_details(season: Season) -> DestinationDetails:
    """Generic destination details; only the wording about timing and weather depends on season."""
    season = Season(season)
    if season == Season.SUMMER:
        best_time = "Summer for festivals; shoulder seasons for fewer crowds."
    else:
        best_time = "Shoulder seasons for mild weather and fewer crowds."
    if season == Season.WINTER:
        weather = "Cold; pack warm layers."
    elif season == Season.SUMMER:
        weather = "Warm; stay sun-safe."
    else:
        weather = "Variable; bring light layers and rain shell."

    return DestinationDetails(
        overview="Popular travel spot with local customs and diverse food.",
        best_time_to_visit=best_time,
        weather_summary=weather,
        cultural_tips="Be polite and observe local etiquette; learn a few phrases.",
        local_transport="Use public transit or rideshare where available.",
        currency="Carry a card plus some local cash.",
        language="Local language; basic phrases help.",
        power_plugs="Carry a universal travel adapter.",
        safety_tips="Stay aware of belongings; use hotel safe when possible.",
    )


def baseline_destination_notes(data: GeneratorInput) -> str:
    return (
        f"{data.destination}: {data.days}-day {data.trip_type} trip in {data.season.value}. "
        "Quantities scaled by duration; activities and season adjusted."
    )


def fallback_destination_notes(data: GeneratorInput) -> str:
    return f"{data.destination}: {data.days}-day {data.trip_type} in {data.season.value}. Quantities scaled by duration."


def cap_description(text: str, limit: int = DESCRIPTION_WORD_LIMIT) -> str:
    words = (text or "").split()
    if len(words) > limit:
        return " ".join(words[:limit])
    return text or ""


def cap_descriptions(packing: PackingList, limit: int = DESCRIPTION_WORD_LIMIT) -> PackingList:
    for category in CATEGORIES:
        capped = [
            item.model_copy(update={"description": cap_description(item.description, limit)})
            for item in getattr(packing, category)
        ]
        setattr(packing, category, capped)
    return packing


def generate_baseline(data: GeneratorInput) -> PackingResponse:
    """
    Builds a complete packing response from the trip alone.
    Used whenever no usable AI draft is available.
    """
    packing = common_basics(data)
    add_activity_items(packing, data)
    ensure_weather_specifics(packing, data)
    cap_descriptions(packing)

    return PackingResponse(
        packing_list=packing,
        packing_tips=finalize_tips(data),
        destination_notes=baseline_destination_notes(data),
        destination_details=default_destination_details(data.season),
    )


def reconcile(ai_draft: PackingResponse, data: GeneratorInput) -> PackingResponse:
    """
    Merges an AI-drafted packing response with the rule baseline.

    AI items go in first so their wording and order win ties; baseline,
    activity and weather items then fill gaps and promote priorities.
    """
    merged = PackingList()
    for category in CATEGORIES:
        for item in getattr(ai_draft.packing_list, category) or []:
            add_or_promote(getattr(merged, category), item)

    baseline = common_basics(data)
    for category in CATEGORIES:
        for item in getattr(baseline, category):
            add_or_promote(getattr(merged, category), item)

    add_activity_items(merged, data)
    ensure_weather_specifics(merged, data)
    cap_descriptions(merged)

    tips = dedupe_tips(list(ai_draft.packing_tips or []) + finalize_tips(data), MERGED_TIP_LIMIT)
    notes = ai_draft.destination_notes or fallback_destination_notes(data)
    details = ai_draft.destination_details or default_destination_details(data.season)

    return PackingResponse(
        packing_list=merged,
        packing_tips=tips,
        destination_notes=notes,
        destination_details=details,
        faqs=ai_draft.faqs,
    )

