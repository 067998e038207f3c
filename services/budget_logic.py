"""
Trip cost estimation for a generated itinerary.

The daily budget the traveller picked (e.g. "Mid-range ($100-250/day)") is
split into accommodation, meals, activities, transport and miscellaneous
shares. Activity, meal and transport costs are nudged by keywords found in the
itinerary's activities, and everything is scaled by the size of the party.
"""
import math
import re
from typing import List, NamedTuple, Sequence, Tuple

from schemas.itinerary_schema import Activity, BudgetBreakdown, BudgetLine, DayItinerary


class BudgetRange(NamedTuple):
    low: int
    high: int

    @property
    def average(self) -> float:
        return (self.low + self.high) / 2


DEFAULT_BUDGET_RANGE = BudgetRange(100, 200)

_CLOSED_RANGE = re.compile(r"\$(\d+)-(\d+)")
_OPEN_RANGE = re.compile(r"\$(\d+)\+")

# Share of the daily activity budget per activity, first matching tier wins
ACTIVITY_COST_TIERS: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (("museum", "attraction", "tour", "show", "cruise", "safari"), 0.4),
    (("market", "garden", "park", "temple", "church", "shopping"), 0.2),
    (("walk", "explore", "stroll", "view", "beach", "street"), 0.1),
)
DEFAULT_ACTIVITY_SHARE = 0.25
ACTIVITY_BUDGET_SHARE = 0.3

DINING_KEYWORDS = ("dinner", "lunch", "restaurant", "cuisine", "food", "dining")
DINING_BONUS = 0.2

TRANSPORT_KEYWORDS = ("tour", "trip", "excursion", "transfer", "taxi", "uber")
TRANSPORT_BONUS = 0.3

ACCOMMODATION_SHARE = 0.35
MISCELLANEOUS_SHARE = 0.1

# Checked in order against the lower-cased companions text
GROUP_MULTIPLIERS = (
    ("couple", 1.8),
    ("family", 2.5),
    ("group", 3.0),
)

# (upper bound of the average daily budget, accommodation, meals, activities)
TIER_DESCRIPTIONS = (
    (100, "Hostels, budget hotels, or shared accommodations",
     "Street food, local eateries, some grocery shopping",
     "Free attractions, budget tours, walking tours"),
    (250, "3-star hotels, mid-range accommodations",
     "Mix of local restaurants and casual dining",
     "Popular attractions, guided tours, cultural experiences"),
    (500, "4-star hotels, boutique accommodations",
     "Fine dining experiences, upscale restaurants",
     "Premium attractions, private tours, exclusive experiences"),
    (math.inf, "5-star luxury hotels, premium resorts",
     "Michelin-starred restaurants, exclusive dining",
     "VIP experiences, private guides, luxury activities"),
)
TRANSPORTATION_DESCRIPTION = "Local transport, transfers, and tours"
MISCELLANEOUS_DESCRIPTION = "Shopping, tips, unexpected expenses"


def parse_budget_range(budget: str) -> BudgetRange:
    """
    Reads the dollar range out of a budget label.
    "$100-250" gives (100, 250); an open-ended "$500+" is assumed to reach double
    its floor; anything else falls back to (100, 200).
    """
    match = _CLOSED_RANGE.search(budget or "")
    if match:
        return BudgetRange(int(match.group(1)), int(match.group(2)))
    match = _OPEN_RANGE.search(budget or "")
    if match:
        low = int(match.group(1))
        return BudgetRange(low, low * 2)
    return DEFAULT_BUDGET_RANGE


def group_multiplier(travel_companions: str) -> float:
    companions = (travel_companions or "").lower()
    for keyword, multiplier in GROUP_MULTIPLIERS:
        if keyword in companions:
            return multiplier
    return 1.0


def _activity_text(activity: Activity) -> str:
    return f"{activity.activity} {activity.details}".lower()


def _mentions(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def _all_activities(itinerary: Sequence[DayItinerary]) -> List[Activity]:
    return [activity for day in itinerary for activity in day.activities]


def activity_share(activity: Activity) -> float:
    text = _activity_text(activity)
    for keywords, share in ACTIVITY_COST_TIERS:
        if _mentions(text, keywords):
            return share
    return DEFAULT_ACTIVITY_SHARE


def activity_costs(itinerary: Sequence[DayItinerary], budget_range: BudgetRange) -> float:
    """Keyword-weighted activity spend, capped per day at the daily activity budget."""
    daily_budget = budget_range.average * ACTIVITY_BUDGET_SHARE
    total = 0.0
    for day in itinerary:
        day_cost = sum(daily_budget * activity_share(activity) for activity in day.activities)
        total += min(day_cost, daily_budget)
    return total


def meal_costs(itinerary: Sequence[DayItinerary], budget_range: BudgetRange, days: int) -> float:
    average = budget_range.average
    if average <= 100:
        share = 0.30
    elif average >= 300:
        share = 0.35
    else:
        share = 0.25
    daily_budget = average * share

    dining = sum(1 for activity in _all_activities(itinerary) if _mentions(_activity_text(activity), DINING_KEYWORDS))
    return daily_budget * days + dining * daily_budget * DINING_BONUS


def transportation_costs(itinerary: Sequence[DayItinerary], budget_range: BudgetRange, days: int) -> float:
    average = budget_range.average
    if average <= 100:
        share = 0.10
    elif average >= 300:
        share = 0.20
    else:
        share = 0.15
    daily_budget = average * share

    trips = sum(1 for activity in _all_activities(itinerary) if _mentions(_activity_text(activity), TRANSPORT_KEYWORDS))
    return daily_budget * days + trips * daily_budget * TRANSPORT_BONUS


def tier_descriptions(average: float) -> Tuple[str, str, str]:
    for ceiling, accommodation, meals, activities in TIER_DESCRIPTIONS:
        if average <= ceiling:
            return accommodation, meals, activities
    return TIER_DESCRIPTIONS[-1][1:]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_trip_budget(
    itinerary: Sequence[DayItinerary],
    budget: str,
    days: int,
    travel_companions: str,
) -> BudgetBreakdown:
    """Estimates the cost of an itinerary for the whole party."""
    if days <= 0:
        raise ValueError("days must be a positive integer")

    budget_range = parse_budget_range(budget)
    average = budget_range.average
    multiplier = group_multiplier(travel_companions)

    accommodation = average * days * ACCOMMODATION_SHARE * multiplier
    meals = meal_costs(itinerary, budget_range, days) * multiplier
    activities = activity_costs(itinerary, budget_range) * multiplier
    transportation = transportation_costs(itinerary, budget_range, days) * multiplier
    miscellaneous = average * days * MISCELLANEOUS_SHARE * multiplier

    total = accommodation + meals + activities + transportation + miscellaneous
    accommodation_text, meals_text, activities_text = tier_descriptions(average)

    return BudgetBreakdown(
        accommodation=BudgetLine(cost=round_half_up(accommodation), description=accommodation_text),
        meals=BudgetLine(cost=round_half_up(meals), description=meals_text),
        activities=BudgetLine(cost=round_half_up(activities), description=activities_text),
        transportation=BudgetLine(cost=round_half_up(transportation), description=TRANSPORTATION_DESCRIPTION),
        miscellaneous=BudgetLine(cost=round_half_up(miscellaneous), description=MISCELLANEOUS_DESCRIPTION),
        total_per_day=round_half_up(total / days),
        total_trip=round_half_up(total),
        budget_range=budget,
    )
