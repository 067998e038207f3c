import pytest

from schemas.itinerary_schema import Activity, DayItinerary
from services.budget_logic import (
    BudgetRange,
    activity_costs,
    activity_share,
    calculate_trip_budget,
    group_multiplier,
    parse_budget_range,
    round_half_up,
)

MID_RANGE = "Mid-range ($100-250/day)"


def _day(morning=(), afternoon=(), evening=()):
    def acts(pairs):
        return [Activity(activity=name, details=details) for name, details in pairs]

    return DayItinerary(day="Day 1", morning=acts(morning), afternoon=acts(afternoon), evening=acts(evening))


@pytest.fixture
def paris_day():
    return _day(
        morning=[("Louvre museum visit", "See the art")],
        afternoon=[("Stroll along the Seine", "Relaxing walk")],
        evening=[("Dinner cruise", "French cuisine on the river")],
    )


@pytest.mark.parametrize("budget, expected", [
    ("Budget-friendly ($50-100/day)", BudgetRange(50, 100)),
    (MID_RANGE, BudgetRange(100, 250)),
    ("Ultra-luxury ($500+/day)", BudgetRange(500, 1000)),
    ("whatever feels right", BudgetRange(100, 200)),
    ("", BudgetRange(100, 200)),
])
def test_parse_budget_range(budget, expected):
    assert parse_budget_range(budget) == expected


@pytest.mark.parametrize("companions, expected", [
    ("solo traveler", 1.0),
    ("couple", 1.8),
    ("family with young children", 2.5),
    ("group of friends", 3.0),
    ("Couple", 1.8),
])
def test_group_multiplier(companions, expected):
    assert group_multiplier(companions) == expected


@pytest.mark.parametrize("name, details, share", [
    ("Guided tour", "Old town highlights", 0.4),
    ("Flower garden", "Quiet morning", 0.2),
    ("Stroll", "Along the harbour", 0.1),
    ("Cooking class", "Learn three dishes", 0.25),
])
def test_activity_share_tiers(name, details, share):
    assert activity_share(Activity(activity=name, details=details)) == share


def test_activity_costs_are_capped_per_day():
    busy_day = _day(morning=[("Museum", ""), ("Art museum", "")], afternoon=[("Museum", ""), ("Museum", "")])
    budget_range = BudgetRange(100, 200)
    assert activity_costs([busy_day], budget_range) == pytest.approx(45.0)


def test_round_half_up():
    assert round_half_up(52.5) == 53
    assert round_half_up(17.5) == 18
    assert round_half_up(47.25) == 47


def test_single_day_mid_range_breakdown(paris_day):
    budget = calculate_trip_budget([paris_day], MID_RANGE, 1, "solo traveler")

    assert budget.accommodation.cost == 61
    assert budget.meals.cost == 53
    assert budget.activities.cost == 47
    assert budget.transportation.cost == 26
    assert budget.miscellaneous.cost == 18
    assert budget.total_trip == 205
    assert budget.total_per_day == 205
    assert budget.budget_range == MID_RANGE
    assert budget.accommodation.description == "3-star hotels, mid-range accommodations"
    assert budget.transportation.description == "Local transport, transfers, and tours"


def test_couples_scale_every_line(paris_day):
    budget = calculate_trip_budget([paris_day], MID_RANGE, 1, "couple")
    assert budget.accommodation.cost == 110
    assert budget.total_trip == 369


def test_transport_bonus_for_tours_and_taxis():
    plain = calculate_trip_budget([_day(morning=[("Cafe", "Coffee")])], MID_RANGE, 1, "solo")
    busy = calculate_trip_budget([_day(morning=[("Cafe", "Coffee"), ("Taxi to the airport", "")])], MID_RANGE, 1, "solo")
    assert plain.transportation.cost == 26
    assert busy.transportation.cost == 34


def test_empty_itinerary_still_prices_fixed_costs():
    budget = calculate_trip_budget([], "Budget-friendly ($50-100/day)", 4, "solo")
    assert budget.activities.cost == 0
    assert budget.accommodation.cost == 105
    assert budget.meals.cost == 90
    assert budget.total_trip == 255
    assert budget.total_per_day == 64


@pytest.mark.parametrize("budget, accommodation", [
    ("Budget-friendly ($50-100/day)", "Hostels, budget hotels, or shared accommodations"),
    ("Luxury ($250-500/day)", "4-star hotels, boutique accommodations"),
    ("Ultra-luxury ($500+/day)", "5-star luxury hotels, premium resorts"),
])
def test_descriptions_follow_budget_tier(budget, accommodation):
    assert calculate_trip_budget([], budget, 2, "solo").accommodation.description == accommodation


def test_rejects_non_positive_days(paris_day):
    with pytest.raises(ValueError):
        calculate_trip_budget([paris_day], MID_RANGE, 0, "solo")
