from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from schemas.packing_schema import FAQItem


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class Activity(BaseModel):
    activity: str
    details: str = ""


class DayItinerary(BaseModel):
    """One day of an itinerary, split into morning, afternoon and evening."""
    day: str = Field(..., examples=["Day 1 - Montmartre District"])
    location: str = ""
    google_map_url: str = ""
    morning: List[Activity] = Field(default_factory=list)
    afternoon: List[Activity] = Field(default_factory=list)
    evening: List[Activity] = Field(default_factory=list)
    travel_tip: str = ""

    @property
    def activities(self) -> List[Activity]:
        return [*self.morning, *self.afternoon, *self.evening]


class ItineraryDraft(BaseModel):
    itinerary: List[DayItinerary]


class Highlight(BaseModel):
    name: str
    description: str


class DestinationOverview(BaseModel):
    """Background content shown next to an itinerary. Accepts the camelCase keys the model answers with."""
    destination_overview: str = Field("", validation_alias=AliasChoices("destination_overview", "destinationOverview"))
    you_might_want_to_ask: List[FAQItem] = Field(
        default_factory=list, validation_alias=AliasChoices("you_might_want_to_ask", "youMightWantToAsk")
    )
    best_time_to_visit: str = Field("", validation_alias=AliasChoices("best_time_to_visit", "bestTimeToVisit"))
    hidden_gems: List[Highlight] = Field(default_factory=list, validation_alias=AliasChoices("hidden_gems", "hiddenGems"))
    local_experiences: List[Highlight] = Field(
        default_factory=list, validation_alias=AliasChoices("local_experiences", "localExperiences")
    )
    food_and_dining: List[Highlight] = Field(
        default_factory=list, validation_alias=AliasChoices("food_and_dining", "foodAndDining")
    )


class DestinationOverviewRequest(BaseModel):
    destination: str = Field(..., min_length=1, examples=["Lisbon"])

    @field_validator("destination")
    @classmethod
    def strip_destination(cls, value: str) -> str:
        return _required_text(value)


class BudgetLine(BaseModel):
    cost: int
    description: str


class BudgetBreakdown(BaseModel):
    """Estimated trip cost per category, rounded to whole currency units."""
    accommodation: BudgetLine
    meals: BudgetLine
    activities: BudgetLine
    transportation: BudgetLine
    miscellaneous: BudgetLine
    total_per_day: int
    total_trip: int
    budget_range: str


class ItineraryGenerateRequest(BaseModel):
    """Schema for requesting a new itinerary."""
    destination: str = Field(..., min_length=1, examples=["Paris"])
    days: int = Field(..., gt=0, examples=[3])
    budget: str = Field(..., min_length=1, examples=["Mid-range ($100-250/day)"])
    travel_companions: str = Field(..., min_length=1, examples=["couple"])
    interests: str = Field(..., min_length=1, examples=["museums, local cuisine"])

    @field_validator("destination", "budget", "travel_companions", "interests")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _required_text(value)


class BudgetRequest(BaseModel):
    """Schema for estimating the cost of an itinerary."""
    itinerary: List[DayItinerary]
    budget: str = Field(..., examples=["Budget-friendly ($50-100/day)"])
    days: int = Field(..., gt=0, examples=[3])
    travel_companions: str = Field("", examples=["family with young children"])


class ItineraryGenerateResult(BaseModel):
    """Schema for returning a freshly generated itinerary."""
    destination: str
    title: str
    itinerary: List[DayItinerary]
    budget_breakdown: BudgetBreakdown
    destination_image: Optional[str] = None
    overview: Optional[DestinationOverview] = None
    saved_id: Optional[str] = None


class SaveItineraryRequest(BaseModel):
    """Schema for saving an itinerary."""
    title: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1, examples=["Paris"])
    days: int = Field(..., gt=0, examples=[3])
    budget: str = Field(..., min_length=1)
    travel_companions: str = Field(..., min_length=1)
    interests: str = Field(..., min_length=1)
    itinerary: List[DayItinerary]
    destination_image: Optional[str] = None
    overview: Optional[DestinationOverview] = None

    @field_validator("title", "destination", "budget", "travel_companions", "interests")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _required_text(value)


class SavedItinerary(SaveItineraryRequest):
    """Schema for returning a saved itinerary."""
    id: str
    created_at: str
    updated_at: str
