from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class Priority(str, Enum):
    ESSENTIAL = "essential"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


# Lowest to highest; merges only ever move an item to the right.
PRIORITY_ORDER = [Priority.OPTIONAL, Priority.RECOMMENDED, Priority.ESSENTIAL]


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


CATEGORIES = (
    "clothing",
    "toiletries",
    "electronics",
    "documents",
    "health_safety",
    "activity_specific",
    "miscellaneous",
)


class PackingItem(BaseModel):
    """Schema for a single recommended item."""
    item: str = Field(..., min_length=1, examples=["Thermal base layers"])
    quantity: str = Field(..., examples=["2-3 sets"])
    description: str = Field("", examples=["Stay warm in cold climates"])
    priority: Priority = Field(..., examples=["essential"])

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_as_text(cls, value):
        # Models often answer "quantity": 4
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class PackingList(BaseModel):
    """The seven packing categories, each an ordered list of items."""
    clothing: List[PackingItem] = Field(default_factory=list)
    toiletries: List[PackingItem] = Field(default_factory=list)
    electronics: List[PackingItem] = Field(default_factory=list)
    documents: List[PackingItem] = Field(default_factory=list)
    health_safety: List[PackingItem] = Field(default_factory=list)
    activity_specific: List[PackingItem] = Field(default_factory=list)
    miscellaneous: List[PackingItem] = Field(default_factory=list)


class DestinationDetails(BaseModel):
    overview: str
    best_time_to_visit: str
    weather_summary: str
    cultural_tips: str
    local_transport: str
    currency: str
    language: str
    power_plugs: str
    safety_tips: str


class FAQItem(BaseModel):
    question: str
    answer: str


class PackingResponse(BaseModel):
    """A complete packing recommendation, as drafted by the AI or produced by the rules."""
    packing_list: PackingList
    packing_tips: List[str] = Field(default_factory=list)
    destination_notes: str = ""
    destination_details: Optional[DestinationDetails] = None
    faqs: Optional[List[FAQItem]] = None

    @field_validator("packing_tips", mode="before")
    @classmethod
    def drop_non_text_tips(cls, value):
        if isinstance(value, list):
            return [tip for tip in value if isinstance(tip, str)]
        return value


class GeneratorInput(BaseModel):
    """Schema for the trip a packing list is generated for."""
    destination: str = Field(..., min_length=1, examples=["Oslo"])
    days: int = Field(..., gt=0, examples=[10])
    season: Season = Field(..., examples=["winter"])
    trip_type: str = Field("leisure", examples=["business"])
    activities: str = Field("", examples=["business meetings, photography"])

    @field_validator("destination")
    @classmethod
    def strip_destination(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("destination must not be blank")
        return value

    @field_validator("season", mode="before")
    @classmethod
    def normalize_season(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def is_business(self) -> bool:
        return self.trip_type.strip().lower() == "business"


class PackingGenerateRequest(GeneratorInput):
    """Schema for requesting a new packing list."""
    pass


class PackingGenerateResult(BaseModel):
    """Schema for returning a freshly generated packing list."""
    packing_data: PackingResponse
    destination_image: Optional[str] = None
    used_strategy: Literal["ai+rules", "rules-only", "sample-fallback"]


class SavePackingListRequest(BaseModel):
    """Schema for saving a generated packing list."""
    destination: str = Field(..., min_length=1, examples=["Oslo"])
    days: int = Field(..., gt=0, examples=[10])
    season: Season = Field(..., examples=["winter"])
    trip_type: str = Field(..., min_length=1, examples=["business"])
    activities: str = ""
    packing_list: PackingList
    packing_tips: List[str] = Field(default_factory=list)
    destination_notes: str = ""
    destination_details: Optional[DestinationDetails] = None
    faqs: Optional[List[FAQItem]] = None
    destination_image: Optional[str] = None

    @field_validator("season", mode="before")
    @classmethod
    def normalize_season(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class SavedPackingList(SavePackingListRequest):
    """Schema for returning a saved packing list."""
    id: str
    title: str
    created_at: str
    updated_at: str
