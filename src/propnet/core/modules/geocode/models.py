from pydantic import BaseModel, Field


class GeocodeResult(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str


class GeocodeResponse(GeocodeResult):
    success: bool = True
    cached: bool = Field(..., description="Whether the result was served from the cache")


class PlaceSuggestion(BaseModel):
    place_id: str
    description: str
