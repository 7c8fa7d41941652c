"""
Pydantic models for the meeting point service.

These models define the values passed between the geocoder, the travel metric
provider, the optimizer and the result assembler, plus the request/response
shapes exposed by the MCP tools.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


class Coordinate(BaseModel):
    """
    Immutable latitude/longitude pair.

    Examples:
        - Coordinate(lat=37.4220, lng=-122.0841)
    """

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude (-90 to 90)")
    lng: float = Field(..., ge=-180, le=180, description="Longitude (-180 to 180)")

    def as_tuple(self) -> tuple[float, float]:
        """(lat, lng) tuple as accepted by the googlemaps client"""
        return (self.lat, self.lng)

    def __str__(self) -> str:
        return f"{self.lat},{self.lng}"


class TravelMetric(BaseModel):
    """
    Travel cost between two coordinates.

    An unreachable metric is a distinct state: its numeric fields are always
    zero and it must never be summed into an aggregate cost.
    """

    model_config = ConfigDict(frozen=True)

    duration_seconds: int = Field(0, ge=0, description="Travel duration in seconds")
    distance_meters: int = Field(0, ge=0, description="Travel distance in meters")
    duration_text: str = Field("N/A", description="Human-readable duration")
    distance_text: str = Field("N/A", description="Human-readable distance")
    reachable: bool = Field(True, description="False when the provider found no path")
    status: str = Field("OK", description="Status: OK, NOT_FOUND, ZERO_RESULTS, etc.")

    @model_validator(mode="after")
    def check_unreachable_has_no_cost(self):
        """Unreachable metrics carry no duration or distance"""
        if not self.reachable and (self.duration_seconds or self.distance_meters):
            raise ValueError("Unreachable travel metric cannot carry a duration or distance")
        return self

    @classmethod
    def unreachable(cls, status: str) -> "TravelMetric":
        return cls(reachable=False, status=status)


class TravelLeg(BaseModel):
    """A travel metric labeled with the address it belongs to"""

    address: str = Field(..., description="Address text as supplied in the request")
    metric: TravelMetric


class Candidate(BaseModel):
    """A scored meeting point candidate (lives for one optimization pass only)"""

    coordinate: Coordinate
    aggregate_cost: int = Field(..., ge=0, description="Sum of origin travel durations in seconds")


class MeetingPointRequest(BaseModel):
    """Request model for a meeting point search"""

    origins: list[str] = Field(
        ..., min_length=1, description="Starting addresses, in the order results should be reported"
    )
    destination: str = Field(..., min_length=1, description="Shared final destination address")

    @field_validator("origins")
    @classmethod
    def validate_origins(cls, v):
        """Reject blank origin addresses instead of silently dropping them"""
        stripped = [origin.strip() for origin in v]
        for index, origin in enumerate(stripped):
            if not origin:
                raise ValueError(f"Origin address at position {index} is empty")
        return stripped

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v):
        if not v.strip():
            raise ValueError("Destination address is empty")
        return v.strip()


class MeetingPointResult(BaseModel):
    """Complete response for a meeting point search"""

    meeting_address: str = Field(..., description="Reverse geocoded address of the meeting point")
    meeting_coordinate: Coordinate
    origin_legs: list[TravelLeg] = Field(
        ..., description="Origin -> meeting point legs, in request order"
    )
    destination_leg: TravelLeg = Field(..., description="Meeting point -> destination leg")
    origin_coordinates: list[Coordinate] = Field(
        ..., description="Resolved origin coordinates, in request order"
    )
    destination_coordinate: Coordinate

    @computed_field
    @property
    def total_duration_seconds(self) -> int:
        """Aggregate travel time of every reachable origin leg"""
        return sum(leg.metric.duration_seconds for leg in self.origin_legs if leg.metric.reachable)
