"""
Public waitlist endpoints.

Endpoints:
- POST /api/public/waitlist - Join the waitlist
- GET /api/public/waitlist/locations - Locations offered by the signup form

The response body is always a SubmissionOutcome; the status code
reflects its classification.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, Field

from afk_waitlist.api.deps import get_dispatcher
from afk_waitlist.components.waitlist import (
    LA_COUNTY_CITIES,
    OTHER_LOCATION,
    OutcomeCode,
    SubmissionOutcome,
    SubmissionRequest,
    WaitlistDispatcher,
)

router = APIRouter()

# Cities offered in the signup form's dropdown, "Other" last
FORM_LOCATIONS: list[str] = [
    *LA_COUNTY_CITIES,
    "San Francisco Bay Area",
    "New York City",
    "Chicago",
    "Seattle",
]

STATUS_BY_CODE: dict[OutcomeCode, int] = {
    OutcomeCode.OK: status.HTTP_200_OK,
    OutcomeCode.MISSING_FIELD: status.HTTP_400_BAD_REQUEST,
    OutcomeCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    OutcomeCode.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
    OutcomeCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    OutcomeCode.SINK_FAILURE: status.HTTP_502_BAD_GATEWAY,
    OutcomeCode.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# --- Request/Response Models ---


class WaitlistRequest(BaseModel):
    """Request body for a waitlist signup."""

    email: str = Field("", description="Email address as typed")
    location: str = Field("", description="Selected city, or 'Other'")
    custom_location: str | None = Field(None, description="Free-text city when 'Other'")


class WaitlistResponse(BaseModel):
    """Response for a waitlist signup."""

    success: bool = Field(..., description="Whether the signup was recorded")
    message: str = Field(..., description="Human-readable message")
    email_sequence_triggered: bool | None = None
    email: str | None = None
    location: str | None = None

    @classmethod
    def from_outcome(cls, outcome: SubmissionOutcome) -> WaitlistResponse:
        return cls(
            success=outcome.success,
            message=outcome.message,
            email_sequence_triggered=outcome.email_sequence_triggered,
            email=outcome.email,
            location=outcome.location,
        )


class LocationsResponse(BaseModel):
    locations: list[str]
    other: str = OTHER_LOCATION


# --- Helper Functions ---


def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    # Check X-Forwarded-For header (proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    # Fallback to direct client IP
    return request.client.host if request.client else "unknown"


# --- Endpoints ---


@router.post(
    "/waitlist",
    response_model=WaitlistResponse,
    responses={
        400: {"model": WaitlistResponse, "description": "Invalid input"},
        409: {"model": WaitlistResponse, "description": "Already on the waitlist"},
        429: {"model": WaitlistResponse, "description": "Rate limit exceeded"},
        502: {"model": WaitlistResponse, "description": "Spreadsheet sink failed"},
    },
    summary="Join the waitlist",
)
async def join_waitlist(
    body: WaitlistRequest,
    request: Request,
    response: Response,
    dispatcher: WaitlistDispatcher = Depends(get_dispatcher),
) -> WaitlistResponse:
    """
    Join the waitlist.

    Flow:
    1. Validate email and location
    2. Check rate limit (3 per client per hour)
    3. Reject emails already on the list
    4. Append to the spreadsheet and subscribe to the email sequence
    """
    outcome = await dispatcher.submit(
        SubmissionRequest(
            email=body.email,
            location=body.location,
            custom_location=body.custom_location,
            caller_identifier=get_client_ip(request),
        )
    )
    response.status_code = STATUS_BY_CODE.get(outcome.code, status.HTTP_200_OK)
    return WaitlistResponse.from_outcome(outcome)


@router.get("/waitlist/locations", response_model=LocationsResponse)
def list_locations() -> LocationsResponse:
    """Locations offered by the signup form."""
    return LocationsResponse(locations=list(FORM_LOCATIONS))
