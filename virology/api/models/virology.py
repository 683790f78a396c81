"""Virology API request/response models.

Field names are snake_case in Python and camelCase on the wire, the
contract the mobile client and the ordering websites already speak.

Developer Golden Rules:
1. CAMELCASE ON THE WIRE - aliases come from to_camel, never by hand
2. ISO 8601 WITH Z - dates serialize as 2020-09-10T00:00:00Z
3. NO SUBMISSION TOKEN OUTSIDE THE EXCHANGE RESPONSE
"""

from datetime import datetime, timezone
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from virology.domain.models.test_order import Country, TestKit, TestResult


def _format_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# Custom datetime serializer for ISO 8601 with Z suffix (Pydantic v2)
DateTimeWithZ = Annotated[datetime, PlainSerializer(_format_utc, return_type=str)]


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HomeKitOrderResponse(CamelModel):
    """Tokens returned when a kit is ordered.

    Attributes:
        order_website_url: Website the citizen completes the order on.
        website_url_with_query: Same URL with ?ctaToken=<cta> appended.
        token_parameter_value: The CTA token, as put in the query string.
        cta_token: CTA token for the website and the exchange.
        test_result_polling_token: Token the mobile client polls with.
    """

    order_website_url: str
    website_url_with_query: str
    token_parameter_value: str
    cta_token: str
    test_result_polling_token: str


class HomeKitRegisterResponse(CamelModel):
    """Tokens returned when a held kit is registered."""

    register_website_url: str
    website_url_with_query: str
    token_parameter_value: str
    cta_token: str
    test_result_polling_token: str


class ResultLookupRequest(CamelModel):
    """Body of POST /virology-test/results."""

    test_result_polling_token: str


class ResultLookupResponse(CamelModel):
    """Result availability. Result fields are only set when AVAILABLE."""

    status: Literal["PENDING", "AVAILABLE"]
    test_end_date: DateTimeWithZ | None = None
    test_result: TestResult | None = None
    test_kit: TestKit | None = None


class CtaExchangeRequest(CamelModel):
    """Body of POST /virology-test/cta-exchange.

    Attributes:
        cta_token: CTA token as typed by the citizen.
        country: Optional country of the mobile client.
    """

    cta_token: str
    country: Country | None = None


class CtaExchangeResponse(CamelModel):
    """Payload released to the single successful exchange caller."""

    diagnosis_key_submission_token: str
    test_end_date: DateTimeWithZ
    test_result: TestResult
    test_kit: TestKit


class ResultUploadRequest(CamelModel):
    """Body of POST /virology-test/results-upload.

    Attributes:
        cta_token: CTA token of the order the result belongs to.
        test_end_date: When the test ended; naive values are taken as UTC.
        test_result: POSITIVE, NEGATIVE or VOID.
        test_kit: Kit that produced the result (default LAB_RESULT).
    """

    cta_token: str = Field(min_length=1)
    test_end_date: datetime
    test_result: TestResult
    test_kit: TestKit = TestKit.LAB_RESULT

    @field_validator("test_end_date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class VirologyErrorResponse(BaseModel):
    """RFC 7807 error response model.

    Attributes:
        type: URI reference identifying the problem type.
        title: Short, human-readable summary.
        status: HTTP status code.
        detail: Human-readable explanation.
        instance: URI reference for this occurrence.
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
