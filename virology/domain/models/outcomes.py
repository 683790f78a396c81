"""Outcome value objects returned by the virology services.

Lookup and exchange never raise for "not found" or "not ready": every
expected situation is one of the outcomes below, so the HTTP layer can
map them to the documented responses without leaking detail.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from virology.domain.models.test_order import (
    TestKit,
    TestOrder,
    TestResult,
    VirologyRequestType,
)


@dataclass(frozen=True)
class TestOrderResponse:
    """Tokens handed to the citizen after ordering or registering a kit.

    The diagnosis key submission token is deliberately absent: it is only
    released by a successful CTA exchange.

    Attributes:
        request_type: Whether the kit was ordered or registered.
        cta_token: Token the citizen types on the website.
        test_result_polling_token: Token the mobile client polls with.
        website_url: Website for this request type.
    """

    __test__ = False

    request_type: VirologyRequestType
    cta_token: str
    test_result_polling_token: str
    website_url: str

    @property
    def website_url_with_query(self) -> str:
        """Website URL with the CTA token appended as a query parameter."""
        separator = "&" if "?" in self.website_url else "?"
        return f"{self.website_url}{separator}ctaToken={self.cta_token}"


class LookupStatus(Enum):
    """Result availability as seen through a polling token."""

    NOT_FOUND = "NOT_FOUND"
    PENDING = "PENDING"
    AVAILABLE = "AVAILABLE"


@dataclass(frozen=True)
class LookupOutcome:
    """Outcome of polling for a test result.

    Attributes:
        status: Availability of the result.
        test_result: Result, only when AVAILABLE.
        test_end_date: Test end date, only when AVAILABLE.
        test_kit: Kit type, only when AVAILABLE.
    """

    status: LookupStatus
    test_result: TestResult | None = None
    test_end_date: datetime | None = None
    test_kit: TestKit | None = None

    @classmethod
    def not_found(cls) -> LookupOutcome:
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def pending(cls) -> LookupOutcome:
        return cls(status=LookupStatus.PENDING)

    @classmethod
    def available(cls, order: TestOrder) -> LookupOutcome:
        """Build an AVAILABLE outcome from an order carrying a result."""
        return cls(
            status=LookupStatus.AVAILABLE,
            test_result=order.test_result,
            test_end_date=order.test_end_date,
            test_kit=order.test_kit,
        )


class ExchangeStatus(Enum):
    """Outcome kind of a CTA token exchange."""

    NOT_FOUND = "NOT_FOUND"
    PENDING = "PENDING"
    CONSUMED = "CONSUMED"


@dataclass(frozen=True)
class ExchangeOutcome:
    """Outcome of exchanging a CTA token.

    Only the single caller that moved the order to CONSUMED receives the
    payload. Every later caller sees PENDING, the same as a caller whose
    result has not been posted yet.

    Attributes:
        status: Outcome kind.
        diagnosis_key_submission_token: Only when CONSUMED.
        test_result: Only when CONSUMED.
        test_end_date: Only when CONSUMED.
        test_kit: Only when CONSUMED.
    """

    status: ExchangeStatus
    diagnosis_key_submission_token: str | None = None
    test_result: TestResult | None = None
    test_end_date: datetime | None = None
    test_kit: TestKit | None = None

    @classmethod
    def not_found(cls) -> ExchangeOutcome:
        return cls(status=ExchangeStatus.NOT_FOUND)

    @classmethod
    def pending(cls) -> ExchangeOutcome:
        return cls(status=ExchangeStatus.PENDING)

    @classmethod
    def consumed(cls, order: TestOrder) -> ExchangeOutcome:
        """Build a CONSUMED outcome from the record as it was before consumption."""
        return cls(
            status=ExchangeStatus.CONSUMED,
            diagnosis_key_submission_token=order.diagnosis_key_submission_token,
            test_result=order.test_result,
            test_end_date=order.test_end_date,
            test_kit=order.test_kit,
        )
