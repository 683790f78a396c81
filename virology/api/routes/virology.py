"""Virology test API routes.

FastAPI router for home test kit ordering, result polling, CTA token
exchange and result posting.

Developer Golden Rules:
1. THROTTLE THE EXCHANGE - body parsing and the exchange run inside the
   throttle, so every outcome (400 included) takes at least D
2. MALFORMED INPUT IS PER ENDPOINT - 422 on /results, 400 on
   /cta-exchange, bodies ignored on /home-kit/*
3. NOTHING ABOUT WHY - exchange failures share one 400 body; a
   consumed token looks exactly like a pending one (204)
4. FAIL LOUD - store faults and token exhaustion propagate to the
   application's RFC 7807 handlers
"""

from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from structlog import get_logger

from virology.api.dependencies.virology import (
    get_result_lookup_service,
    get_test_order_service,
    get_test_result_service,
    get_throttled_cta_exchange_service,
)
from virology.api.models.health import HealthResponse
from virology.api.models.virology import (
    CtaExchangeRequest,
    CtaExchangeResponse,
    HomeKitOrderResponse,
    HomeKitRegisterResponse,
    ResultLookupRequest,
    ResultLookupResponse,
    ResultUploadRequest,
    VirologyErrorResponse,
)
from virology.application.services.cta_exchange_service import CtaExchangeService
from virology.application.services.result_lookup_service import ResultLookupService
from virology.application.services.test_order_service import TestOrderService
from virology.application.services.test_result_service import TestResultService
from virology.application.services.throttling_service import (
    ThrottledCtaExchangeService,
)
from virology.domain.errors import ResultAlreadyPostedError, TestOrderNotFoundError
from virology.domain.models.outcomes import ExchangeStatus, LookupStatus
from virology.domain.models.test_order import VirologyRequestType

logger = get_logger()

router = APIRouter(prefix="/virology-test", tags=["virology-test"])


def _problem(
    request: Request, status: int, type_: str, title: str, detail: str
) -> HTTPException:
    return HTTPException(
        status_code=status,
        detail={
            "type": type_,
            "title": title,
            "status": status,
            "detail": detail,
            "instance": str(request.url),
        },
    )


# =============================================================================
# Home test kit ordering
# =============================================================================


@router.post(
    "/home-kit/order",
    response_model=HomeKitOrderResponse,
    responses={500: {"model": VirologyErrorResponse}, 503: {"model": VirologyErrorResponse}},
    summary="Order a home test kit",
)
async def order_home_kit(
    service: TestOrderService = Depends(get_test_order_service),
) -> HomeKitOrderResponse:
    """Create a PENDING test order and return its tokens.

    The request body, if any, is ignored.
    """
    response = await service.create_order(VirologyRequestType.ORDER)
    return HomeKitOrderResponse(
        order_website_url=response.website_url,
        website_url_with_query=response.website_url_with_query,
        token_parameter_value=response.cta_token,
        cta_token=response.cta_token,
        test_result_polling_token=response.test_result_polling_token,
    )


@router.post(
    "/home-kit/register",
    response_model=HomeKitRegisterResponse,
    responses={500: {"model": VirologyErrorResponse}, 503: {"model": VirologyErrorResponse}},
    summary="Register a home test kit",
)
async def register_home_kit(
    service: TestOrderService = Depends(get_test_order_service),
) -> HomeKitRegisterResponse:
    response = await service.create_order(VirologyRequestType.REGISTER)
    return HomeKitRegisterResponse(
        register_website_url=response.website_url,
        website_url_with_query=response.website_url_with_query,
        token_parameter_value=response.cta_token,
        cta_token=response.cta_token,
        test_result_polling_token=response.test_result_polling_token,
    )


# =============================================================================
# Result polling
# =============================================================================


@router.post(
    "/results",
    response_model=ResultLookupResponse,
    response_model_exclude_none=True,
    responses={
        404: {"model": VirologyErrorResponse, "description": "Unknown polling token"},
        422: {"model": VirologyErrorResponse, "description": "Malformed request"},
    },
    summary="Poll for a test result",
)
async def lookup_result(
    request: Request,
    service: ResultLookupService = Depends(get_result_lookup_service),
) -> ResultLookupResponse:
    """Report whether the result for a polling token is available.

    Read-only; repeating the call returns the same answer.
    """
    try:
        body = ResultLookupRequest.model_validate_json(await request.body())
    except ValidationError:
        logger.info("result_lookup_request_malformed")
        raise _problem(
            request,
            422,
            "urn:virology:malformed-request",
            "Malformed Request",
            "Request body must be a JSON object with testResultPollingToken",
        ) from None

    outcome = await service.lookup(body.test_result_polling_token)

    if outcome.status is LookupStatus.NOT_FOUND:
        raise _problem(
            request,
            404,
            "urn:virology:test-result-not-found",
            "Test Result Not Found",
            "No test order found for the given polling token",
        )
    if outcome.status is LookupStatus.PENDING:
        return ResultLookupResponse(status="PENDING")
    return ResultLookupResponse(
        status="AVAILABLE",
        test_end_date=outcome.test_end_date,
        test_result=outcome.test_result,
        test_kit=outcome.test_kit,
    )


# =============================================================================
# CTA token exchange
# =============================================================================


def _exchange_handler(
    request: Request, service: CtaExchangeService
) -> Callable[[], Awaitable[Response]]:
    async def handle() -> Response:
        try:
            body = CtaExchangeRequest.model_validate_json(await request.body())
        except ValidationError:
            logger.info("cta_exchange_request_malformed")
            raise _exchange_rejected(request) from None

        outcome = await service.exchange(body.cta_token, body.country)

        if outcome.status is ExchangeStatus.CONSUMED:
            payload = CtaExchangeResponse(
                diagnosis_key_submission_token=outcome.diagnosis_key_submission_token,
                test_end_date=outcome.test_end_date,
                test_result=outcome.test_result,
                test_kit=outcome.test_kit,
            )
            return JSONResponse(content=payload.model_dump(mode="json", by_alias=True))
        if outcome.status is ExchangeStatus.PENDING:
            return Response(status_code=204)
        raise _exchange_rejected(request)

    return handle


def _exchange_rejected(request: Request) -> HTTPException:
    return _problem(
        request,
        400,
        "urn:virology:cta-exchange-rejected",
        "CTA Exchange Rejected",
        "The CTA token could not be exchanged",
    )


@router.post(
    "/cta-exchange",
    response_model=CtaExchangeResponse,
    responses={
        204: {"description": "Result not available"},
        400: {"model": VirologyErrorResponse, "description": "Malformed or unknown token"},
    },
    summary="Exchange a CTA token for a diagnosis key submission token",
)
async def exchange_cta_token(
    request: Request,
    service: ThrottledCtaExchangeService = Depends(get_throttled_cta_exchange_service),
) -> Response:
    """Exchange a CTA token, at most once, for the result and submission token.

    Every outcome, malformed input included, is delayed to the throttle floor.
    """
    return await service.throttle.run(_exchange_handler(request, service.inner))


# =============================================================================
# Result posting
# =============================================================================


@router.post(
    "/results-upload",
    status_code=202,
    responses={
        404: {"model": VirologyErrorResponse, "description": "Unknown CTA token"},
        409: {"model": VirologyErrorResponse, "description": "Result already posted"},
    },
    summary="Post a test result for a CTA token",
)
async def upload_result(
    request_data: ResultUploadRequest,
    request: Request,
    service: TestResultService = Depends(get_test_result_service),
) -> Response:
    """Attach a lab result to a PENDING test order."""
    try:
        await service.post_result(
            cta_token=request_data.cta_token,
            test_result=request_data.test_result,
            test_end_date=request_data.test_end_date,
            test_kit=request_data.test_kit,
        )
    except TestOrderNotFoundError as e:
        raise _problem(
            request, 404, "urn:virology:test-order-not-found", "Test Order Not Found", str(e)
        ) from None
    except ResultAlreadyPostedError as e:
        raise _problem(
            request,
            409,
            "urn:virology:result-already-posted",
            "Result Already Posted",
            str(e),
        ) from None
    return Response(status_code=202)


@router.post("/health", response_model=HealthResponse, summary="Virology health check")
async def virology_health() -> HealthResponse:
    return HealthResponse(status="healthy")
