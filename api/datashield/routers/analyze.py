from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from ..deps import Services, caller_address, get_services
from ..pipeline.analyze import run_analysis
from ..pipeline.validate import validate_email_request, validate_url_request
from ..schemas import (
    EmailAnalysisOut,
    EmailIn,
    ErrorOut,
    LegacyUrlAnalysisOut,
    UrlAnalysisOut,
    UrlIn,
)

router = APIRouter()

BANNER = "Server running. Use POST /analyze-url or POST /analyze-email to analyze content."

ERROR_RESPONSES = {
    400: {"model": ErrorOut, "description": "Missing field or invalid URL"},
    429: {"model": ErrorOut, "description": "Rate limit exceeded"},
    500: {"model": ErrorOut, "description": "Fetch, parse, classifier or storage failure"},
}


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
def banner() -> str:
    return BANNER


@router.post("/analyze-url", response_model=UrlAnalysisOut, responses=ERROR_RESPONSES)
def analyze_url(
    payload: UrlIn, request: Request, services: Services = Depends(get_services)
) -> UrlAnalysisOut:
    """
    Fetch the page behind ``url`` and ask the classifier how likely it is to be
    phishing or a scam.

    Returns the URL echo, the classifier's free-text answer and a timestamp.
    """
    req = validate_url_request(payload.model_dump())
    return run_analysis(req, services, caller=caller_address(request))


@router.post("/analyze-email", response_model=EmailAnalysisOut, responses=ERROR_RESPONSES)
def analyze_email(
    payload: EmailIn, request: Request, services: Services = Depends(get_services)
) -> EmailAnalysisOut:
    """
    Parse a raw email, compute local indicators and ask the classifier for a
    spam/phishing estimate.

    `riskAssessment` is a coarse bucket from the indicator count: spam is
    "High" above 2 indicators, phishing above 3.
    """
    req = validate_email_request(payload.model_dump(by_alias=True))
    return run_analysis(req, services, caller=caller_address(request))


@router.post("/analisar-url", response_model=LegacyUrlAnalysisOut, responses=ERROR_RESPONSES)
def analisar_url(
    payload: UrlIn, request: Request, services: Services = Depends(get_services)
) -> LegacyUrlAnalysisOut:
    """Legacy route used by the browser-extension popup (answers with `resultado`)."""
    req = validate_url_request(payload.model_dump())
    result = run_analysis(req, services, caller=caller_address(request))
    return LegacyUrlAnalysisOut(url=result.url, resultado=result.analysis)
