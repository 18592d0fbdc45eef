"""
Orchestration of one analysis request.

validate (done by the router) -> enrich -> [heuristics] -> compose -> classify
-> record -> format. Strictly sequential; the first failure ends the request.
A record is written only after the classifier answered, and a failed write
does not hide the verdict from the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from ..deps import Services
from ..errors import AnalysisError, PersistenceFailed
from ..schemas import EmailAnalysisOut, UrlAnalysisOut
from .email_parse import parse_email
from .heuristics import extract_indicators
from .prompts import compose_email_prompt, compose_url_prompt
from .respond import format_email_response, format_url_response
from .validate import AnalysisRequest, EmailRequest, UrlRequest

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _identity(request: AnalysisRequest) -> str:
    if isinstance(request, UrlRequest):
        return f"url={request.url}"
    return f"email ({len(request.raw_content)} chars)"


def _record(
    services: Services,
    *,
    kind: str,
    input_summary: str,
    enrichment: Dict[str, Any],
    verdict: str,
    timestamp: datetime,
    caller: Optional[str],
    indicators: Optional[List[str]] = None,
) -> Optional[int]:
    try:
        return services.store.record(
            kind=kind,
            input_summary=input_summary,
            enrichment=enrichment,
            indicators=indicators,
            verdict=verdict,
            created_at=timestamp,
            caller_address=caller,
        )
    except PersistenceFailed as exc:
        # The verdict was obtained; the caller still gets it.
        logger.error(f"Analysis record not stored for {input_summary!r}: {exc.message}")
        return None


def analyze_url(request: UrlRequest, services: Services, *, caller: Optional[str] = None) -> UrlAnalysisOut:
    page = services.fetcher.fetch(request.url)
    verdict = services.gateway.classify(compose_url_prompt(page))
    timestamp = utcnow()
    _record(
        services,
        kind="url",
        input_summary=request.url,
        enrichment={
            "status_code": page.status_code,
            "final_url": page.final_url,
            "content_length": len(page.body),
        },
        verdict=verdict,
        timestamp=timestamp,
        caller=caller,
    )
    logger.info(f"URL analysis completed for {request.url}")
    return format_url_response(request.url, verdict, timestamp)


def analyze_email(request: EmailRequest, services: Services, *, caller: Optional[str] = None) -> EmailAnalysisOut:
    metadata = parse_email(request.raw_content)
    indicators = extract_indicators(metadata)
    verdict = services.gateway.classify(compose_email_prompt(metadata, indicators))
    timestamp = utcnow()
    _record(
        services,
        kind="email",
        input_summary=f"From: {metadata.sender} | Subject: {metadata.subject}",
        enrichment=metadata.to_dict(),
        indicators=indicators,
        verdict=verdict,
        timestamp=timestamp,
        caller=caller,
    )
    logger.info(f"Email analysis completed ({len(indicators)} indicators)")
    return format_email_response(metadata, indicators, verdict, timestamp)


def run_analysis(
    request: AnalysisRequest, services: Services, *, caller: Optional[str] = None
) -> Union[UrlAnalysisOut, EmailAnalysisOut]:
    try:
        if isinstance(request, UrlRequest):
            return analyze_url(request, services, caller=caller)
        if isinstance(request, EmailRequest):
            return analyze_email(request, services, caller=caller)
        raise TypeError(f"Unsupported analysis request: {type(request).__name__}")
    except AnalysisError as exc:
        if not exc.is_client_error:
            logger.error(
                f"Analysis failed for {_identity(request)} from {caller}: {exc.category}: {exc.message}"
            )
        raise
