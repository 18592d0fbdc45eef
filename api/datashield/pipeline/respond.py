from datetime import datetime
from typing import Dict, List

from ..schemas import (
    EmailAnalysisBody,
    EmailAnalysisOut,
    EmailMetadataOut,
    RiskAssessmentOut,
    UrlAnalysisOut,
)
from .email_parse import EmailMetadata

# Strictly greater-than: exactly 2 (spam) or 3 (phishing) indicators stay "Low".
SPAM_THRESHOLD = 2
PHISHING_THRESHOLD = 3


def risk_assessment(indicators: List[str]) -> Dict[str, str]:
    count = len(indicators)
    return {
        "spam": "High" if count > SPAM_THRESHOLD else "Low",
        "phishing": "High" if count > PHISHING_THRESHOLD else "Low",
    }


def format_url_response(url: str, verdict: str, timestamp: datetime) -> UrlAnalysisOut:
    return UrlAnalysisOut(url=url, analysis=verdict, timestamp=timestamp)


def format_email_response(
    metadata: EmailMetadata, indicators: List[str], verdict: str, timestamp: datetime
) -> EmailAnalysisOut:
    return EmailAnalysisOut(
        analysis=EmailAnalysisBody(
            metadata=EmailMetadataOut.from_metadata(metadata),
            security_indicators=list(indicators),
            ai_analysis=verdict,
            risk_assessment=RiskAssessmentOut(**risk_assessment(indicators)),
        ),
        timestamp=timestamp,
    )
