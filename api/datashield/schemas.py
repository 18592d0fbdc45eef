from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .pipeline.email_parse import EmailMetadata


class CamelModel(BaseModel):
    """JSON keys in camelCase (the extension's convention), snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UrlIn(BaseModel):
    """
    Body of POST /analyze-url.
    The field is optional here so that a missing URL reaches the validator and
    comes back as a 400 InvalidInput rather than a schema error.
    """

    url: Optional[str] = None


class EmailIn(CamelModel):
    """Body of POST /analyze-email: the raw email source (headers + body)."""

    email_content: Optional[str] = None


class UrlAnalysisOut(BaseModel):
    url: str
    analysis: str
    timestamp: datetime


class LegacyUrlAnalysisOut(BaseModel):
    """Shape read by the browser-extension popup."""

    url: str
    resultado: str


class EmailMetadataOut(CamelModel):
    sender: str = Field(alias="from")
    subject: str
    date: str
    headers: Dict[str, str]
    attachment_count: int
    has_html: bool
    links: List[str]
    spf_result: str
    dkim_result: str
    return_path: str

    @classmethod
    def from_metadata(cls, metadata: EmailMetadata) -> "EmailMetadataOut":
        return cls(**metadata.to_dict())


class RiskAssessmentOut(BaseModel):
    spam: Literal["High", "Low"]
    phishing: Literal["High", "Low"]


class EmailAnalysisBody(CamelModel):
    metadata: EmailMetadataOut
    security_indicators: List[str]
    ai_analysis: str
    risk_assessment: RiskAssessmentOut


class EmailAnalysisOut(BaseModel):
    analysis: EmailAnalysisBody
    timestamp: datetime


class ErrorOut(BaseModel):
    """Error body for every non-2xx answer. Never carries a stack trace."""

    error: str
    details: str
    timestamp: datetime


class HealthOut(BaseModel):
    status: str
    timestamp: datetime
    db: bool
