from dataclasses import dataclass

from fastapi import Request

from .ai_service.service import ClassifierGateway
from .config import Settings
from .db import AnalysisStore
from .pipeline.fetch import ContentFetcher


@dataclass
class Services:
    """Long-lived collaborators shared by every request handler."""

    store: AnalysisStore
    fetcher: ContentFetcher
    gateway: ClassifierGateway

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        store = AnalysisStore.from_url(settings.database_url)
        store.create_schema()
        return cls(
            store=store,
            fetcher=ContentFetcher(),
            gateway=ClassifierGateway.from_settings(settings),
        )

    def close(self) -> None:
        self.fetcher.close()
        self.gateway.close()
        self.store.close()


def get_services(request: Request) -> Services:
    return request.app.state.services


def caller_address(request: Request) -> str | None:
    return request.client.host if request.client else None
