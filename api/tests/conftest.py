import sys
from pathlib import Path


# Ensure the `api/` directory is on sys.path so tests can import `datashield.*`
CURRENT_FILE = Path(__file__).resolve()
API_DIR = CURRENT_FILE.parents[1]  # .../api
if str(API_DIR) not in sys.path:
    sys.path.insert(0, str(API_DIR))


from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from datashield.config import Settings
from datashield.db import AnalysisStore
from datashield.deps import Services
from datashield.main import create_app
from datashield.models import AnalysisRecord
from datashield.pipeline.fetch import FetchedPage


RAW_EMAIL = """\
From: Security Team <security@examp1e-bank.test>
To: user@example.test
Subject: URGENT: reset your password
Date: Mon, 19 Oct 2026 10:00:00 +0000
MIME-Version: 1.0
Content-Type: multipart/mixed; boundary="b1"

--b1
Content-Type: text/html; charset=utf-8

<p>Reset it <a href="http://bit.ly/x">here</a> today.</p>
--b1
Content-Type: application/pdf
Content-Disposition: attachment; filename="invoice.pdf"
Content-Transfer-Encoding: base64

JVBERi0xLjQK
--b1--
"""


class FakeFetcher:
    """Stands in for ContentFetcher; counts calls and never touches the network."""

    def __init__(self, body="<html><title>Login</title></html>", error=None):
        self.body = body
        self.error = error
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return FetchedPage(url=url, body=self.body, status_code=200, final_url=url)

    def close(self):
        pass


class FakeGateway:
    """Stands in for ClassifierGateway; records the prompts it was given."""

    def __init__(self, verdict="85% - fake bank login page", error=None):
        self.verdict = verdict
        self.error = error
        self.calls = []

    def classify(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.verdict

    def close(self):
        pass


def memory_store(create_schema=True):
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = AnalysisStore(engine)
    if create_schema:
        store.create_schema()
    return store


def stored_records(store, limit=None):
    """Rows written through `store`, newest first."""
    stmt = select(AnalysisRecord).order_by(AnalysisRecord.id.desc()).limit(limit)
    with Session(store.engine) as session:
        return list(session.scalars(stmt))


def stub_openai_client(create):
    """Object shaped like an OpenAI client whose chat.completions.create is `create`."""
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)), close=lambda: None)


def completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


@pytest.fixture
def raw_email():
    return RAW_EMAIL


@pytest.fixture
def store():
    s = memory_store()
    yield s
    s.close()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def services(store, fetcher, gateway):
    return Services(store=store, fetcher=fetcher, gateway=gateway)


@pytest.fixture
def settings():
    return Settings(database_url="sqlite+pysqlite:///:memory:", rate_limit="1000/minute")


@pytest.fixture
def client(settings, services):
    return TestClient(create_app(settings, services))
