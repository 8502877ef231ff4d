import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from newsfan.core.exceptions import SourceStatusError, SourceTransportError  # noqa: E402
from newsfan.core.models.article import Article  # noqa: E402
from newsfan.core.models.source import Source  # noqa: E402
from newsfan.core.newsapi_client import SourceQueryResult  # noqa: E402


class FakeResponse:
    def __init__(self, payload: Any = None, status: int = 200, json_error: Optional[Exception] = None) -> None:
        self.payload = payload
        self.status = status
        self.json_error = json_error

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if self.json_error is not None:
            raise self.json_error
        return self.payload


class _RequestContext:
    def __init__(self, outcome: Any) -> None:
        self.outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


class FakeSession:
    """Stands in for aiohttp.ClientSession; responses keyed by source id."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self.responses = responses or {}
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, params: Optional[Dict[str, str]] = None) -> _RequestContext:
        params = params or {}
        self.requests.append({"url": url, "params": dict(params)})
        outcome = self.responses.get(params.get("source"), FakeResponse({"status": "ok", "articles": []}))
        return _RequestContext(outcome)

    async def close(self) -> None:
        self.closed = True


class FakeQueryClient:
    """
    Scripted per-source query client.

    ``entries`` maps source id to raw upstream entries (filtered with the
    predicate like the real client); ``failures`` maps source id to the error
    to report; ``delays`` maps source id to seconds to sleep first.
    """

    def __init__(
        self,
        entries: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        failures: Optional[Dict[str, Exception]] = None,
        delays: Optional[Dict[str, float]] = None,
        raises: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.entries = entries or {}
        self.failures = failures or {}
        self.delays = delays or {}
        self.raises = raises or {}
        self.started: List[str] = []
        self.finished: List[str] = []

    async def query(self, predicate, source: Source) -> SourceQueryResult:
        self.started.append(source.id)
        try:
            await asyncio.sleep(self.delays.get(source.id, 0))
            if source.id in self.raises:
                raise self.raises[source.id]
            if source.id in self.failures:
                return SourceQueryResult(source=source, error=self.failures[source.id])

            articles = [
                make_article(entry.get("title"), source, description=entry.get("description"))
                for entry in self.entries.get(source.id, [])
                if predicate.test(entry.get("title")) or predicate.test(entry.get("description"))
            ]
            return SourceQueryResult(source=source, articles=articles)
        finally:
            self.finished.append(source.id)


def make_article(title: Optional[str], source: Source, description: Optional[str] = None,
                 timestamp: Optional[float] = 1_600_000_000.0) -> Article:
    return Article(
        title=title,
        description=description,
        timestamp=timestamp,
        source=source.name,
        link=f"https://example.com/{source.id}/{abs(hash(title)) % 10000}",
        media=None,
        source_id=source.id,
    )


@pytest.fixture
def source_a() -> Source:
    return Source(id="source-a", name="Source A")


@pytest.fixture
def source_b() -> Source:
    return Source(id="source-b", name="Source B")


@pytest.fixture
def source_c() -> Source:
    return Source(id="source-c", name="Source C")


@pytest.fixture
def article_factory():
    return make_article


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session_factory():
    def _factory(responses: Optional[Dict[str, Any]] = None) -> FakeSession:
        return FakeSession(responses)

    return _factory


@pytest.fixture
def fake_query_client_factory():
    def _factory(**kwargs) -> FakeQueryClient:
        return FakeQueryClient(**kwargs)

    return _factory


@pytest.fixture
def transport_error():
    def _factory(source_id: str) -> SourceTransportError:
        return SourceTransportError(source_id, ConnectionError("connection refused"))

    return _factory


@pytest.fixture
def status_error():
    def _factory(source_id: str, status: str = "error") -> SourceStatusError:
        return SourceStatusError(source_id, status, "apiKeyInvalid")

    return _factory


@pytest.fixture
def newsapi_env(monkeypatch):
    """Minimal valid environment for ConfigManager."""
    for key in (
        "NEWS_API_BASE_URL",
        "NEWS_MAX_ARTICLES",
        "NEWS_SOURCE_PRIORITY",
        "NEWS_SOURCES_FILE",
        "NEWS_REQUEST_TIMEOUT",
        "NEWS_MATCH_THRESHOLD",
        "NEWS_INCLUDE_UNLISTED_SOURCES",
        "LOG_LEVEL",
        "VERBOSE_LOGGING",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("NEWS_API_KEY", "test-key")
    return monkeypatch
