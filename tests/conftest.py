"""Shared fixtures: temporary SQLite store, mock HTTP transport, fake LLM client."""

import json
from types import SimpleNamespace
from typing import Callable, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from gov_job_agent.services.job_store import JobStore

PDF_CONTENT_TYPE = {"content-type": "application/pdf"}
HTML_CONTENT_TYPE = {"content-type": "text/html; charset=utf-8"}


def make_pdf(*lines: str) -> bytes:
    """Minimal uncompressed PDF with one text line per Tj operator."""
    ops = " T* ".join(f"({line}) Tj" for line in lines)
    stream = f"BT /F1 12 Tf 72 712 Td {ops} ET".encode("latin-1")
    return (
        b"%PDF-1.4\n1 0 obj\n<< /Length " + str(len(stream)).encode() + b" >>\nstream\n"
        + stream
        + b"\nendstream\nendobj\n%%EOF\n"
    )


def make_http_client(routes: Dict[str, httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient answering from a url->response map; anything else is a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in routes:
            return routes[url]
        return httpx.Response(404, text="not found")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)


def make_llm_client(payload: Optional[dict] = None, content: Optional[str] = None, error: Optional[Exception] = None):
    """Stand-in for AsyncOpenAI whose chat.completions.create returns payload (as JSON) or raises."""
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
        return client
    text = content if content is not None else json.dumps(payload)
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


@pytest.fixture
def store(tmp_path):
    s = JobStore(str(tmp_path / "jobs.db"))
    yield s
    s.close()


@pytest.fixture
def http_factory() -> Callable[[Dict[str, httpx.Response]], httpx.AsyncClient]:
    return make_http_client
