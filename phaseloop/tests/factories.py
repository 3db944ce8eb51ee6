"""
Test doubles and builders shared by the test modules.
"""

import io
import json
import struct
import zlib
from datetime import datetime, timezone

import aiohttp
from PIL import Image

from phaseloop.feeds import FeedEntry
from phaseloop.image_search import ImageCandidate
from phaseloop.providers.base import LLMProvider, LLMResponse


class MockProvider(LLMProvider):
    """Mock LLM provider that returns pre-configured responses."""

    def __init__(self):
        super().__init__(default_model="mock-model")
        self.calls: list[dict] = []
        self.responses: list[str] = []
        self.error: Exception | None = None
        self.usage = (0, 0)
        self._call_index = 0

    @property
    def name(self) -> str:
        return "mock"

    def queue_response(self, text: str):
        """Queue a response to be returned on the next generate() call."""
        self.responses.append(text)

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "json_mode": json_mode,
        })
        if self.error is not None:
            raise self.error
        text = self.responses[self._call_index] if self._call_index < len(self.responses) else "{}"
        self._call_index += 1
        return LLMResponse(
            text=text,
            model=model or self.default_model,
            input_tokens=self.usage[0],
            output_tokens=self.usage[1],
        )


class FakeImageSearch:
    """Stands in for GoogleImageSearch."""

    def __init__(self, urls: list[str] | None = None, error: Exception | None = None):
        self.urls = urls if urls is not None else []
        self.error = error
        self.queries: list[tuple[str, int | None]] = []
        self.configured = True

    async def search(self, query: str, start: int | None = None) -> list[ImageCandidate]:
        self.queries.append((query, start))
        if self.error is not None:
            raise self.error
        return [ImageCandidate(url=url) for url in self.urls]


def make_entry(
    link: str,
    title: str = "Test Article",
    source: str = "Test Feed",
    pub_date: datetime | None = None,
    image: str | None = None,
) -> FeedEntry:
    return FeedEntry(
        source=source,
        title=title,
        link=link,
        pub_date=pub_date or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        original_image_url=image,
    )


def copy_json(
    headline: str = "Modular Synths Take Over Berlin",
    description: str = "A new wave of hardware acts is reshaping the club circuit. More soon.",
    caption: str = "Patch cables everywhere. #PhaseLoopRecords via Test Feed",
) -> str:
    return json.dumps({"headline": headline, "description": description, "caption": caption})


def png_bytes(width: int = 1200, height: int = 600, color=(200, 30, 30)) -> bytes:
    """Encode a solid-colour image in memory."""
    output = io.BytesIO()
    Image.new("RGB", (width, height), color).save(output, format="PNG")
    return output.getvalue()



def _png_chunk(chunk_type: bytes, body: bytes) -> bytes:
    return struct.pack(">I", len(body)) + chunk_type + body + struct.pack(">I", zlib.crc32(chunk_type + body))


def broken_png_bytes() -> bytes:
    """
    A PNG that opens but fails mid-decode.

    The pixel data is cut in half and followed by a chunk with a mangled
    type, so Pillow hits the bad chunk only while loading pixels.
    """
    output = io.BytesIO()
    Image.effect_noise((64, 64), 64).save(output, format="PNG")
    data = output.getvalue()

    chunks = []
    pos = 8
    while pos < len(data):
        (length,) = struct.unpack(">I", data[pos:pos + 4])
        chunks.append((data[pos + 4:pos + 8], data[pos + 8:pos + 8 + length]))
        pos += 12 + length

    header = b"".join(_png_chunk(t, body) for t, body in chunks if t not in (b"IDAT", b"IEND"))
    pixels = b"".join(body for t, body in chunks if t == b"IDAT")
    return data[:8] + header + _png_chunk(b"IDAT", pixels[: len(pixels) // 2]) + _png_chunk(b"IEN\x1d", b"")


class FakeResponse:
    """Minimal stand-in for an aiohttp response used as an async context manager."""

    def __init__(self, status: int = 200, body: bytes = b"", headers: dict | None = None):
        self.status = status
        self.reason = "OK" if status == 200 else "Error"
        self.headers = headers or {}
        self.content_length = len(body)
        self._body = body
        self.content = self

    async def read(self, n: int = -1) -> bytes:
        return self._body if n < 0 else self._body[:n]

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientError(f"{self.status}, message='{self.reason}'")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


def fake_get(responses: dict[str, FakeResponse], requested: list[str]):
    """Replacement for aiohttp.ClientSession.get that serves canned responses by URL."""
    def get(self, url, **kwargs):
        requested.append(url)
        return responses[url]
    return get
