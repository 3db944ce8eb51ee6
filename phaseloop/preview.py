"""
Preview renderer - composite the caption band onto a chosen image.

Downloads the source image, crops it to a square canvas, draws the layout
from overlay.compute_overlay with Pillow, and writes a PNG into the public
directory. Any acquisition failure resolves to the fallback image path.
"""

import asyncio
import io
import logging
import struct
import uuid
from pathlib import Path
from urllib.parse import urljoin

import aiohttp
from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from .exceptions import ImageAcquisitionError
from .overlay import OverlaySpec, compute_overlay
from .url_validator import SSRFError, validate_url

logger = logging.getLogger(__name__)

CANVAS_SIZE = 800
MAX_IMAGE_BYTES = 15 * 1024 * 1024
MAX_REDIRECTS = 5
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

# Pillow surfaces corrupt files through several exception types besides OSError
DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    SyntaxError,
    ValueError,
    EOFError,
    IndexError,
    struct.error,
)

HEADLINE_FONTS = ("DejaVuSans-Bold.ttf", "Arial Black.ttf", "Arial Bold.ttf", "arialbd.ttf")
BODY_FONTS = ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf")

HEADLINE_COLOR = (255, 255, 255, 255)
BODY_COLOR = (221, 221, 221, 255)


class PreviewRenderer:
    """Renders preview PNGs for the editor."""

    def __init__(
        self,
        public_dir: Path,
        fallback_path: str = "/fallback.png",
        timeout: int = 20,
        canvas_size: int = CANVAS_SIZE,
        resolve_dns: bool = True,
    ):
        self.public_dir = public_dir
        self.fallback_path = fallback_path
        self.timeout = timeout
        self.canvas_size = canvas_size
        self.resolve_dns = resolve_dns
        self.user_agent = "PhaseLoopCurator/1.0 (+https://phaseloop.example)"

    async def render(self, image_url: str, headline: str, description: str) -> str:
        """
        Render a preview and return its public path.

        Returns the fallback path when the image cannot be fetched, decoded
        or written.
        """
        logger.info(f"Starting preview for: {image_url}")
        try:
            data = await self.download(image_url)
            png = await asyncio.to_thread(self.compose, data, headline, description)
            path = await asyncio.to_thread(self._write, png)
        except ImageAcquisitionError as e:
            logger.warning(f"Preview failed for {image_url}: {e}")
            return self.fallback_path
        except OSError as e:
            logger.error(f"Could not save preview for {image_url}: {e}")
            return self.fallback_path
        except Exception as e:
            logger.exception(f"Unexpected preview error for {image_url}: {e}")
            return self.fallback_path

        logger.info(f"Preview saved: {path}")
        return path

    async def download(self, image_url: str) -> bytes:
        """
        Fetch image bytes.

        Redirects are followed by hand so every hop is checked against the
        outbound URL rules.

        Raises:
            ImageAcquisitionError: Blocked URL, network error, bad status or oversized body
        """
        url = self._check_url(image_url)

        try:
            async with aiohttp.ClientSession(headers={"User-Agent": self.user_agent}) as session:
                for _ in range(MAX_REDIRECTS + 1):
                    async with session.get(
                        url,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                        allow_redirects=False,
                    ) as resp:
                        if resp.status in REDIRECT_STATUSES:
                            location = resp.headers.get("Location")
                            if not location:
                                raise ImageAcquisitionError(f"Redirect without Location: HTTP {resp.status}")
                            url = self._check_url(urljoin(url, location))
                            continue
                        if resp.status != 200:
                            raise ImageAcquisitionError(f"Fetch failed: HTTP {resp.status} {resp.reason or ''}".strip())
                        if resp.content_length and resp.content_length > MAX_IMAGE_BYTES:
                            raise ImageAcquisitionError(f"Image too large ({resp.content_length} bytes)")
                        data = await resp.content.read(MAX_IMAGE_BYTES + 1)
                        break
                else:
                    raise ImageAcquisitionError(f"Too many redirects (>{MAX_REDIRECTS})")
        except asyncio.TimeoutError:
            raise ImageAcquisitionError(f"Fetch timed out after {self.timeout}s")
        except aiohttp.ClientError as e:
            raise ImageAcquisitionError(f"Fetch failed: {e}") from e

        if len(data) > MAX_IMAGE_BYTES:
            raise ImageAcquisitionError("Image too large")
        if not data:
            raise ImageAcquisitionError("Empty image body")
        return data

    def _check_url(self, url: str) -> str:
        try:
            return validate_url(url, resolve_dns=self.resolve_dns)
        except SSRFError as e:
            raise ImageAcquisitionError(str(e)) from e

    def compose(self, data: bytes, headline: str, description: str) -> bytes:
        """
        Crop the image to the canvas and draw the caption band.

        Raises:
            ImageAcquisitionError: If the bytes are not a decodable image
        """
        try:
            with Image.open(io.BytesIO(data)) as source:
                source.load()
                if not source.width or not source.height:
                    raise ImageAcquisitionError("Image has no dimensions")
                canvas = ImageOps.fit(
                    source.convert("RGB"),
                    (self.canvas_size, self.canvas_size),
                    method=Image.Resampling.LANCZOS,
                ).convert("RGBA")
        except DECODE_ERRORS as e:
            raise ImageAcquisitionError(f"Cannot decode image: {e}") from e
        except OSError as e:
            raise ImageAcquisitionError(f"Cannot read image: {e}") from e

        layout = compute_overlay(headline, description, canvas.width, canvas.height)
        canvas = Image.alpha_composite(canvas, self._band_layer(layout))

        output = io.BytesIO()
        canvas.convert("RGB").save(output, format="PNG")
        return output.getvalue()

    def _band_layer(self, layout: OverlaySpec) -> Image.Image:
        layer = Image.new("RGBA", (layout.width, layout.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        draw.rectangle(
            (0, layout.band_top, layout.width, layout.band_top + layout.band_height),
            fill=(0, 0, 0, round(255 * layout.opacity)),
        )
        for row in layout.rows:
            font = _load_font(HEADLINE_FONTS if row.is_headline else BODY_FONTS, row.font_size)
            draw.text(
                (layout.padding, layout.band_top + row.y),
                row.text,
                font=font,
                fill=HEADLINE_COLOR if row.is_headline else BODY_COLOR,
            )
        return layer

    def _write(self, png: bytes) -> str:
        self.public_dir.mkdir(parents=True, exist_ok=True)
        filename = f"preview_{uuid.uuid4().hex}.png"
        (self.public_dir / filename).write_bytes(png)
        return f"/{filename}"


def _load_font(candidates: tuple[str, ...], size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    """First installed TrueType font from candidates, else Pillow's built-in font."""
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)
