"""
Compress-to-budget search for generated product photos.

The search walks a fixed schedule over (bounding box, JPEG quality):

- while quality > 20: quality -= 10
- else, while box > 200px: box -= 50 and quality resets to 50
- else: quality -= 10 (reaches the exhausted state quality <= 10, box <= 200)

It stops as soon as the encoded image fits the byte budget, or when both knobs
are exhausted, in which case the last encoding is accepted as best effort.
Starting from (600px, q80) the schedule has at most 39 steps.
"""
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Iterator, Optional

from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_BUDGET_BYTES = 50 * 1024
INITIAL_SIZE = 600
INITIAL_QUALITY = 80
MIN_SIZE = 200
MIN_QUALITY = 10
SIZE_STEP = 50
QUALITY_STEP = 10
RESIZE_BELOW_QUALITY = 20  # Quality at or under which the box shrinks instead
RESET_QUALITY = 50


@dataclass(frozen=True)
class CompressionSettings:
    size: int = INITIAL_SIZE
    quality: int = INITIAL_QUALITY

    @property
    def is_exhausted(self) -> bool:
        return self.quality <= MIN_QUALITY and self.size <= MIN_SIZE

    def next(self) -> "CompressionSettings":
        """Next, more aggressive setting. Only valid when not exhausted."""
        if self.quality > RESIZE_BELOW_QUALITY:
            return CompressionSettings(size=self.size, quality=self.quality - QUALITY_STEP)
        if self.size > MIN_SIZE:
            return CompressionSettings(size=max(self.size - SIZE_STEP, MIN_SIZE), quality=RESET_QUALITY)
        return CompressionSettings(size=self.size, quality=max(self.quality - QUALITY_STEP, MIN_QUALITY))


def compression_schedule(start: CompressionSettings = CompressionSettings()) -> Iterator[CompressionSettings]:
    """Yields `start` and every following setting up to the exhausted state."""
    current = start
    yield current
    while not current.is_exhausted:
        current = current.next()
        yield current


@dataclass(frozen=True)
class CompressedImage:
    data: bytes
    settings: CompressionSettings
    attempts: int


Encoder = Callable[[CompressionSettings], bytes]


def jpeg_encoder(image_bytes: bytes) -> Encoder:
    """
    Decodes the source once and returns an encoder producing a JPEG that fits
    a `size` x `size` box (aspect ratio kept, never upscaled).

    Raises:
        PIL.UnidentifiedImageError: If the bytes are not a readable image
    """
    with Image.open(BytesIO(image_bytes)) as opened:
        source = opened.convert("RGB")

    def encode(settings: CompressionSettings) -> bytes:
        image = source.copy()
        image.thumbnail((settings.size, settings.size), Image.Resampling.LANCZOS)
        buffer = BytesIO()
        image.save(buffer, format="JPEG", quality=settings.quality)
        return buffer.getvalue()

    return encode


def compress_to_budget(
    image_bytes: bytes,
    budget_bytes: int = DEFAULT_BUDGET_BYTES,
    start: CompressionSettings = CompressionSettings(),
    encoder: Optional[Encoder] = None,
) -> CompressedImage:
    """
    Re-encodes `image_bytes` along the compression schedule until the result
    is at most `budget_bytes`. Never fails on budget: when the schedule is
    exhausted the last encoding is returned.
    """
    encode = encoder or jpeg_encoder(image_bytes)
    logger.info(f"Original image size: {len(image_bytes) / 1024:.2f} KB")

    data = b""
    settings = start
    attempts = 0
    for settings in compression_schedule(start):
        data = encode(settings)
        attempts += 1
        logger.debug(f"Compression attempt {attempts}: {len(data) / 1024:.2f} KB at {settings.size}px, q={settings.quality}")
        if len(data) <= budget_bytes:
            break
    else:
        logger.warning(
            f"Compression schedule exhausted at {settings.size}px, q={settings.quality}: "
            f"{len(data) / 1024:.2f} KB exceeds budget of {budget_bytes / 1024:.0f} KB"
        )

    logger.info(f"Final image size: {len(data) / 1024:.2f} KB ({settings.size}px, q={settings.quality})")
    return CompressedImage(data=data, settings=settings, attempts=attempts)
