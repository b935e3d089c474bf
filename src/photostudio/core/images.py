"""Image payload helpers built on Pillow.

Image payloads travel through the system as ``data:`` URLs.  The retouch
editor additionally sends a painted mask: white strokes on a black canvas
mark the regions the service may alter.  Painted masks arrive with
anti-aliased edges and at the preview canvas size, so
:func:`normalize_mask` turns them into a strict black/white PNG at the
source image size before they are sent.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Luminance at or above this value counts as "highlighted" in a mask.
MASK_THRESHOLD = 128


def decode_data_url(data_url: str) -> bytes:
    """Return the raw bytes of a base64 ``data:`` URL.

    Bare base64 strings (no ``data:`` header) are accepted as well.

    Raises:
        ValueError: If the payload is not valid base64.
    """
    payload = data_url
    if data_url.startswith("data:"):
        header, _, payload = data_url.partition(",")
        if ";base64" not in header:
            raise ValueError("Only base64 data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image payload: {e}") from e


def encode_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """Wrap raw bytes in a base64 ``data:`` URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def load_image(data_url: str) -> Image.Image:
    """Decode a ``data:`` URL into a loaded PIL image.

    Raises:
        ValueError: If the payload does not contain a readable image.
    """
    raw = decode_data_url(data_url)
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Payload is not a readable image: {e}") from e
    return image


def image_to_data_url(image: Image.Image, format: str = "PNG") -> str:
    """Encode a PIL image as a ``data:`` URL."""
    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return encode_data_url(buffer.getvalue(), f"image/{format.lower()}")


def normalize_mask(mask_data_url: str, size: tuple[int, int] | None = None) -> str:
    """Convert a painted mask into a strict black/white PNG.

    Light pixels (luminance >= ``MASK_THRESHOLD``) become white, everything
    else black.  Transparent pixels count as black.

    Args:
        mask_data_url: The painted mask as a ``data:`` URL.
        size: Optional ``(width, height)`` to resize the mask to, normally
            the size of the source image.  Nearest-neighbour resampling keeps
            the result binary.

    Returns:
        The normalised mask as a PNG ``data:`` URL.

    Raises:
        ValueError: If the payload is not an image.
    """
    mask = load_image(mask_data_url)

    if mask.mode in ("RGBA", "LA") or (mask.mode == "P" and "transparency" in mask.info):
        rgba = mask.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
        mask = Image.alpha_composite(background, rgba)

    grey = mask.convert("L")
    binary = grey.point(lambda value: 255 if value >= MASK_THRESHOLD else 0)

    if size is not None and binary.size != size:
        logger.debug("Resizing mask from %s to %s", binary.size, size)
        binary = binary.resize(size, Image.Resampling.NEAREST)

    return image_to_data_url(binary)


def image_size(data_url: str) -> tuple[int, int]:
    """Return ``(width, height)`` of an image payload."""
    return load_image(data_url).size
