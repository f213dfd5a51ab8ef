"""Image transformation for the optimizer pipeline.

This module decodes source bytes, optionally downscales them to a target
width, and re-encodes them as JPEG, PNG or WebP. It is pure CPU work with no
I/O; the pipeline runs it in a worker thread.

Key Features:
    - Format sniffing on decode (whatever Pillow can open)
    - Proportional downscale only (never upscales), Lanczos resampling
    - Output format selection (explicit, or PNG/JPEG chosen by alpha)
    - Quality-controlled lossy encoding (JPEG, WebP); lossless PNG

Dependencies:
    - Pillow (PIL): Required for image processing operations
"""

from __future__ import annotations

import io
import logging

try:
    from PIL import Image
except ImportError as exc:
    msg = "Pillow is required for image processing. Install with: pip install Pillow"
    raise ImportError(msg) from exc

from img_optimizer.domain.exceptions import AppError
from img_optimizer.domain.value_objects import OutputFormat, ProcessedImage

logger = logging.getLogger(__name__)

_FORMAT_ALIASES: dict[str, OutputFormat] = {
    "jpeg": OutputFormat.JPEG,
    "jpg": OutputFormat.JPEG,
    "png": OutputFormat.PNG,
    "webp": OutputFormat.WEBP,
}

_ALPHA_MODES = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})


def has_alpha(img: Image.Image) -> bool:
    """Return True if the decoded image carries an alpha channel or transparency."""
    return img.mode in _ALPHA_MODES or "transparency" in img.info


def resolve_output_format(format: str | None, alpha: bool) -> OutputFormat:
    """Pick the output encoding.

    An explicit ``format`` is matched case-sensitively against ``jpeg``,
    ``jpg``, ``png`` and ``webp``. Without one, sources with alpha become PNG
    and everything else JPEG; WebP is never auto-selected.

    Raises:
        AppError: IMG_004 for any other explicit value.
    """
    if format is None:
        return OutputFormat.PNG if alpha else OutputFormat.JPEG
    try:
        return _FORMAT_ALIASES[format]
    except KeyError:
        raise AppError.invalid_image_format(format) from None


class ImageTransformer:
    """Decode, downscale and encode images with Pillow.

    Stateless; a single instance is shared across requests and worker threads.
    Implements ImageTransformerInterface.
    """

    def process(
        self,
        data: bytes,
        width: int | None,
        quality: int,
        format: str | None,
    ) -> ProcessedImage:
        """Transform source bytes into the requested encoding.

        Processing Steps:
            1. Decode (format sniffed from content) and force a full load
            2. Downscale to ``width`` if it is smaller than the source width,
               keeping aspect ratio (height truncated)
            3. Select output format (see ``resolve_output_format``)
            4. Encode: JPEG as RGB at ``quality``; PNG lossless; WebP as RGBA
               at ``quality``

        Args:
            data: Source image bytes.
            width: Target width, already validated to 1..3840, or None.
            quality: Quality 1..100. Ignored for PNG.
            format: Requested format string, or None to auto-select.

        Returns:
            ProcessedImage with the encoded bytes and final dimensions.

        Raises:
            AppError: IMG_003 if decode or encode fails; IMG_004 for an
                unsupported ``format``.
        """
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
            alpha = has_alpha(img)
            if img.mode not in {"RGB", "RGBA"}:
                img = img.convert("RGBA" if alpha else "RGB")
        except Exception as exc:
            raise AppError.image_processing_failed(f"Failed to decode image: {exc}") from exc

        current_width, current_height = img.size
        if width is not None and width < current_width:
            new_height = max(int(width * current_height / current_width), 1)
            img = img.resize((width, new_height), Image.Resampling.LANCZOS)
            logger.debug(
                "Resized image from %dx%d to %dx%d",
                current_width,
                current_height,
                width,
                new_height,
            )

        output_format = resolve_output_format(format, alpha)

        output = io.BytesIO()
        try:
            match output_format:
                case OutputFormat.JPEG:
                    img.convert("RGB").save(output, format="JPEG", quality=quality)
                case OutputFormat.PNG:
                    img.save(output, format="PNG")
                case OutputFormat.WEBP:
                    img.convert("RGBA").save(output, format="WEBP", quality=float(quality))
        except Exception as exc:
            raise AppError.image_processing_failed(f"Failed to encode image: {exc}") from exc

        encoded = output.getvalue()
        out_width, out_height = img.size
        logger.debug(
            "Processed image: %dx%d %s, %d -> %d bytes",
            out_width,
            out_height,
            output_format,
            len(data),
            len(encoded),
        )
        return ProcessedImage(
            data=encoded, format=output_format, width=out_width, height=out_height
        )


__all__ = ["ImageTransformer", "has_alpha", "resolve_output_format"]
