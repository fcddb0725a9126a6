"""Transform engine: downscale and re-encode uploaded images with Pillow.

All functions are pure: identical bytes and parameters give identical
output. Failures are never skipped silently; they surface as
`ImageOptimizationError` (or a subclass) wrapping the codec message,
because by the time these run the caller has already validated the image.
"""

import io
from typing import Any

from aws_lambda_powertools import Logger
from PIL import Image, ImageOps

from core.models.errors import (
    ImageOptimizationError,
    ImageVariantsError,
    ThumbnailGenerationError,
)
from core.models.image import (
    ImageVariant,
    ImageVariants,
    OutputFormat,
    ThumbnailVariant,
    TransformProfile,
)
from core.utils.constants import (
    DEFAULT_EFFORT,
    DEFAULT_MAX_WIDTH,
    DEFAULT_QUALITY,
    MAX_WIDTH_BY_IMAGE_TYPE,
    PNG_COMPRESS_LEVEL,
    THUMBNAIL_QUALITY,
    THUMBNAIL_SIZE,
    WEBP_ALPHA_QUALITY,
)

logger = Logger(UTC=True)

RESAMPLING = Image.Resampling.LANCZOS

_PILLOW_FORMAT: dict[OutputFormat, str] = {
    OutputFormat.WEBP: "WEBP",
    OutputFormat.JPEG: "JPEG",
    OutputFormat.PNG: "PNG",
}

_SUPPORTED_MODES: dict[OutputFormat, tuple[str, ...]] = {
    OutputFormat.WEBP: ("RGB", "RGBA"),
    OutputFormat.JPEG: ("RGB", "L"),
    OutputFormat.PNG: ("1", "L", "LA", "P", "RGB", "RGBA", "I"),
}


# 16-bit PNGs decode to these; values span 0..65535.
_HIGH_BIT_DEPTH_MODES = ("I", "I;16", "I;16L", "I;16B", "I;16N")


def _to_8bit(image: Image.Image) -> Image.Image:
    return image.convert("I").point(lambda value: value * (1 / 256)).convert("L")


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )


def _prepare_mode(image: Image.Image, output_format: OutputFormat) -> Image.Image:
    """Convert to a pixel mode the target encoder accepts."""
    if image.mode in _SUPPORTED_MODES[output_format]:
        return image

    if image.mode in _HIGH_BIT_DEPTH_MODES:
        image = _to_8bit(image)
        if image.mode in _SUPPORTED_MODES[output_format]:
            return image

    if output_format is not OutputFormat.JPEG and _has_alpha(image):
        return image.convert("RGBA")

    return image.convert("RGB")


def _save_options(output_format: OutputFormat, quality: int, effort: int) -> dict[str, Any]:
    if output_format is OutputFormat.JPEG:
        return {"quality": quality, "progressive": True, "optimize": True}

    if output_format is OutputFormat.PNG:
        return {"compress_level": PNG_COMPRESS_LEVEL}

    return {
        "quality": quality,
        "method": effort,
        "lossless": False,
        "alpha_quality": WEBP_ALPHA_QUALITY,
    }


def _encode(
    image: Image.Image,
    output_format: OutputFormat,
    *,
    quality: int,
    effort: int,
) -> bytes:
    buffer = io.BytesIO()
    prepared = _prepare_mode(image, output_format)
    prepared.save(
        buffer,
        format=_PILLOW_FORMAT[output_format],
        **_save_options(output_format, quality, effort),
    )
    return buffer.getvalue()


def _scaled_size(width: int, height: int, max_width: int) -> tuple[int, int]:
    """Fit inside max_width, never enlarge, keep aspect ratio."""
    if width <= max_width:
        return width, height

    scaled_height = max(1, round(height * max_width / width))
    return max_width, scaled_height


def compression_ratio(original_size: int, optimized_size: int) -> float:
    """Percent saved by re-encoding, rounded to 2 places. Negative when the output grew."""
    return round((1 - optimized_size / original_size) * 100, 2)


def optimize_image(
    data: bytes,
    *,
    max_width: int = DEFAULT_MAX_WIDTH,
    output_format: str | OutputFormat = OutputFormat.WEBP,
    quality: int = DEFAULT_QUALITY,
    effort: int = DEFAULT_EFFORT,
) -> ImageVariant:
    """Downscale (if wider than `max_width`) and re-encode an image.

    Args:
        data: Source image bytes
        max_width: Widest allowed output; narrower images keep their size
        output_format: webp (default), jpeg/jpg or png; anything else is WebP
        quality: Encoder quality for lossy formats
        effort: WebP compression effort, 0 (fast) to 6 (smallest)

    Returns:
        ImageVariant with the encoded bytes and size report

    Raises:
        ImageOptimizationError: If the bytes cannot be decoded or encoded
    """
    target = OutputFormat.parse(output_format)

    try:
        with Image.open(io.BytesIO(data)) as source:
            source.load()
            source_width, source_height = source.size
            width, height = _scaled_size(source.width, source.height, max_width)
            image = _prepare_mode(source, target)

            if (width, height) != image.size:
                image = image.resize((width, height), RESAMPLING)
            elif image is source:
                image = source.copy()

        optimized = _encode(image, target, quality=quality, effort=effort)

    except Exception as exc:
        logger.exception("Error optimizing image", extra={"size": len(data)})
        raise ImageOptimizationError(
            message=f"Image optimization failed: {exc}",
            details={"format": target.value, "max_width": max_width},
        ) from exc

    variant = ImageVariant(
        data=optimized,
        original_size=len(data),
        optimized_size=len(optimized),
        compression_ratio=compression_ratio(len(data), len(optimized)),
        width=width,
        height=height,
        format=target,
        source_width=source_width,
        source_height=source_height,
    )

    logger.debug(
        "Image optimized",
        extra={
            "original_size": variant.original_size,
            "optimized_size": variant.optimized_size,
            "compression_ratio": variant.compression_ratio,
            "width": width,
            "height": height,
            "format": target.value,
        },
    )
    return variant


def optimize_for_profile(data: bytes, profile: TransformProfile) -> ImageVariant:
    return optimize_image(
        data,
        max_width=profile.max_width,
        output_format=profile.output_format,
        quality=profile.quality,
        effort=profile.effort,
    )


def generate_thumbnail(data: bytes, size: int = THUMBNAIL_SIZE) -> bytes:
    """Centered cover-fit crop to exactly `size` x `size`, encoded as WebP.

    Raises:
        ThumbnailGenerationError: If the image cannot be processed
    """
    try:
        if size < 1:
            raise ValueError(f"thumbnail size must be positive, got {size}")

        with Image.open(io.BytesIO(data)) as source:
            source.load()
            thumbnail = ImageOps.fit(
                _prepare_mode(source, OutputFormat.WEBP),
                (size, size),
                method=RESAMPLING,
                centering=(0.5, 0.5),
            )

        return _encode(
            thumbnail,
            OutputFormat.WEBP,
            quality=THUMBNAIL_QUALITY,
            effort=DEFAULT_EFFORT,
        )

    except Exception as exc:
        logger.exception("Error generating thumbnail", extra={"size": size})
        raise ThumbnailGenerationError(
            message=f"Thumbnail generation failed: {exc}",
            details={"size": size},
        ) from exc


def create_image_variants(data: bytes, image_type: str = "animal") -> ImageVariants:
    """Main WebP rendition sized for `image_type` plus a square thumbnail."""
    max_width = MAX_WIDTH_BY_IMAGE_TYPE.get(image_type, DEFAULT_MAX_WIDTH)
    thumbnail_size = MAX_WIDTH_BY_IMAGE_TYPE["thumbnail"]

    try:
        main = optimize_image(data, max_width=max_width, output_format=OutputFormat.WEBP)
        thumbnail = generate_thumbnail(data, thumbnail_size)
    except ImageOptimizationError as exc:
        raise ImageVariantsError(
            message=f"Failed to create image variants: {exc.message}",
            details={"image_type": image_type},
        ) from exc

    return ImageVariants(
        main=main,
        thumbnail=ThumbnailVariant(
            data=thumbnail,
            size=len(thumbnail),
            width=thumbnail_size,
        ),
        original_size=len(data),
        compression_ratio=main.compression_ratio,
    )
