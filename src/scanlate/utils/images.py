"""
Image binarization utilities for the OCR pipeline.

Provides:
- Packed ARGB <-> luminance conversion
- Streaming ring-buffer Gaussian convolution (local mean)
- Local-mean thresholding applied in place to a pixel buffer
- Wrapper for OpenCV-style ndarray images
"""

import logging
from typing import List, Optional, Sequence, Union

import numpy as np

from .kernels import Kernel, build_gaussian_kernel

logger = logging.getLogger(__name__)

PixelBuffer = Union[np.ndarray, List[int]]


# ============================================================================
# Constants
# ============================================================================

PADDING_VALUE = 128
MAX_GRAY = 255
ARGB_MASK = 0xFFFFFFFF
OPAQUE_ALPHA = 0xFF000000

BLACK = 0xFF000000
WHITE = 0xFFFFFFFF
RED = 0xFFFF0000
GREEN = 0xFF00FF00
BLUE = 0xFF0000FF


# ============================================================================
# Color Conversion
# ============================================================================

def luminance(argb: int) -> int:
    """
    Convert a packed ARGB color to its luminance.

    Uses the fixed-point weights 299/587/114 with integer division, so the
    result is exact for every input. Alpha is ignored.

    Args:
        argb: Packed 0xAARRGGBB color (signed 32-bit values are accepted)

    Returns:
        Gray value in 0..255
    """
    b = argb & 0xFF
    g = (argb >> 8) & 0xFF
    r = (argb >> 16) & 0xFF
    return (299 * r + 587 * g + 114 * b) // 1000


def gray_to_argb(gray: int) -> int:
    """Pack a gray value into an opaque ARGB color."""
    if not 0 <= gray <= MAX_GRAY:
        raise ValueError(f"Invalid gray value: {gray}")
    return OPAQUE_ALPHA | (gray << 16) | (gray << 8) | gray


def argb_to_gray_array(pixels: Sequence[int]) -> np.ndarray:
    """Vectorized `luminance` over a flat pixel buffer. Returns int64 grays."""
    argb = np.asarray(pixels, dtype=np.int64) & ARGB_MASK
    b = argb & 0xFF
    g = (argb >> 8) & 0xFF
    r = (argb >> 16) & 0xFF
    return (299 * r + 587 * g + 114 * b) // 1000


def gray_to_argb_array(gray: np.ndarray) -> np.ndarray:
    """Vectorized `gray_to_argb`. Returns uint32 packed colors."""
    gray = np.asarray(gray, dtype=np.int64)
    if gray.size and (gray.min() < 0 or gray.max() > MAX_GRAY):
        raise ValueError(
            f"Invalid gray values in range [{gray.min()}, {gray.max()}]"
        )
    packed = OPAQUE_ALPHA | (gray << 16) | (gray << 8) | gray
    return packed.astype(np.uint32)


def pack_argb(image: np.ndarray) -> np.ndarray:
    """
    Pack a BGR uint8 image into a flat, row-major ARGB buffer.

    Args:
        image: Array of shape (height, width, 3) in OpenCV channel order

    Returns:
        uint32 array of length height * width
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected a BGR image, got shape {image.shape}")
    channels = image.astype(np.uint32)
    b = channels[:, :, 0]
    g = channels[:, :, 1]
    r = channels[:, :, 2]
    packed = np.uint32(OPAQUE_ALPHA) | (r << 16) | (g << 8) | b
    return packed.reshape(-1)


def unpack_bgr(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Inverse of `pack_argb`: flat ARGB buffer to a (height, width, 3) BGR image."""
    argb = np.asarray(pixels, dtype=np.int64).reshape(height, width) & ARGB_MASK
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:, :, 0] = argb & 0xFF
    image[:, :, 1] = (argb >> 8) & 0xFF
    image[:, :, 2] = (argb >> 16) & 0xFF
    return image


# ============================================================================
# Streaming Convolution
# ============================================================================

class RingBuffer:
    """
    Fixed-capacity ring of samples with a single write cursor.

    Each slot holds one sample per lane, so all rows (or all columns) of an
    image advance through the same ring together. Lanes never interact.
    """

    def __init__(self, capacity: int, lanes: int):
        self.capacity = capacity
        self.slots = np.zeros((capacity, lanes), dtype=np.int64)
        self.cursor = 0

    def reset(self):
        self.cursor = 0

    def store(self, samples) -> None:
        """Write samples at the cursor without moving it."""
        self.slots[self.cursor] = samples

    def advance(self) -> None:
        self.cursor = 0 if self.cursor == self.capacity - 1 else self.cursor + 1

    def weighted_sum(self, kernel: Kernel) -> np.ndarray:
        """
        Weighted sum of the ring contents, starting at the cursor.

        The first weight meets the sample just stored at the cursor, the
        following weights walk forward through the ring with wrap-around.
        Sums are truncated toward zero and clamped to 0..255.
        """
        accum = np.zeros(self.slots.shape[1], dtype=np.float64)
        off = self.cursor
        for weight in kernel:
            accum += self.slots[off] * weight
            off = 0 if off == self.capacity - 1 else off + 1
        return np.clip(accum.astype(np.int64), 0, MAX_GRAY)


def _filter_lines(lines: np.ndarray, kernel: Kernel, ring: RingBuffer) -> None:
    """
    Convolve every lane of ``lines`` (shape: lanes x length) in place.

    The read cursor runs ``half`` samples ahead of the write cursor, so each
    output overwrites a sample that has already been loaded into the ring.
    """
    length = lines.shape[1]
    half = len(kernel) // 2

    ring.reset()
    for _ in range(half):
        ring.store(PADDING_VALUE)
        ring.advance()

    read = 0
    for _ in range(half):
        ring.store(lines[:, read])
        ring.advance()
        read += 1

    write = 0
    for _ in range(half, length):
        ring.store(lines[:, read])
        lines[:, write] = ring.weighted_sum(kernel)
        ring.advance()
        read += 1
        write += 1

    # Trailing edge
    for _ in range(half):
        ring.store(PADDING_VALUE)
        lines[:, write] = ring.weighted_sum(kernel)
        ring.advance()
        write += 1


def _check_kernel_fits(kernel_size: int, width: int, height: int) -> None:
    half = kernel_size // 2
    if half > width or half > height:
        raise ValueError(
            f"Kernel of size {kernel_size} does not fit a {width}x{height} image"
        )


def apply_gaussian_kernel_in_place(
    gray: np.ndarray,
    width: int,
    height: int,
    kernel: Kernel
) -> None:
    """
    Apply a 1-D kernel separably: over every row, then over every column.

    Args:
        gray: Flat, contiguous int64 array of width * height gray values
        width: Image width
        height: Image height
        kernel: Odd-sized kernel, see `build_gaussian_kernel`

    Raises:
        ValueError: If the kernel is wider or taller than the image, or
            ``gray`` cannot be viewed as a height x width grid
    """
    _check_kernel_fits(len(kernel), width, height)

    grid = gray.reshape(height, width)
    if not np.shares_memory(grid, gray):
        raise ValueError("Gray buffer must be contiguous to filter in place")

    _filter_lines(grid, kernel, RingBuffer(len(kernel), height))
    _filter_lines(grid.T, kernel, RingBuffer(len(kernel), width))


def apply_threshold(gray: np.ndarray, thresholds: np.ndarray, c: int) -> None:
    """
    Threshold gray values in place against a local-mean map.

    Pixels darker than ``threshold - c`` are kept as they are, all others are
    doubled and clamped to 255.
    """
    doubled = np.minimum(gray * 2, MAX_GRAY)
    gray[...] = np.where(gray < thresholds - c, gray, doubled)


# ============================================================================
# Binarization
# ============================================================================

def binarize(
    buffer: PixelBuffer,
    width: int,
    height: int,
    kernel_size: int,
    c: int,
    sigma: Optional[float] = None
) -> None:
    """
    Binarize a packed ARGB pixel buffer in place.

    Converts to luminance, builds a Gaussian-weighted local-mean map with a
    streaming separable convolution (mid-gray padding at the borders),
    thresholds every pixel against its local mean minus ``c`` and writes the
    result back as opaque gray colors.

    Args:
        buffer: Row-major packed colors, numpy array or list of ints
        width: Image width
        height: Image height
        kernel_size: Gaussian kernel size (odd, >= 3)
        c: Offset subtracted from the local mean
        sigma: Gaussian sigma, defaults to (kernel_size - 1) / 6

    Raises:
        ValueError: On an invalid kernel, a buffer whose length is not
            width * height, or a kernel larger than the image. Nothing is
            modified in that case.
    """
    kernel = build_gaussian_kernel(kernel_size, sigma)

    if len(buffer) != width * height:
        raise ValueError(
            f"Buffer holds {len(buffer)} pixels, expected {width}x{height}"
        )
    _check_kernel_fits(kernel_size, width, height)

    gray = argb_to_gray_array(buffer)
    thresholds = gray.copy()
    apply_gaussian_kernel_in_place(thresholds, width, height, kernel)
    apply_threshold(gray, thresholds, c)
    packed = gray_to_argb_array(gray)

    if isinstance(buffer, np.ndarray):
        buffer[...] = packed.astype(buffer.dtype)
    else:
        buffer[:] = packed.tolist()

    logger.debug(
        f"Binarized {width}x{height} buffer (kernel={kernel_size}, c={c})"
    )


def binarize_image(
    image: np.ndarray,
    kernel_size: int = 11,
    c: int = 2,
    sigma: Optional[float] = None
) -> np.ndarray:
    """
    Binarize an OpenCV-style image.

    Args:
        image: Grayscale, BGR or BGRA uint8 image
        kernel_size: Gaussian kernel size (odd, >= 3)
        c: Offset subtracted from the local mean
        sigma: Gaussian sigma, defaults to (kernel_size - 1) / 6

    Returns:
        New BGR image with gray content (all channels equal)
    """
    import cv2

    if image.ndim == 2:
        bgr = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    elif image.ndim == 3 and image.shape[2] == 4:
        bgr = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    elif image.ndim == 3 and image.shape[2] == 3:
        bgr = image
    else:
        raise ValueError(f"Unexpected image shape: {image.shape}")

    height, width = bgr.shape[:2]
    pixels = pack_argb(bgr)
    binarize(pixels, width, height, kernel_size, c, sigma)

    logger.info(f"Binarized image {width}x{height} with kernel size {kernel_size}")
    return unpack_bgr(pixels, width, height)
