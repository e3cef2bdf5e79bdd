"""
Convolution kernels for the binarization filter.

Provides:
- Normalized 1-D Gaussian kernel construction
"""

import logging
import math
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


Kernel = Tuple[float, ...]


def default_sigma(size: int) -> float:
    """Sigma that fits three standard deviations on each side of the kernel."""
    return (size - 1) / 6.0


def validate_kernel_size(size: int) -> None:
    """
    Check that a kernel size can be used by the filter.

    Raises:
        ValueError: If size is smaller than 3 or even
    """
    if size < 3:
        raise ValueError(f"Kernel size must be at least 3, got {size}")
    if size % 2 != 1:
        raise ValueError(f"Kernel size must be odd, got {size}")


def build_gaussian_kernel(size: int, sigma: Optional[float] = None) -> Kernel:
    """
    Build a normalized 1-D Gaussian kernel.

    Weights are ``exp(-x^2 / (2 * sigma^2))`` for offsets ``x`` running from
    ``-size // 2`` to ``size // 2``, scaled so that they sum to 1.

    Args:
        size: Number of taps (odd, >= 3)
        sigma: Standard deviation, defaults to (size - 1) / 6

    Returns:
        Tuple of ``size`` symmetric non-negative weights

    Raises:
        ValueError: If size is even or smaller than 3, or sigma is not positive
    """
    validate_kernel_size(size)
    if sigma is None:
        sigma = default_sigma(size)
    if sigma <= 0:
        raise ValueError(f"Sigma must be positive, got {sigma}")

    two_sigma2 = 2.0 * sigma * sigma
    half = size // 2

    weights = [math.exp(-(idx - half) * (idx - half) / two_sigma2) for idx in range(size)]

    # Summed in index order, not pairwise
    total = 0.0
    for w in weights:
        total += w
    scale = 1.0 / total

    kernel = tuple(w * scale for w in weights)
    logger.debug(f"Built Gaussian kernel: size={size}, sigma={sigma:.3f}")
    return kernel
