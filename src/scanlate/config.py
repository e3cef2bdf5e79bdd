"""
Configuration and constants for the scanlate pipeline.

This module provides:
- Binarization parameters (kernel size, sigma, threshold offset)
- Text assembly parameters (sentence-terminal punctuation)
- Environment variable overrides
"""

import os
from dataclasses import dataclass, field
from typing import Optional


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class BinarizationConfig:
    """Local-threshold binarization configuration."""
    kernel_size: int = 11  # odd, >= 3
    sigma: Optional[float] = None  # None = (kernel_size - 1) / 6
    c: int = 2  # offset subtracted from the local mean


@dataclass
class AssemblyConfig:
    """Word and sentence reconstruction configuration."""
    terminal_punctuation: str = ".!?…"


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    binarization: BinarizationConfig = field(default_factory=BinarizationConfig)
    assembly: AssemblyConfig = field(default_factory=AssemblyConfig)

    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def _env_number(name: str, cast):
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {value!r}")


def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    kernel_size = _env_number("SCANLATE_KERNEL_SIZE", int)
    if kernel_size is not None:
        config.binarization.kernel_size = kernel_size

    sigma = _env_number("SCANLATE_SIGMA", float)
    if sigma is not None:
        config.binarization.sigma = sigma

    c = _env_number("SCANLATE_THRESHOLD_C", int)
    if c is not None:
        config.binarization.c = c

    if os.environ.get("SCANLATE_DEBUG", "").lower() == "true":
        config.debug_mode = True

    return config
