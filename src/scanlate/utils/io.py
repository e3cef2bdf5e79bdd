"""
I/O utilities for the scanlate pipeline.

Handles:
- Image loading and saving (OpenCV)
- JSON serialization
- Loading recognized fragments from JSON in several shapes
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, List, Union

import numpy as np

from .ocr_text import BoundingBox, Fragment, fragments_from_lines, fragments_from_ocr_data

logger = logging.getLogger(__name__)


# ============================================================================
# Image Loading
# ============================================================================

def load_image(
    image_path: Union[str, Path],
    grayscale: bool = False
) -> np.ndarray:
    """
    Load an image from file.

    Args:
        image_path: Path to the image file
        grayscale: If True, load as grayscale

    Returns:
        Numpy array representing the image (BGR format if color)

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If image cannot be decoded
    """
    import cv2

    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {image_path}")

    flag = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    img = cv2.imread(str(image_path), flag)

    if img is None:
        raise ValueError(f"Could not decode image: {image_path}")

    logger.debug(f"Loaded image: {image_path}, shape: {img.shape}")
    return img


def save_image(
    image: np.ndarray,
    output_path: Union[str, Path],
    quality: int = 95
) -> Path:
    """
    Save an image to file.

    Args:
        image: Numpy array representing the image
        output_path: Path to save the image
        quality: JPEG quality (1-100)

    Returns:
        Path to the saved image
    """
    import cv2

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.suffix.lower() in ('.jpg', '.jpeg'):
        ok = cv2.imwrite(str(output_path), image, [cv2.IMWRITE_JPEG_QUALITY, quality])
    else:
        ok = cv2.imwrite(str(output_path), image)

    if not ok:
        raise ValueError(f"Could not encode image: {output_path}")

    logger.debug(f"Saved image: {output_path}")
    return output_path


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy values, dataclasses and page objects."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if hasattr(obj, 'to_dict'):
            return obj.to_dict()
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, Page, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def load_json(json_path: Union[str, Path]) -> Any:
    """
    Load data from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    json_path = Path(json_path)
    if not json_path.exists():
        raise FileNotFoundError(f"JSON file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        return json.load(f)


# ============================================================================
# Fragment Loading
# ============================================================================

def parse_fragments(data: Any) -> List[Fragment]:
    """
    Interpret decoded JSON as a recognized fragment sequence.

    Accepted shapes:
    - a Tesseract ``image_to_data`` dictionary (has "text" and "line_num")
    - a list of fragment objects (see `Fragment.to_dict`)
    - a list of lines, each a list of element texts or [text, bbox] pairs

    Raises:
        ValueError: If the data matches none of these shapes
    """
    if isinstance(data, dict):
        if 'text' in data and 'line_num' in data:
            return fragments_from_ocr_data(data)
        raise ValueError("Fragment dictionary must be Tesseract data with 'text' and 'line_num'")

    if not isinstance(data, list):
        raise ValueError(f"Unsupported fragment data: {type(data).__name__}")

    if all(isinstance(item, dict) for item in data):
        return [Fragment.from_dict(item) for item in data]

    if all(isinstance(item, list) for item in data):
        lines = []
        for line in data:
            elements = []
            for el in line:
                if isinstance(el, str):
                    elements.append(el)
                else:
                    text, bbox = el[0], el[1] if len(el) > 1 else None
                    elements.append((text, _bbox_from_json(bbox)))
            lines.append(elements)
        return fragments_from_lines(lines)

    raise ValueError("Fragment list must contain only objects or only lines")


def _bbox_from_json(bbox):
    return BoundingBox(*bbox) if bbox else None


def load_fragments(json_path: Union[str, Path]) -> List[Fragment]:
    """Load recognized fragments from a JSON file."""
    fragments = parse_fragments(load_json(json_path))
    logger.info(f"Loaded {len(fragments)} fragments from {json_path}")
    return fragments
