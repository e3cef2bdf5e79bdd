"""
Recognized text fragments for document reconstruction.

Provides:
- BoundingBox geometry
- Fragment, the atomic unit emitted by a text recognizer
- Adapters from recognizer-shaped output (lines of elements, Tesseract
  ``image_to_data`` dictionaries) to an ordered fragment sequence
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

HYPHEN = "-"


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in image coordinates."""
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def is_empty(self) -> bool:
        return self.x1 >= self.x2 or self.y1 >= self.y2

    def contains(self, x: int, y: int) -> bool:
        """Half-open containment: left/top edges are inside, right/bottom are not."""
        return (
            not self.is_empty and
            self.x1 <= x < self.x2 and
            self.y1 <= y < self.y2
        )

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(
            min(self.x1, other.x1),
            min(self.y1, other.y1),
            max(self.x2, other.x2),
            max(self.y2, other.y2)
        )

    def to_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x1, self.y1, self.x2, self.y2)

    @classmethod
    def from_xywh(cls, x: int, y: int, w: int, h: int) -> 'BoundingBox':
        return cls(x, y, x + w, y + h)


@dataclass(frozen=True)
class Fragment:
    """
    One recognized text element.

    Fragments arrive in reading order (block, line, element). ``line_text``
    is the full text of the line the fragment belongs to; it is what decides
    whether a line-final fragment continues on the next line.
    """
    text: str
    line_id: int = 0
    position_in_line: int = 0
    max_position_in_line: int = 0
    bbox: Optional[BoundingBox] = None
    line_text: str = ""

    @property
    def is_line_end(self) -> bool:
        return self.position_in_line == self.max_position_in_line

    @property
    def ends_with_hyphenation(self) -> bool:
        """True if the word continues in the next fragment."""
        return self.text.endswith(HYPHEN) or (
            self.is_line_end and self.line_text.endswith(HYPHEN)
        )

    @property
    def text_without_hyphenation(self) -> str:
        """Text with its own trailing hyphen removed, stripped of whitespace."""
        text = self.text[:-1] if self.text.endswith(HYPHEN) else self.text
        return text.strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "line_id": self.line_id,
            "position_in_line": self.position_in_line,
            "max_position_in_line": self.max_position_in_line,
            "bbox": self.bbox.to_tuple() if self.bbox else None,
            "line_text": self.line_text
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Fragment':
        bbox = data.get("bbox")
        return cls(
            text=data["text"],
            line_id=int(data.get("line_id", 0)),
            position_in_line=int(data.get("position_in_line", 0)),
            max_position_in_line=int(data.get("max_position_in_line", 0)),
            bbox=BoundingBox(*bbox) if bbox else None,
            line_text=data.get("line_text", "")
        )


# ============================================================================
# Recognizer Output Adapters
# ============================================================================

LineElement = Union[str, Tuple[str, Optional[BoundingBox]]]


def fragments_from_lines(lines: Iterable[Sequence[LineElement]]) -> List[Fragment]:
    """
    Build fragments from lines of recognized elements.

    Args:
        lines: Lines in reading order; each line is a sequence of element
            texts or ``(text, bbox)`` pairs

    Returns:
        Flat fragment list with line ids and positions filled in
    """
    fragments = []
    for line_id, line in enumerate(lines):
        elements = [
            (el, None) if isinstance(el, str) else (el[0], el[1])
            for el in line
        ]
        line_text = " ".join(text for text, _ in elements)
        max_pos = len(elements) - 1

        for pos, (text, bbox) in enumerate(elements):
            fragments.append(Fragment(
                text=text,
                line_id=line_id,
                position_in_line=pos,
                max_position_in_line=max_pos,
                bbox=bbox,
                line_text=line_text
            ))

    return fragments


def fragments_from_ocr_data(data: Dict[str, List[Any]]) -> List[Fragment]:
    """
    Convert a Tesseract ``image_to_data`` dictionary into fragments.

    Rows are grouped into lines by (block_num, par_num, line_num) in the order
    the lines first appear; rows with empty text or a negative confidence
    (layout-only rows) are skipped.

    Args:
        data: Dictionary of parallel lists as returned with
            ``output_type=Output.DICT``

    Returns:
        Fragments in reading order

    Raises:
        ValueError: If the 'text' or 'line_num' column is missing
    """
    missing = [k for k in ('text', 'line_num') if k not in data]
    if missing:
        raise ValueError(f"OCR data is missing columns: {', '.join(missing)}")

    lines: Dict[Tuple[int, int, int], List[Tuple[str, Optional[BoundingBox]]]] = {}
    count = len(data['text'])
    blocks = data.get('block_num') or [0] * count
    paragraphs = data.get('par_num') or [0] * count

    for i in range(count):
        text = str(data['text'][i]).strip()
        if not text:
            continue

        try:
            conf = float(data['conf'][i])
        except (KeyError, ValueError):
            logger.warning(f"Skipping OCR row {i} with unreadable confidence")
            continue
        if conf < 0:
            continue

        key = (
            int(blocks[i]),
            int(paragraphs[i]),
            int(data['line_num'][i])
        )

        bbox = None
        if all(k in data for k in ('left', 'top', 'width', 'height')):
            bbox = BoundingBox.from_xywh(
                int(data['left'][i]),
                int(data['top'][i]),
                int(data['width'][i]),
                int(data['height'][i])
            )

        lines.setdefault(key, []).append((text, bbox))

    logger.debug(f"Parsed {len(lines)} lines from OCR data")
    return fragments_from_lines(lines.values())
