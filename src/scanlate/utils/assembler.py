"""
Text reconstruction for recognized pages.

Provides:
- Page data model (Page, Sentence, Word)
- Hyphenation-aware word assembly from recognized fragments
- Sentence grouping on terminal punctuation
- Point hit-testing for renderers
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .ocr_text import BoundingBox, Fragment

logger = logging.getLogger(__name__)

TERMINAL_PUNCTUATION = ".!?…"


def split_punctuation(text: str) -> Tuple[str, Optional[str]]:
    """
    Split text into a stem and its trailing punctuation.

    Every trailing character that is neither a letter nor a digit belongs to
    the punctuation. An empty suffix is returned as ``None``.

    Example: "world!)" -> ("world", "!)")
    """
    end = len(text)
    while end > 0 and not text[end - 1].isalnum():
        end -= 1
    return text[:end], (text[end:] or None)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Word:
    """A reconstructed word, possibly merged from several fragments."""
    stem: str
    punctuation: Optional[str] = None
    bounding_boxes: Tuple[BoundingBox, ...] = ()

    @classmethod
    def from_text(cls, text: str, boxes: Iterable[BoundingBox] = ()) -> 'Word':
        stem, punctuation = split_punctuation(text)
        return cls(stem=stem, punctuation=punctuation, bounding_boxes=tuple(boxes))

    @property
    def text(self) -> str:
        return self.stem + (self.punctuation or "")

    @property
    def bbox(self) -> Optional[BoundingBox]:
        """Union of all fragment boxes, or None if no fragment had one."""
        if not self.bounding_boxes:
            return None
        merged = self.bounding_boxes[0]
        for box in self.bounding_boxes[1:]:
            merged = merged.union(box)
        return merged

    def contains(self, x: int, y: int) -> bool:
        return any(box.contains(x, y) for box in self.bounding_boxes)

    def ends_sentence(self, terminal_punctuation: str = TERMINAL_PUNCTUATION) -> bool:
        return self.punctuation is not None and any(
            ch in terminal_punctuation for ch in self.punctuation
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "stem": self.stem,
            "punctuation": self.punctuation,
            "bounding_boxes": [box.to_tuple() for box in self.bounding_boxes]
        }

    def __str__(self) -> str:
        return self.text


class Sentence:
    """
    Ordered, append-only run of words.

    A sentence is sealed once a word with terminal punctuation closes it;
    sealed sentences accept no more words. Sentences handed out by the
    assembler are also frozen, whether sealed or not, so a finished page
    cannot grow.
    """

    def __init__(self, words: Iterable[Word] = ()):
        self._words: List[Word] = list(words)
        self.sealed = False
        self.frozen = False

    @property
    def words(self) -> Tuple[Word, ...]:
        return tuple(self._words)

    @property
    def text(self) -> str:
        return " ".join(w.text for w in self._words)

    def add_word(self, word: Word) -> Word:
        if self.sealed:
            raise RuntimeError(f"Cannot add '{word.text}' to a sealed sentence")
        if self.frozen:
            raise RuntimeError(f"Cannot add '{word.text}' to a finished sentence")
        self._words.append(word)
        return word

    def seal(self) -> None:
        self.sealed = True

    def freeze(self) -> None:
        self.frozen = True

    def __len__(self) -> int:
        return len(self._words)

    def __str__(self) -> str:
        return self.text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "sealed": self.sealed,
            "words": [w.to_dict() for w in self._words]
        }


@dataclass(frozen=True)
class Page:
    """All sentences reconstructed from one recognition pass."""
    sentences: Tuple[Sentence, ...] = ()

    @property
    def text(self) -> str:
        return " ".join(s.text for s in self.sentences)

    def words(self) -> Iterator[Word]:
        for sentence in self.sentences:
            yield from sentence.words

    def locate(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """
        Find the word under a point.

        Returns:
            (sentence_index, word_index) of the first word, in reading order,
            with a box containing the point, or None
        """
        xi, yi = int(x), int(y)
        for s_idx, sentence in enumerate(self.sentences):
            for w_idx, word in enumerate(sentence.words):
                if word.contains(xi, yi):
                    return s_idx, w_idx
        return None

    def find_word(self, x: float, y: float) -> Optional[Word]:
        hit = self.locate(x, y)
        if hit is None:
            return None
        s_idx, w_idx = hit
        return self.sentences[s_idx].words[w_idx]

    def find_sentence(self, x: float, y: float) -> Optional[Sentence]:
        hit = self.locate(x, y)
        return self.sentences[hit[0]] if hit is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "sentences": [s.to_dict() for s in self.sentences]
        }


# ============================================================================
# Word Assembly
# ============================================================================

@dataclass
class _WordAccumulator:
    """Fragments collected for a word that is still being hyphenated."""
    parts: List[str] = field(default_factory=list)
    boxes: List[BoundingBox] = field(default_factory=list)

    @property
    def pending(self) -> bool:
        return bool(self.parts)

    def add(self, fragment: Fragment) -> None:
        self.parts.append(fragment.text_without_hyphenation)
        if fragment.bbox is not None:
            self.boxes.append(fragment.bbox)

    def flush(self) -> Word:
        word = Word.from_text("".join(self.parts), self.boxes)
        self.parts = []
        self.boxes = []
        return word


class WordAssembler:
    """
    Folds recognized fragments into words.

    Fragments ending in a hyphen (or closing a line whose text ends in a
    hyphen) are held back and glued, without a separator, to the following
    fragments until one arrives that does not continue.
    """

    def assemble(self, fragments: Iterable[Fragment]) -> List[Word]:
        words = []
        acc = _WordAccumulator()

        for fragment in fragments:
            acc.add(fragment)
            if fragment.ends_with_hyphenation:
                continue
            words.append(acc.flush())

        if acc.pending:
            logger.warning(
                f"Dropping unterminated hyphenated word: {''.join(acc.parts)!r}"
            )

        logger.debug(f"Assembled {len(words)} words")
        return words


# ============================================================================
# Sentence Assembly
# ============================================================================

class SentenceAssembler:
    """Groups words into sentences, closing one at each terminal punctuation."""

    def __init__(self, terminal_punctuation: str = TERMINAL_PUNCTUATION):
        self.terminal_punctuation = terminal_punctuation

    def assemble(self, words: Iterable[Word]) -> List[Sentence]:
        sentences = []
        current: Optional[Sentence] = None

        for word in words:
            if current is None:
                current = Sentence()
            current.add_word(word)
            if word.ends_sentence(self.terminal_punctuation):
                current.seal()
                sentences.append(current)
                current = None

        if current is not None:
            sentences.append(current)

        for sentence in sentences:
            sentence.freeze()

        logger.debug(f"Assembled {len(sentences)} sentences")
        return sentences


def assemble_words(fragments: Iterable[Fragment]) -> List[Word]:
    """Merge hyphenated fragments and split trailing punctuation."""
    return WordAssembler().assemble(fragments)


def assemble_sentences(
    words: Iterable[Word],
    terminal_punctuation: str = TERMINAL_PUNCTUATION
) -> List[Sentence]:
    """Partition words into sentences."""
    return SentenceAssembler(terminal_punctuation).assemble(words)


def assemble_page(
    fragments: Iterable[Fragment],
    terminal_punctuation: str = TERMINAL_PUNCTUATION
) -> Page:
    """Run word and sentence assembly over one recognition result."""
    words = assemble_words(fragments)
    sentences = assemble_sentences(words, terminal_punctuation)
    logger.info(f"Reconstructed page: {len(words)} words, {len(sentences)} sentences")
    return Page(sentences=tuple(sentences))
