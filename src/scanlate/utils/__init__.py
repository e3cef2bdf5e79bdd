"""
Utility modules for the scanlate pipeline.
"""

from .kernels import build_gaussian_kernel
from .images import (
    luminance, gray_to_argb, binarize, binarize_image,
    apply_gaussian_kernel_in_place, apply_threshold,
)
from .ocr_text import BoundingBox, Fragment, fragments_from_lines, fragments_from_ocr_data
from .assembler import (
    Word, Sentence, Page, WordAssembler, SentenceAssembler,
    assemble_words, assemble_sentences, assemble_page,
)
from .io import load_image, save_image, save_json, load_json, load_fragments

__all__ = [
    # Kernels
    "build_gaussian_kernel",
    # Images
    "luminance", "gray_to_argb", "binarize", "binarize_image",
    "apply_gaussian_kernel_in_place", "apply_threshold",
    # Fragments
    "BoundingBox", "Fragment", "fragments_from_lines", "fragments_from_ocr_data",
    # Assembly
    "Word", "Sentence", "Page", "WordAssembler", "SentenceAssembler",
    "assemble_words", "assemble_sentences", "assemble_page",
    # IO
    "load_image", "save_image", "save_json", "load_json", "load_fragments",
]
