"""
scanlate
========

Image binarization and text reconstruction for an OCR translation pipeline.
Prepares captured frames for a text recognizer and turns the recognizer's
fragments back into words and sentences ready for translation.

Main components:
- Gaussian kernel construction
- Adaptive local-threshold binarization (in place, streaming convolution)
- Hyphenation-aware word assembly
- Sentence grouping and page hit-testing
"""

__version__ = "1.0.0"
__author__ = "scanlate contributors"
