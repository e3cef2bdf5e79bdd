"""
Tests for recognized text fragments.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestBoundingBox:
    """Test BoundingBox class."""

    def test_bbox_properties(self):
        """Test bounding box computed properties."""
        from scanlate.utils.ocr_text import BoundingBox

        bbox = BoundingBox(10, 20, 110, 70)

        assert bbox.width == 100
        assert bbox.height == 50
        assert bbox.to_tuple() == (10, 20, 110, 70)

    def test_bbox_from_xywh(self):
        """Test creation from x, y, width, height."""
        from scanlate.utils.ocr_text import BoundingBox

        assert BoundingBox.from_xywh(10, 20, 100, 50) == BoundingBox(10, 20, 110, 70)

    def test_contains_is_half_open(self):
        """Test that the right and bottom edges are outside."""
        from scanlate.utils.ocr_text import BoundingBox

        bbox = BoundingBox(10, 20, 30, 40)

        assert bbox.contains(10, 20)
        assert bbox.contains(29, 39)
        assert not bbox.contains(30, 25)
        assert not bbox.contains(15, 40)
        assert not bbox.contains(9, 25)

    def test_empty_box_contains_nothing(self):
        """Test that degenerate boxes never contain a point."""
        from scanlate.utils.ocr_text import BoundingBox

        bbox = BoundingBox(10, 10, 10, 20)

        assert bbox.is_empty
        assert not bbox.contains(10, 15)

    def test_union(self):
        """Test the union of two boxes."""
        from scanlate.utils.ocr_text import BoundingBox

        merged = BoundingBox(0, 10, 50, 20).union(BoundingBox(5, 30, 40, 45))

        assert merged == BoundingBox(0, 10, 50, 45)


class TestFragment:
    """Test hyphenation detection on fragments."""

    def test_plain_fragment(self):
        """Test a fragment that does not continue."""
        from scanlate.utils.ocr_text import Fragment

        fragment = Fragment("Hello", line_text="Hello world")

        assert not fragment.ends_with_hyphenation
        assert fragment.text_without_hyphenation == "Hello"

    def test_own_trailing_hyphen(self):
        """Test rule (a): the fragment text ends with a hyphen."""
        from scanlate.utils.ocr_text import Fragment

        fragment = Fragment("trans-", position_in_line=0, max_position_in_line=2)

        assert fragment.ends_with_hyphenation
        assert fragment.text_without_hyphenation == "trans"

    def test_line_final_with_hyphenated_line(self):
        """Test rule (b): last element of a line whose text ends with a hyphen."""
        from scanlate.utils.ocr_text import Fragment

        fragment = Fragment(
            "co", position_in_line=1, max_position_in_line=1, line_text="be co-"
        )

        assert fragment.is_line_end
        assert fragment.ends_with_hyphenation
        # The hyphen is not on this piece, so nothing is removed
        assert fragment.text_without_hyphenation == "co"

    def test_hyphenated_line_only_affects_last_element(self):
        """Test that earlier elements of a hyphenated line do not continue."""
        from scanlate.utils.ocr_text import Fragment

        fragment = Fragment(
            "be", position_in_line=0, max_position_in_line=1, line_text="be co-"
        )

        assert not fragment.ends_with_hyphenation

    def test_whitespace_trimmed(self):
        """Test that surrounding whitespace is removed from the piece."""
        from scanlate.utils.ocr_text import Fragment

        assert Fragment("  late ").text_without_hyphenation == "late"
        assert Fragment(" trans-").text_without_hyphenation == "trans"

    def test_dict_conversion(self):
        """Test conversion to and from a JSON-ready dict."""
        from scanlate.utils.ocr_text import BoundingBox, Fragment

        fragment = Fragment(
            "trans-", line_id=3, position_in_line=2, max_position_in_line=2,
            bbox=BoundingBox(1, 2, 3, 4), line_text="to be trans-"
        )

        data = fragment.to_dict()

        assert data["bbox"] == (1, 2, 3, 4)
        assert Fragment.from_dict(data) == fragment

    def test_from_dict_defaults(self):
        """Test that only text is required."""
        from scanlate.utils.ocr_text import Fragment

        fragment = Fragment.from_dict({"text": "word"})

        assert fragment.bbox is None
        assert fragment.line_text == ""
        assert fragment.is_line_end


class TestFragmentAdapters:
    """Test recognizer output adapters."""

    def test_fragments_from_lines(self):
        """Test that positions and line text are filled in."""
        from scanlate.utils.ocr_text import BoundingBox, fragments_from_lines

        box = BoundingBox(0, 0, 10, 10)
        fragments = fragments_from_lines([
            ["Hello", ("trans-", box)],
            ["lation"]
        ])

        assert [f.text for f in fragments] == ["Hello", "trans-", "lation"]
        assert [f.line_id for f in fragments] == [0, 0, 1]
        assert [f.position_in_line for f in fragments] == [0, 1, 0]
        assert [f.max_position_in_line for f in fragments] == [1, 1, 0]
        assert fragments[1].line_text == "Hello trans-"
        assert fragments[1].bbox == box
        assert fragments[0].bbox is None

    def test_fragments_from_empty_lines(self):
        """Test that no lines give no fragments."""
        from scanlate.utils.ocr_text import fragments_from_lines

        assert fragments_from_lines([]) == []
        assert fragments_from_lines([[]]) == []

    @pytest.fixture
    def tesseract_data(self):
        """Output of image_to_data with Output.DICT for two short lines."""
        return {
            'level': [4, 5, 5, 4, 5, 5],
            'block_num': [1, 1, 1, 1, 1, 1],
            'par_num': [1, 1, 1, 1, 1, 1],
            'line_num': [1, 1, 1, 2, 2, 2],
            'word_num': [0, 1, 2, 0, 1, 2],
            'left': [10, 10, 80, 10, 10, 90],
            'top': [5, 5, 5, 40, 40, 40],
            'width': [150, 60, 70, 160, 70, 80],
            'height': [20, 20, 20, 20, 20, 20],
            'conf': ['-1', '95', '90', -1, 88.5, 91],
            'text': ['', 'Hello', 'trans-', '', 'lation', 'works.'],
        }

    def test_fragments_from_ocr_data(self, tesseract_data):
        """Test grouping Tesseract rows into lines."""
        from scanlate.utils.ocr_text import BoundingBox, fragments_from_ocr_data

        fragments = fragments_from_ocr_data(tesseract_data)

        assert [f.text for f in fragments] == ["Hello", "trans-", "lation", "works."]
        assert [f.line_id for f in fragments] == [0, 0, 1, 1]
        assert fragments[1].is_line_end
        assert fragments[1].line_text == "Hello trans-"
        assert fragments[2].bbox == BoundingBox(10, 40, 80, 60)

    def test_low_confidence_rows_skipped(self, tesseract_data):
        """Test that rows with negative confidence are ignored."""
        from scanlate.utils.ocr_text import fragments_from_ocr_data

        tesseract_data['conf'][5] = -1

        fragments = fragments_from_ocr_data(tesseract_data)

        assert [f.text for f in fragments] == ["Hello", "trans-", "lation"]

    def test_missing_geometry(self):
        """Test that rows without geometry give fragments without boxes."""
        from scanlate.utils.ocr_text import fragments_from_ocr_data

        fragments = fragments_from_ocr_data({
            'line_num': [1, 1],
            'conf': [90, 90],
            'text': ['one', 'two'],
        })

        assert [f.text for f in fragments] == ["one", "two"]
        assert all(f.bbox is None for f in fragments)
        assert fragments[1].is_line_end

    def test_missing_line_numbers(self):
        """Test that data without line numbers is rejected up front."""
        from scanlate.utils.ocr_text import fragments_from_ocr_data

        with pytest.raises(ValueError, match="line_num"):
            fragments_from_ocr_data({
                'conf': [90, 90],
                'text': ['one', 'two'],
            })


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
