#!/usr/bin/env python
"""
Command-line interface for scanlate.

Usage:
    scanlate binarize <image> --output <image> [options]
    scanlate assemble <fragments.json> --output <file> [options]

Examples:
    # Binarize a photo before handing it to a recognizer
    scanlate binarize page.jpg --output page_bw.png --kernel-size 15 -c 4

    # Rebuild words and sentences from recognizer output
    scanlate assemble tesseract_data.json --output page.json

    # Plain text, one sentence per line
    scanlate assemble fragments.json --output page.txt --format text
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from . import __version__

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("scanlate")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="scanlate",
        description="Binarize captured images and rebuild sentences from OCR fragments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment overrides:
  SCANLATE_KERNEL_SIZE, SCANLATE_SIGMA, SCANLATE_THRESHOLD_C, SCANLATE_DEBUG
        """
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Re-raise errors with a full traceback"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # binarize
    bin_parser = subparsers.add_parser(
        "binarize",
        help="Apply the adaptive local-threshold filter to an image"
    )
    bin_parser.add_argument("input", help="Input image file")
    bin_parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output image file"
    )
    bin_parser.add_argument(
        "--kernel-size", "-k",
        type=int,
        default=None,
        help="Gaussian kernel size, odd and >= 3 (default: 11)"
    )
    bin_parser.add_argument(
        "--sigma",
        type=float,
        default=None,
        help="Gaussian sigma (default: (kernel_size - 1) / 6)"
    )
    bin_parser.add_argument(
        "-c",
        type=int,
        default=None,
        help="Offset subtracted from the local mean (default: 2)"
    )

    # assemble
    asm_parser = subparsers.add_parser(
        "assemble",
        help="Rebuild words and sentences from recognized fragments"
    )
    asm_parser.add_argument(
        "input",
        help="Fragments JSON: fragment objects, lines of elements, or Tesseract data"
    )
    asm_parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output file"
    )
    asm_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )

    return parser


def run_binarize(args, config) -> int:
    """Binarize one image file."""
    from .utils.images import binarize_image
    from .utils.io import load_image, save_image

    cfg = config.binarization
    kernel_size = args.kernel_size if args.kernel_size is not None else cfg.kernel_size
    sigma = args.sigma if args.sigma is not None else cfg.sigma
    c = args.c if args.c is not None else cfg.c

    start_time = time.time()
    image = load_image(args.input)
    result = binarize_image(image, kernel_size=kernel_size, c=c, sigma=sigma)
    output_path = save_image(result, args.output)

    logger.info(f"Saved binarized image: {output_path} ({time.time() - start_time:.2f}s)")
    return 0


def run_assemble(args, config) -> int:
    """Assemble a page from a fragments file."""
    from .utils.assembler import assemble_page
    from .utils.io import load_fragments, save_json

    fragments = load_fragments(args.input)
    page = assemble_page(fragments, config.assembly.terminal_punctuation)

    output_path = Path(args.output)
    if args.format == "json":
        save_json(page.to_dict(), output_path)
    else:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [sentence.text for sentence in page.sentences]
        output_path.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")

    if not args.quiet:
        print(f"Sentences: {len(page.sentences)}")
        print(f"Words: {sum(len(s) for s in page.sentences)}")
        print(f"Output: {output_path}")

    return 0


COMMANDS = {
    "binarize": run_binarize,
    "assemble": run_assemble,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    from .config import get_config

    parser = setup_argparser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    debug = args.debug
    try:
        config = get_config()
        debug = debug or config.debug_mode
        return COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        if debug:
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
