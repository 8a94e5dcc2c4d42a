#!/usr/bin/env python3
"""
Detect a document in a photo and save a flat, scanner-like copy of it
Usage: python3 scan_document.py <path_to_image> [-o output.jpg] [--width 1800] [--enhance]
"""

import argparse
import logging
import sys
from pathlib import Path

import cv2
from dotenv import load_dotenv

from document_detection import (
    BoundaryDetector,
    EncodingError,
    GeometryError,
    RectifyOptions,
    ScannerConfig,
    encode_image,
    rectify,
)
from document_detection.resize import downscale_to_max_dimension


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Detect and rectify a photographed document")
    parser.add_argument("image", type=Path, help="path to the input image")
    parser.add_argument("-o", "--output", type=Path, help="output path (default: scanned_<name>.jpg next to the input)")
    parser.add_argument("--width", type=int, default=None, help="output width in pixels")
    parser.add_argument("--enhance", action="store_true", help="binarize the result like a flatbed scan")
    parser.add_argument("--quality", type=float, default=None, help="JPEG quality in (0, 1]")
    parser.add_argument("-v", "--verbose", action="store_true", help="print detection details")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv()
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    config = ScannerConfig.from_env()

    if not args.image.exists():
        print(f"Error: Image not found: {args.image}")
        return 1

    # Load image
    print(f"Loading image: {args.image}")
    image = cv2.imread(str(args.image))

    if image is None:
        print(f"Error: Failed to load image: {args.image}")
        return 1

    print(f"Image dimensions: {image.shape[1]}x{image.shape[0]} px")

    output_path = args.output or args.image.parent / f"scanned_{args.image.stem}.jpg"
    options = RectifyOptions(
        target_width=args.width or config.target_width,
        enhance=args.enhance,
        quality=args.quality or config.quality,
    )

    print("Detecting document...")
    result = BoundaryDetector(config).detect_with_details(image)

    try:
        if result is None:
            print("✗ Document was not detected, saving the original image")
            fallback, _ = downscale_to_max_dimension(image, config.encode_max_dimension)
            data = encode_image(fallback, options.quality)
        else:
            print(f"✓ Document detected ({result.stage} stage, score {result.candidate.score:.2f})")
            for label, point in result.quad.to_dict().items():
                print(f"  {label:<12} ({point['x']:.1f}, {point['y']:.1f})")
            data = rectify(image, result.quad, options, config)
    except GeometryError as e:
        print(f"Error: Detected corners are degenerate: {e}")
        return 1
    except EncodingError as e:
        print(f"Error: {e}")
        return 1

    output_path.write_bytes(data)
    print(f"\n✓ Result saved: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
