from __future__ import annotations

import argparse
import codecs
import logging
import os
from pathlib import Path
from typing import List, Sequence, Tuple

from .config import (
    API_KEY_ENV,
    DEFAULT_CACHE_DIR,
    DEFAULT_OUTPUT,
    DEFAULT_REFERENCE_MARKERS,
    DEFAULT_TILE_PROVIDER,
    Marker,
    RunConfig,
)
from .errors import GeocardsError
from .maps import TILE_PROVIDERS
from .pipeline import run

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def parse_reference(value: str) -> Marker:
    parts = value.replace(" ", "").split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected LAT,LON, got '{value}'")
    try:
        lat, lon = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid coordinates '{value}'") from exc
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise argparse.ArgumentTypeError(f"coordinates out of range '{value}'")
    return Marker(lat, lon)


def parse_encoding(value: str) -> str:
    try:
        return codecs.lookup(value).name
    except LookupError as exc:
        raise argparse.ArgumentTypeError(f"unknown encoding '{value}'") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geocards",
        description="Render one printable card per location: label, QR code and map",
    )
    parser.add_argument("--in", dest="input", type=Path, required=True, help="Input CSV file")
    parser.add_argument("--out", type=Path, default=DEFAULT_OUTPUT, help=f"Output PDF file (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--cache", type=Path, default=DEFAULT_CACHE_DIR, help=f"Cache path (default: {DEFAULT_CACHE_DIR})")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument("--force", action="store_true", help="Regenerate every cached image")
    parser.add_argument("--font", type=Path, help="TrueType font file for label text")
    parser.add_argument("--font-name", help="Name to register the TrueType font under")
    parser.add_argument(
        "--encoding",
        type=parse_encoding,
        help="Single-byte code page label text is reduced to (default: cp874 with --font, else cp1252)",
    )
    parser.add_argument(
        "--tile-provider",
        choices=sorted(TILE_PROVIDERS),
        default=DEFAULT_TILE_PROVIDER,
        help=f"Map tile source (default: {DEFAULT_TILE_PROVIDER})",
    )
    parser.add_argument("--api-key", default=os.environ.get(API_KEY_ENV), help=f"Tile provider API key (default: ${API_KEY_ENV})")
    parser.add_argument(
        "--reference",
        type=parse_reference,
        action="append",
        metavar="LAT,LON",
        help="Extra blue marker drawn on every map; repeatable (default: 19.89830,99.81805)",
    )
    parser.add_argument("--no-reference", action="store_true", help="Only mark the location itself")
    parser.add_argument("--skip-unnamed", action="store_true", help="Leave the label block off cards with an empty name")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_config(args: argparse.Namespace) -> RunConfig:
    if args.no_reference:
        references: Tuple[Marker, ...] = ()
    elif args.reference:
        references = tuple(args.reference)
    else:
        references = DEFAULT_REFERENCE_MARKERS
    return RunConfig(
        input_path=args.input,
        output_path=args.out,
        cache_dir=args.cache,
        debug=args.debug,
        force=args.force,
        font_path=args.font,
        font_name=args.font_name,
        text_encoding=args.encoding,
        tile_provider=args.tile_provider,
        api_key=args.api_key,
        reference_markers=references,
        skip_unnamed_labels=args.skip_unnamed,
    )


def configure_logging(debug: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=LOG_FORMAT)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.debug)
    config = build_config(args)
    try:
        run(config)
    except GeocardsError as exc:
        raise SystemExit(f"error: {exc.describe()}") from exc
    return 0
