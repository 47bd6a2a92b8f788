"""RoomPlan catalog generator command line.

Usage:
    roomcat create-folders -i ~/Catalog
    roomcat generate -i ~/Catalog -o ~/RoomPlanCatalog.bundle
    roomcat convert -i Room.json -c ~/RoomPlanCatalog.bundle -o Room.glb
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from roomcat.catalog import Vocabulary, create_folder_hierarchy, generate_catalog
from roomcat.config import DEFAULT_CATALOG_NAME, CatalogConfig
from roomcat.errors import CatalogToolError
from roomcat.room import convert_room

logger = logging.getLogger(__name__)


def expand_path(path: str) -> Path:
    return Path(os.path.expanduser(path))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="roomcat", description="RoomPlan Catalog Generator")
    parser.add_argument("--log-level", type=str, default=None,
                        help="Logging level (default: ROOMCAT_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create-folders", help="Creates Catalog Folder Hierarchy")
    create.add_argument("-i", "--input-path", type=str, default=os.getcwd(),
                        help="Path of the catalog folder. By default, it's the current folder")

    generate = subparsers.add_parser(
        "generate", help="Parses folder hierarchy and generates a RoomPlan catalog out of it")
    generate.add_argument("-i", "--input-path", type=str, default=os.getcwd(),
                          help="Path of the catalog folder. By default, it's the current folder")
    generate.add_argument("-o", "--output-path", type=str,
                          default=os.path.join(os.getcwd(), DEFAULT_CATALOG_NAME),
                          help="Path of the generated catalog bundle")

    convert = subparsers.add_parser(
        "convert", help="Converts a RoomPlan scan in JSON or .plist format using the models in the catalog")
    convert.add_argument("-i", "--input-path", type=str, required=True,
                         help="Path of the RoomPlan scan file (in plist or json format)")
    convert.add_argument("-c", "--catalog-path", type=str, required=True,
                         help="Path of catalog bundle")
    convert.add_argument("-o", "--output-path", type=str, required=True,
                         help="Path of the output model file (.glb, .gltf, .obj, .ply or .stl)")

    return parser


def run(args: argparse.Namespace, config: CatalogConfig) -> None:
    vocabulary = (
        Vocabulary.from_file(config.vocabulary_path)
        if config.vocabulary_path is not None
        else Vocabulary.default()
    )

    if args.command == "create-folders":
        input_path = expand_path(args.input_path)
        create_folder_hierarchy(input_path, vocabulary=vocabulary)
        print(f"Folder hierarchy created at {input_path}")

    elif args.command == "generate":
        report = generate_catalog(
            expand_path(args.input_path), expand_path(args.output_path), vocabulary=vocabulary
        )
        if report.missing_count > 0:
            print(f"{report.missing_count} missing models")
        print(f"Catalog bundle created at {report.bundle_path}")

    elif args.command == "convert":
        output_path = convert_room(
            expand_path(args.input_path),
            expand_path(args.catalog_path),
            expand_path(args.output_path),
            vocabulary=vocabulary,
        )
        print(f"Model created at {output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    config = CatalogConfig.from_env()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        run(args, config)
    except CatalogToolError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
