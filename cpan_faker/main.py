import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cpan_faker import __version__
from cpan_faker.core.dependencies import available_dist_builders, load_config
from cpan_faker.core.exceptions import FakerError
from cpan_faker.data.repository import build

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cpan-faker",
        description="Build a bogus CPAN instance for testing from simple dist descriptions.",
    )
    parser.add_argument("source", nargs="?", type=Path, help="Directory of dist description files")
    parser.add_argument("dest", nargs="?", type=Path, help="Directory in which to construct the CPAN")
    parser.add_argument("--url", help="Base URL of the CPAN (default: file:// URL of dest)")
    parser.add_argument(
        "--builder",
        dest="dist_builder",
        help=f"Dist builder to use (available: {', '.join(available_dist_builders())})",
    )
    parser.add_argument("--config", type=Path, help="YAML file with source/dest/url/dist_builder")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolution decisions")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = load_config(
            args.config,
            source=args.source,
            dest=args.dest,
            url=args.url,
            dist_builder=args.dist_builder,
        )
        result = build(config)
    except FakerError as e:
        logger.error(f"Build aborted: {e}")
        return 1

    print(
        f"Built {config.dest}: {len(result.archives)} dist(s), "
        f"{len(result.package_index)} package(s), {len(result.author_index.authors)} author(s) "
        f"at {result.finished_at:%Y-%m-%d %H:%M:%S}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
