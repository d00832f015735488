from __future__ import annotations

import argparse
import asyncio
import sys

from pageable.app import run_app


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def main() -> None:
    parser = argparse.ArgumentParser(description="Walk a paged JSON listing")
    parser.add_argument(
        "--path",
        default="/api/v2/pokemon",
        help="Listing path relative to the base URL (default: /api/v2/pokemon)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Override PAGEABLE_BASE_URL (default: https://pokeapi.co)",
    )
    parser.add_argument(
        "--page-size",
        type=_positive_int,
        default=None,
        help="Items per page (default: PAGEABLE_PAGE_SIZE or 30)",
    )
    parser.add_argument(
        "--max-pages",
        type=_positive_int,
        default=None,
        help="Stop after N pages even if the end has not been reached",
    )
    parser.add_argument(
        "--show-items",
        action="store_true",
        help="Print the key of every loaded item",
    )
    args = parser.parse_args()

    sys.exit(
        asyncio.run(
            run_app(
                path=args.path,
                base_url=args.base_url,
                page_size=args.page_size,
                max_pages=args.max_pages,
                show_items=args.show_items,
            )
        )
    )


if __name__ == "__main__":
    main()
