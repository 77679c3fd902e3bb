"""Command line interface for the 500px API.

Usage:
    px500 photos --feature popular               # First page of popular photos
    px500 photos --feature fresh_today --max-pages 3 --items
    px500 search --term sunset --license-type 4  # Search photos
    px500 comments 12345 --nested                # Comments of a photo
    px500 photo 12345                            # Single photo
    px500 upload ./shot.jpg --title "Dusk"       # Upload a photo

Streaming commands print one JSON document per page (or per item with
--items) on stdout.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional

from .client import Client
from .config import get_config
from .errors import Px500Error
from .models import (
    CommentsPage,
    CommentsRequest,
    Feature,
    ListRequest,
    Photo,
    PhotoPage,
    SearchRequest,
    SortOrder,
    UploadRequest,
)

__all__ = ["build_parser", "main", "run"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="px500",
        description="Query the 500px photo API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s photos --feature popular --per-page 10 --max-pages 2
  %(prog)s search --term "northern lights" --items
  %(prog)s comments 12345 --nested
  %(prog)s photo 12345
  %(prog)s upload ./shot.jpg --title "Dusk" --tag sea --tag evening

Configuration:
  Set credentials in the environment or in .env:
    PX500_CONSUMER_KEY=your_consumer_key
    PX500_BASE_URL=https://api.500px.com/v1   (optional)
    PX500_LOG_LEVEL=INFO                       (optional)
        """,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    # Options shared by streaming commands
    paging = argparse.ArgumentParser(add_help=False)
    paging.add_argument(
        "--page", type=int, default=1, metavar="N", help="First page to fetch (default: 1)"
    )
    paging.add_argument(
        "--max-pages",
        type=int,
        default=1,
        metavar="N",
        help="Stop after page N; 0 streams until the last page (default: 1)",
    )
    paging.add_argument(
        "--items", action="store_true", help="Print one JSON document per item instead of per page"
    )

    photos = commands.add_parser("photos", parents=[paging], help="List a photo stream")
    photos.add_argument(
        "--feature",
        required=True,
        choices=[f.value for f in Feature],
        help="Photo stream to list",
    )
    photos.add_argument("--user-id", default="", help="User for the user_* features")
    photos.add_argument("--username", default="", help="Username for the user_* features")
    photos.add_argument("--only", default="", help="Only include this category")
    photos.add_argument("--exclude", default="", help="Exclude this category")
    photos.add_argument("--sort", default="", choices=[s.value for s in SortOrder])
    photos.add_argument("--image-size", type=int, default=0, metavar="SIZE")
    photos.add_argument("--tag", dest="tags", action="append", default=[], metavar="TAG")
    photos.add_argument("--per-page", type=int, default=20, metavar="N")

    search = commands.add_parser("search", parents=[paging], help="Search photos")
    search.add_argument("--term", default="", help="Keyword to search for")
    search.add_argument("--tag", default="", help="Complete tag string to search for")
    search.add_argument("--only", type=int, default=0, metavar="CATEGORY")
    search.add_argument("--exclude", type=int, default=0, metavar="CATEGORY")
    search.add_argument("--exclude-nsfw", action="store_true")
    search.add_argument("--user-id", default="")
    search.add_argument(
        "--image-size", dest="image_sizes", type=int, action="append", default=[], metavar="SIZE"
    )
    search.add_argument(
        "--license-type",
        dest="license_types",
        type=int,
        action="append",
        default=[],
        metavar="TYPE",
    )
    search.add_argument("--sort", default="", choices=[s.value for s in SortOrder])
    search.add_argument("--per-page", type=int, default=20, metavar="N")

    comments = commands.add_parser("comments", parents=[paging], help="List comments of a photo")
    comments.add_argument("photo_id")
    comments.add_argument("--nested", action="store_true", help="Include replies")

    photo = commands.add_parser("photo", help="Show a single photo")
    photo.add_argument("photo_id")

    upload = commands.add_parser("upload", help="Upload a photo")
    upload.add_argument("path", type=Path)
    upload.add_argument("--title", default=None)
    upload.add_argument("--description", default=None)
    upload.add_argument("--category", type=int, default=0)
    upload.add_argument("--private", action="store_true")
    upload.add_argument("--tag", dest="tags", action="append", default=[], metavar="TAG")
    upload.add_argument("--content-type", default="")

    return parser


def _dump(document: Any) -> None:
    print(json.dumps(document, default=str))


def _page_document(page: Any) -> dict[str, Any]:
    if isinstance(page, PhotoPage):
        return {
            "page_number": page.page_number,
            "total_pages": page.total_pages,
            "total_items": page.total_items,
            "photos": [p.model_dump(mode="json") for p in page.photos],
        }
    if isinstance(page, CommentsPage):
        return {
            "page_number": page.page_number,
            "total_pages": page.total_pages,
            "total_items": page.total_items,
            "comments": [c.model_dump(mode="json") for c in page.comments],
        }
    raise TypeError(f"unexpected page type {type(page).__name__}")


def _build_request(args: argparse.Namespace) -> Any:
    if args.command == "photos":
        return ListRequest(
            feature=Feature(args.feature),
            user_id=args.user_id,
            username=args.username,
            only=args.only,
            exclude=args.exclude,
            sort=args.sort,
            image_size=args.image_size,
            tags=list(args.tags),
            page_number=args.page,
            items_per_page=args.per_page,
            max_page_number=args.max_pages,
        )
    if args.command == "search":
        return SearchRequest(
            term=args.term,
            tag=args.tag,
            only=args.only,
            exclude=args.exclude,
            exclude_nsfw=args.exclude_nsfw,
            user_id=args.user_id,
            image_sizes=list(args.image_sizes),
            license_types=list(args.license_types),
            sort=args.sort,
            page_number=args.page,
            items_per_page=args.per_page,
            max_page_number=args.max_pages,
        )
    return CommentsRequest(
        photo_id=args.photo_id,
        nested=args.nested,
        page_number=args.page,
        max_page_number=args.max_pages,
    )


async def _stream(args: argparse.Namespace, client: Client) -> int:
    request = _build_request(args)
    if args.command == "photos":
        stream = await client.list_photos(request)
    elif args.command == "search":
        stream = await client.search_photos(request)
    else:
        stream = await client.comments_for_photo(request)

    async with stream:
        async for page in stream:
            if page.err is not None:
                print(f"Error: page {page.page_number}: {page.err}", file=sys.stderr)
                return 1
            if args.items:
                for item in page.items:
                    _dump(item.model_dump(mode="json"))
            else:
                _dump(_page_document(page))
    return 0


async def run(args: argparse.Namespace, client: Client) -> int:
    """Execute a parsed command against ``client``.

    Returns:
        Process exit code (0 success, 1 error)
    """
    try:
        if args.command in ("photos", "search", "comments"):
            return await _stream(args, client)

        if args.command == "photo":
            photo = await client.photo_by_id(args.photo_id)
        else:
            photo_info = Photo(
                title=args.title,
                description=args.description,
                category=args.category,
                private=args.private,
                tags=list(args.tags),
            )
            photo = await client.upload_photo(
                UploadRequest(
                    body=args.path.read_bytes(),
                    photo_info=photo_info,
                    filename=args.path.name,
                    content_type=args.content_type,
                )
            )
        _dump(photo.model_dump(mode="json"))
        return 0
    except (Px500Error, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


async def _main(args: argparse.Namespace) -> int:
    async with Client.from_config() as client:
        return await run(args, client)


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        get_config()
    except Exception as e:
        print(f"Error: Failed to load configuration: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        code = asyncio.run(_main(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Px500Error as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
