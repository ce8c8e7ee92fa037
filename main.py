"""VidEmbed command line interface."""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from vidembed import __version__, log
from vidembed.config.database import get_db
from vidembed.config.settings import get_config
from vidembed.core.cache import ListSort
from vidembed.core.formatter import VideoEmbedFormatter
from vidembed.core.providers import PROVIDERS, get_provider
from vidembed.exceptions import VidEmbedError
from vidembed.services.admin_service import get_admin_service


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vidembed",
        description="Replace bare YouTube and Vimeo links with cached embeds",
    )
    parser.add_argument("--version", action="version", version=__version__)
    commands = parser.add_subparsers(dest="command", required=True)

    fmt = commands.add_parser("format", help="Format HTML from a file or stdin")
    fmt.add_argument("file", nargs="?", type=Path, help="Input file (default: stdin)")
    fmt.add_argument("--owner-id", type=int, default=None, help="Content owner id")
    fmt.add_argument("--field", default=None, help="Content field name")
    fmt.add_argument(
        "--provider",
        action="append",
        dest="providers",
        choices=[provider.name for provider in PROVIDERS],
        help="Only embed videos of this provider (repeatable, default: all)",
    )

    lst = commands.add_parser("list", help="List cached embeds")
    lst.add_argument("--start", type=int, default=0)
    lst.add_argument("--limit", type=int, default=0, help="0 lists everything")
    lst.add_argument(
        "--sort",
        default=ListSort.CREATED_DESC.value,
        choices=[sort.value for sort in ListSort],
    )

    commands.add_parser("count", help="Count cached embeds")

    inv = commands.add_parser("invalidate", help="Drop cached embeds by video id")
    inv.add_argument("video_ids", nargs="+")

    commands.add_parser("clear", help="Drop every cached embed")
    commands.add_parser("sweep", help="Drop expired embeds now")

    return parser


def _run(args: argparse.Namespace) -> int:
    admin = get_admin_service()

    if args.command == "format":
        text = args.file.read_text(encoding="utf-8") if args.file else sys.stdin.read()
        providers = (
            tuple(get_provider(name) for name in args.providers)
            if args.providers
            else PROVIDERS
        )
        formatter = VideoEmbedFormatter(providers=providers)
        sys.stdout.write(formatter.format_value(args.owner_id, args.field, text))
    elif args.command == "list":
        for entry in admin.list_cached(args.start, args.limit, args.sort):
            status = "ok" if entry.valid else f"HTTP {entry.status_code}"
            created = entry.created_at.isoformat() if entry.created_at else "-"
            print(f"{entry.video_id}\t{created}\t{status}\t{entry.video_url}")
    elif args.command == "count":
        print(admin.count_cached())
    elif args.command == "invalidate":
        removed = sum(admin.invalidate(video_id) for video_id in args.video_ids)
        print(removed)
    elif args.command == "clear":
        admin.invalidate_all()
    elif args.command == "sweep":
        print(admin.sweep())
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse the arguments and run the requested command.

    Returns:
        int: Process exit code
    """
    args = _build_parser().parse_args(argv)

    try:
        log.debug(f"VidEmbed: {get_config()!s}")
        return _run(args)
    except ValidationError as e:
        log.error(f"VidEmbed: Invalid configuration: {e}")
    except VidEmbedError as e:
        log.error(f"VidEmbed: {e}", exc_info=True)
    finally:
        if get_db.cache_info().currsize:
            get_db().dispose()
    return 1


if __name__ == "__main__":
    sys.exit(main())
