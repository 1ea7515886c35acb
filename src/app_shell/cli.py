import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from src.adapters.permissions import ConsolePermissionPrompt, StaticPermissionGrantor
from src.app_shell.config import validate_ops_rules
from src.app_shell.context import ShareContext
from src.components.album_share import BaseShareListener, TransferStatus
from src.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


class PrintingListener(BaseShareListener):
    def on_start(self, path: str) -> None:
        print(f"Sharing {path} ...")

    def on_denied(self, path: str) -> None:
        print(f"Permission denied, {path} not shared.")

    def on_end(self, error: BaseException | None, path: str) -> None:
        if error is None:
            print(f"Shared {path}.")
        else:
            print(f"Failed to share {path}: {error}")

    def on_skipped(self, path: str) -> None:
        print(f"{path} is already in the album, skipped.")


def get_context(args: argparse.Namespace) -> ShareContext:
    rules_path = Path(args.rules)
    if not rules_path.exists():
        logger.error(f"Rules file {rules_path} not found.")
        sys.exit(1)

    rules = load_rules(rules_path)
    validate_ops_rules(rules)

    if getattr(args, "deny", False):
        permissions = StaticPermissionGrantor(False)
    elif getattr(args, "ask", False):
        permissions = ConsolePermissionPrompt()
    else:
        permissions = StaticPermissionGrantor(True)

    return ShareContext.create(
        rules, permissions=permissions, sdk_version=getattr(args, "sdk", None)
    )


def handle_share(ctx: ShareContext, args: argparse.Namespace) -> int:
    defaults = ctx.session_defaults
    if args.prefix is not None:
        defaults = replace(defaults, name_prefix=args.prefix)
    if args.no_repeat:
        defaults = replace(defaults, suppress_duplicates=True)
    ctx.session_defaults = defaults

    session = ctx.new_session(PrintingListener())
    if args.app_context:
        session.enable_application_context()

    try:
        result = session.transfer(args.path).result(timeout=args.timeout)
    except TimeoutError:
        logger.error(f"No result for {args.path} after {args.timeout}s.")
        return 1
    finally:
        session.release()

    if result.status in (TransferStatus.SUCCESS, TransferStatus.SKIPPED):
        if result.location:
            print(f"Location: {result.location}")
        return 0
    return 1


def handle_list(ctx: ShareContext, args: argparse.Namespace) -> int:
    records = ctx.media_index.list(limit=args.limit, offset=args.offset)
    if not records:
        print("Media index is empty.")
    for r in records:
        print(f"{r.uri}  {r.display_name}  {r.mime_type}  {r.size} bytes")
    return 0


def handle_scans(ctx: ShareContext, args: argparse.Namespace) -> int:
    for location, scanned_at in ctx.media_index.scan_log():
        print(f"{scanned_at}  {location}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Album Share CLI")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    parser.add_argument("--sdk", type=int, help="Override the platform API level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # share
    share_parser = subparsers.add_parser("share", help="Share a file to the album")
    share_parser.add_argument("path", help="File to share")
    share_parser.add_argument("--prefix", help="Display name prefix (default from rules)")
    share_parser.add_argument(
        "--no-repeat", action="store_true", help="Skip files already in the album"
    )
    share_parser.add_argument(
        "--app-context", action="store_true", help="Use the application-wide context"
    )
    share_parser.add_argument("--timeout", type=float, default=60.0)
    perm = share_parser.add_mutually_exclusive_group()
    perm.add_argument("--deny", action="store_true", help="Simulate a permission denial")
    perm.add_argument("--ask", action="store_true", help="Prompt for the permission")

    # list
    list_parser = subparsers.add_parser("list", help="List media index records")
    list_parser.add_argument("--limit", type=int, default=50)
    list_parser.add_argument("--offset", type=int, default=0)

    # scans
    subparsers.add_parser("scans", help="Show scan notifications")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    ctx = get_context(args)

    if args.command == "share":
        return handle_share(ctx, args)
    elif args.command == "list":
        return handle_list(ctx, args)
    elif args.command == "scans":
        return handle_scans(ctx, args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
