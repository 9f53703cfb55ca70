import argparse
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import httpx

from . import api
from .bulk import bulk_delete, bulk_upload
from .client import CloudClient
from .errors import BuzzError, InvalidArgument, UnknownCommand
from .models import AppContext, Invocation
from .session_store import config_path_from_env, load_token, save_token
from .utils import format_bytes, get_logger

PROG = "buzzheavier"

logger = get_logger("buzzcli")

USAGE = f"""\
Usage: {PROG} <command> [arguments...]

Config:
  set-token <token>                                 Save <token> to the config file.
  interactive                                       Launch the interactive menu.

File uploads:
  upload-anon <filePath> <fileName>                 Upload anonymously as <fileName>.
  upload-auth <filePath> <parentId> <fileName> [token]
                                                    Upload into user directory <parentId>.
  upload-loc <filePath> <fileName> <locationId>     Upload to a specific storage location.
  upload-note <filePath> <fileName> <noteString>    Upload with a note (up to 500 chars).
  bulk-upload <parentId> <file1> [file2] ...        Upload several files into <parentId>.

Public / account:
  locations                                         List file storage locations.
  account [token]                                   Show account info.

File manager:
  get-root [token]                                  List the root directory.
  get-dir <directoryId> [token]                     List <directoryId>.
  create-dir <name> <parentId> [token]              Create directory <name> under <parentId>.
  rename-dir <directoryId> <newName> [token]        Rename a directory.
  move-dir <directoryId> <newParentId> [token]      Move a directory under <newParentId>.
  rename-file <fileId> <newName> [token]            Rename a file.
  move-file <fileId> <newParentId> [token]          Move a file under <newParentId>.
  add-note-file <fileId> <noteString> [token]       Add or change the note on a file.
  delete-dir <directoryId> [token]                  Delete a directory and its contents.
  bulk-delete <dirId1> [dirId2] ...                 Delete several directories.

Examples:
  {PROG} set-token "YOUR_ACCOUNT_ID"
  {PROG} upload-anon ./myvideo.mp4 myvideo.mp4
  {PROG} upload-auth ./myvideo.mp4 parent123 myvideo.mp4
  {PROG} upload-note ./myvideo.mp4 myvideo.mp4 "Hello from Buzzheavier!"
  {PROG} bulk-upload parent123 ./file1.mp4 ./file2.mp4
  {PROG} get-root
"""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise InvalidArgument(f"{message}\n{self.format_usage().rstrip()}")


def _progress(name: str) -> Optional[Callable[[int, int], None]]:
    if not sys.stderr.isatty():
        return None

    def report(sent: int, total: int) -> None:
        pct = (sent / total * 100.0) if total else 100.0
        sys.stderr.write(f"\r{name}: {pct:5.1f}% ({format_bytes(sent)} / {format_bytes(total)})")
        if sent >= total:
            sys.stderr.write("\n")
        sys.stderr.flush()

    return report


# Handlers

def cmd_set_token(ctx: AppContext, ns: argparse.Namespace) -> None:
    path = save_token(ctx.config_path, ns.token)
    ctx.token = ns.token
    ctx.echo(f"Token saved to {path}")


def cmd_interactive(ctx: AppContext, ns: argparse.Namespace) -> None:
    from .interactive import ConsoleIO, run_menu

    run_menu(ctx, ConsoleIO())


def cmd_upload_anon(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.require_file(ns.file_path)
    ctx.echo(f"Uploading {ns.file_path} anonymously as {ns.file_name} ...")
    ctx.show_response(api.upload_anon(ctx, ns.file_path, ns.file_name,
                                      on_progress=_progress(ns.file_name)))


def cmd_upload_auth(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.require_file(ns.file_path)
    api.bearer_token(ctx, ns.token)
    ctx.echo(f"Uploading {ns.file_path} to user directory {ns.parent_id} as {ns.file_name} ...")
    ctx.show_response(api.upload_auth(ctx, ns.file_path, ns.parent_id, ns.file_name, token=ns.token,
                                      on_progress=_progress(ns.file_name)))


def cmd_upload_loc(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.require_file(ns.file_path)
    ctx.echo(f"Uploading {ns.file_path} to location {ns.location_id} as {ns.file_name} ...")
    ctx.show_response(api.upload_loc(ctx, ns.file_path, ns.file_name, ns.location_id,
                                     on_progress=_progress(ns.file_name)))


def cmd_upload_note(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.require_file(ns.file_path)
    ctx.echo(f"Uploading {ns.file_path} with note ...")
    ctx.show_response(api.upload_note(ctx, ns.file_path, ns.file_name, ns.note,
                                      on_progress=_progress(ns.file_name)))


def cmd_bulk_upload(ctx: AppContext, ns: argparse.Namespace) -> None:
    bulk_upload(ctx, ns.parent_id, ns.files, progress_factory=_progress)


def cmd_locations(ctx: AppContext, ns: argparse.Namespace) -> None:
    ctx.echo("Fetching file storage locations...")
    ctx.show_response(api.get_locations(ctx))


def cmd_account(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.bearer_token(ctx, ns.token)
    ctx.echo("Fetching account info...")
    ctx.show_response(api.get_account(ctx, ns.token))


def cmd_get_root(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.bearer_token(ctx, ns.token)
    ctx.echo("Listing root directory contents...")
    ctx.show_response(api.get_root(ctx, ns.token))


def cmd_get_dir(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.bearer_token(ctx, ns.token)
    ctx.echo(f"Listing directory {ns.directory_id}...")
    ctx.show_response(api.get_directory(ctx, ns.directory_id, ns.token))


def cmd_create_dir(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.bearer_token(ctx, ns.token)
    ctx.echo(f"Creating directory '{ns.name}' under parentId='{ns.parent_id}'...")
    ctx.show_response(api.create_directory(ctx, ns.name, ns.parent_id, ns.token))


def _cmd_rename(kind: str) -> Callable[[AppContext, argparse.Namespace], None]:
    def handler(ctx: AppContext, ns: argparse.Namespace) -> None:
        api.bearer_token(ctx, ns.token)
        ctx.echo(f"Renaming {kind} {ns.entry_id} to {ns.new_name}...")
        ctx.show_response(api.rename_entry(ctx, ns.entry_id, ns.new_name, ns.token))

    return handler


def _cmd_move(kind: str) -> Callable[[AppContext, argparse.Namespace], None]:
    def handler(ctx: AppContext, ns: argparse.Namespace) -> None:
        api.bearer_token(ctx, ns.token)
        ctx.echo(f"Moving {kind} {ns.entry_id} to {ns.new_parent_id}...")
        ctx.show_response(api.move_entry(ctx, ns.entry_id, ns.new_parent_id, ns.token))

    return handler


def cmd_add_note_file(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.bearer_token(ctx, ns.token)
    ctx.echo(f"Updating note for file {ns.file_id}...")
    ctx.show_response(api.set_file_note(ctx, ns.file_id, ns.note, ns.token))


def cmd_delete_dir(ctx: AppContext, ns: argparse.Namespace) -> None:
    api.bearer_token(ctx, ns.token)
    ctx.echo(f"Deleting directory {ns.directory_id}...")
    ctx.show_response(api.delete_directory(ctx, ns.directory_id, ns.token))


def cmd_bulk_delete(ctx: AppContext, ns: argparse.Namespace) -> None:
    bulk_delete(ctx, ns.ids)


@dataclass
class Command:
    handler: Callable[[AppContext, argparse.Namespace], None]
    # (dest, nargs) pairs; nargs None means exactly one
    args: Sequence[Tuple[str, Optional[str]]] = ()


_TOKEN = ("token", "?")

COMMANDS: Dict[str, Command] = {
    "set-token": Command(cmd_set_token, [("token", "?")]),
    "interactive": Command(cmd_interactive),
    "upload-anon": Command(cmd_upload_anon, [("file_path", None), ("file_name", None)]),
    "upload-auth": Command(cmd_upload_auth, [("file_path", None), ("parent_id", None), ("file_name", None), _TOKEN]),
    "upload-loc": Command(cmd_upload_loc, [("file_path", None), ("file_name", None), ("location_id", None)]),
    "upload-note": Command(cmd_upload_note, [("file_path", None), ("file_name", None), ("note", None)]),
    "bulk-upload": Command(cmd_bulk_upload, [("parent_id", "?"), ("files", "*")]),
    "locations": Command(cmd_locations),
    "account": Command(cmd_account, [_TOKEN]),
    "get-root": Command(cmd_get_root, [_TOKEN]),
    "get-dir": Command(cmd_get_dir, [("directory_id", None), _TOKEN]),
    "create-dir": Command(cmd_create_dir, [("name", None), ("parent_id", None), _TOKEN]),
    "rename-dir": Command(_cmd_rename("directory"), [("entry_id", None), ("new_name", None), _TOKEN]),
    "move-dir": Command(_cmd_move("directory"), [("entry_id", None), ("new_parent_id", None), _TOKEN]),
    "rename-file": Command(_cmd_rename("file"), [("entry_id", None), ("new_name", None), _TOKEN]),
    "move-file": Command(_cmd_move("file"), [("entry_id", None), ("new_parent_id", None), _TOKEN]),
    "add-note-file": Command(cmd_add_note_file, [("file_id", None), ("note", None), _TOKEN]),
    "delete-dir": Command(cmd_delete_dir, [("directory_id", None), _TOKEN]),
    "bulk-delete": Command(cmd_bulk_delete, [("ids", "*")]),
}


def build_parser(name: str) -> argparse.ArgumentParser:
    if name not in COMMANDS:
        raise UnknownCommand(name)
    p = _Parser(prog=f"{PROG} {name}", add_help=False)
    for dest, nargs in COMMANDS[name].args:
        if nargs is None:
            p.add_argument(dest)
        else:
            p.add_argument(dest, nargs=nargs)
    return p


def run_command(ctx: AppContext, invocation: Invocation) -> int:
    """Parse the arguments of one command and run it against the API."""
    parser = build_parser(invocation.command)
    # values such as "-draft" are data, never options
    ns = parser.parse_args(["--", *invocation.args])
    try:
        COMMANDS[invocation.command].handler(ctx, ns)
    except httpx.RequestError as exc:
        logger.error("Request failed: %s", exc)
    return 0


def build_context(client: Optional[CloudClient] = None, out=None) -> AppContext:
    config_path = config_path_from_env()
    ctx = AppContext(
        client=client or CloudClient(),
        config_path=config_path,
        token=load_token(config_path),
    )
    if out is not None:
        ctx.out = out
    return ctx


def main(argv: Optional[List[str]] = None, client: Optional[CloudClient] = None, out=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    stream = out or sys.stdout
    if not args:
        print(USAGE, file=stream)
        return 1
    if args[0] in ("help", "-h", "--help"):
        print(USAGE, file=stream)
        return 0

    invocation = Invocation(args[0], args[1:])
    ctx = build_context(client, out)
    try:
        return run_command(ctx, invocation)
    except UnknownCommand as exc:
        ctx.echo(str(exc))
        ctx.echo(USAGE)
        return exc.exit_code
    except BuzzError as exc:
        ctx.echo(f"Error: {exc}")
        return exc.exit_code
    except KeyboardInterrupt:
        ctx.echo()
        return 130
    finally:
        ctx.client.close()


if __name__ == '__main__':
    raise SystemExit(main())
