import shlex
from typing import Callable, Optional, Protocol

from .errors import BuzzError
from .models import AppContext, Invocation
from .utils import get_logger

logger = get_logger("buzzcli")

MENU = """\
========== Buzzheavier CLI Interactive Menu ==========
 1) Set Token
 2) Show Account Info
 3) Upload File (Anon)
 4) Upload File (Auth)
 5) Bulk Upload (Auth)
 6) List Root Directory
 7) Create Directory
 8) Delete Directory
 9) Bulk Delete Directories
10) Get Storage Locations
11) Quit
======================================================"""

QUIT_CHOICE = "11"


class LineIO(Protocol):
    def read_line(self, prompt: str) -> str:
        ...

    def write_line(self, text: str) -> None:
        ...


class ConsoleIO:
    def read_line(self, prompt: str) -> str:
        return input(prompt)

    def write_line(self, text: str) -> None:
        print(text)


Prompt = Callable[[str], str]


def _set_token(ask: Prompt) -> Invocation:
    return Invocation("set-token", [ask("Enter new token: ")])


def _upload_anon(ask: Prompt) -> Invocation:
    path = ask("Enter file path: ")
    name = ask("Enter file name as stored: ")
    return Invocation("upload-anon", [path, name])


def _upload_auth(ask: Prompt) -> Invocation:
    path = ask("Enter file path: ")
    parent_id = ask("Enter parentId: ")
    name = ask("Enter file name as stored: ")
    return Invocation("upload-auth", [path, parent_id, name])


def _bulk_upload(ask: Prompt) -> Invocation:
    parent_id = ask("Enter parentId for bulk upload: ")
    files = shlex.split(ask("Enter paths for files to upload (space-separated): "))
    return Invocation("bulk-upload", [parent_id] + files)


def _create_dir(ask: Prompt) -> Invocation:
    name = ask("Enter new directory name: ")
    parent_id = ask("Enter parentId: ")
    return Invocation("create-dir", [name, parent_id])


def _delete_dir(ask: Prompt) -> Invocation:
    return Invocation("delete-dir", [ask("Enter directoryId to delete: ")])


def _bulk_delete(ask: Prompt) -> Invocation:
    return Invocation("bulk-delete", shlex.split(ask("Enter directoryIds to bulk-delete (space-separated): ")))


def _no_args(command: str) -> Callable[[Prompt], Invocation]:
    return lambda ask: Invocation(command)


CHOICES = {
    "1": _set_token,
    "2": _no_args("account"),
    "3": _upload_anon,
    "4": _upload_auth,
    "5": _bulk_upload,
    "6": _no_args("get-root"),
    "7": _create_dir,
    "8": _delete_dir,
    "9": _bulk_delete,
    "10": _no_args("locations"),
}


def run_menu(ctx: AppContext, io: LineIO, runner: Optional[Callable[[AppContext, Invocation], int]] = None) -> int:
    """Loop over the numbered menu until Quit, end of input or Ctrl-C."""
    if runner is None:
        from .cli import run_command as runner

    try:
        while True:
            io.write_line("")
            io.write_line(MENU)
            choice = io.read_line("Choose an option (1-11): ").strip()
            if choice == QUIT_CHOICE:
                break
            build = CHOICES.get(choice)
            if build is None:
                io.write_line("Invalid choice.")
                continue
            try:
                invocation = build(io.read_line)
                runner(ctx, invocation)
            except (BuzzError, ValueError) as exc:
                logger.debug("Menu choice %s failed: %r", choice, exc)
                io.write_line(f"Error: {exc}")
    except (EOFError, KeyboardInterrupt):
        io.write_line("")
    io.write_line("Exiting Interactive Mode.")
    return 0
