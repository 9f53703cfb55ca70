import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, TextIO

from .utils import render_body

if TYPE_CHECKING:
    from .client import CloudClient


@dataclass
class UploadRequest:
    file_path: str
    file_name: str
    parent_id: Optional[str] = None
    location_id: Optional[str] = None
    note: Optional[str] = None


@dataclass
class Invocation:
    command: str
    args: List[str] = field(default_factory=list)


@dataclass
class BulkItemResult:
    item: str
    status: str
    status_code: Optional[int] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass
class AppContext:
    client: "CloudClient"
    config_path: Path
    token: Optional[str] = None
    out: Optional[TextIO] = None

    def echo(self, text: str = "") -> None:
        print(text, file=self.out or sys.stdout)

    def show_response(self, resp) -> None:
        body = render_body(resp.content)
        if body:
            self.echo(body)
