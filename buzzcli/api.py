import base64
import os
from typing import Any, Dict, Optional

import httpx

from endpoints import ACCOUNT, FS, NOTE_MAX_CHARS, UPLOAD
from .client import ProgressCallback, build_path
from .errors import FileNotFound, InvalidArgument
from .models import AppContext, UploadRequest
from .session_store import resolve_token


def _require(value: Optional[str], name: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgument(f"Missing required argument: {name}")
    return value


def require_file(file_path: Optional[str]) -> str:
    _require(file_path, "filePath")
    if not os.path.isfile(file_path):
        raise FileNotFound(file_path)
    return file_path


def bearer_token(ctx: AppContext, token: Optional[str] = None) -> str:
    return resolve_token(ctx.token, token, ctx.config_path)


def encode_note(note: str) -> str:
    if len(note) > NOTE_MAX_CHARS:
        raise InvalidArgument(f"Note is limited to {NOTE_MAX_CHARS} characters (got {len(note)})")
    return base64.b64encode(note.encode("utf-8")).decode("ascii")


def _call(ctx: AppContext, endpoint: Dict[str, Any], token: Optional[str] = None,
          json_body: Optional[Dict[str, Any]] = None, **segments: str) -> httpx.Response:
    bearer = bearer_token(ctx, token) if endpoint["auth"] else None
    path = build_path(endpoint["path"], **segments)
    return ctx.client.request(endpoint["method"], path, token=bearer, json_body=json_body)


# File uploads

def upload(ctx: AppContext, req: UploadRequest, token: Optional[str] = None,
           on_progress: Optional[ProgressCallback] = None) -> httpx.Response:
    """PUT a local file to the upload host.

    With ``parent_id`` the upload is authenticated and lands in that
    directory; otherwise it is anonymous, optionally pinned to a storage
    location and/or carrying a note.
    """
    require_file(req.file_path)
    _require(req.file_name, "fileName")
    params: Dict[str, str] = {}
    if req.location_id is not None:
        params["locationId"] = _require(req.location_id, "locationId")
    if req.note is not None:
        params["note"] = encode_note(req.note)

    segments = {"fileName": req.file_name}
    if req.parent_id is not None:
        endpoint = UPLOAD["directory"]
        segments["parentId"] = _require(req.parent_id, "parentId")
    else:
        endpoint = UPLOAD["anonymous"]
    bearer = bearer_token(ctx, token) if endpoint["auth"] else None
    path = build_path(endpoint["path"], **segments)
    return ctx.client.send_file(endpoint["method"], path, req.file_path, token=bearer,
                                params=params or None, on_progress=on_progress)


def upload_anon(ctx: AppContext, file_path: str, file_name: str, **kwargs: Any) -> httpx.Response:
    return upload(ctx, UploadRequest(file_path, file_name), **kwargs)


def upload_auth(ctx: AppContext, file_path: str, parent_id: str, file_name: str,
                token: Optional[str] = None, **kwargs: Any) -> httpx.Response:
    return upload(ctx, UploadRequest(file_path, file_name, parent_id=parent_id or ""), token=token, **kwargs)


def upload_loc(ctx: AppContext, file_path: str, file_name: str, location_id: str,
               **kwargs: Any) -> httpx.Response:
    return upload(ctx, UploadRequest(file_path, file_name, location_id=location_id or ""), **kwargs)


def upload_note(ctx: AppContext, file_path: str, file_name: str, note: str,
                **kwargs: Any) -> httpx.Response:
    return upload(ctx, UploadRequest(file_path, file_name, note=note or ""), **kwargs)


# Public / account

def get_locations(ctx: AppContext) -> httpx.Response:
    return _call(ctx, ACCOUNT["locations"])


def get_account(ctx: AppContext, token: Optional[str] = None) -> httpx.Response:
    return _call(ctx, ACCOUNT["info"], token)


# File manager

def get_root(ctx: AppContext, token: Optional[str] = None) -> httpx.Response:
    return _call(ctx, FS["root"], token)


def get_directory(ctx: AppContext, directory_id: str, token: Optional[str] = None) -> httpx.Response:
    return _call(ctx, FS["get"], token, id=_require(directory_id, "directoryId"))


def create_directory(ctx: AppContext, name: str, parent_id: str, token: Optional[str] = None) -> httpx.Response:
    body = {"name": _require(name, "name"), "parentId": _require(parent_id, "parentId")}
    return _call(ctx, FS["create"], token, json_body=body)


def rename_entry(ctx: AppContext, entry_id: str, new_name: str, token: Optional[str] = None) -> httpx.Response:
    body = {"name": _require(new_name, "newName")}
    return _call(ctx, FS["rename"], token, json_body=body, id=_require(entry_id, "id"))


def move_entry(ctx: AppContext, entry_id: str, new_parent_id: str, token: Optional[str] = None) -> httpx.Response:
    body = {"parentId": _require(new_parent_id, "newParentId")}
    return _call(ctx, FS["move"], token, json_body=body, id=_require(entry_id, "id"))


def set_file_note(ctx: AppContext, file_id: str, note: str, token: Optional[str] = None) -> httpx.Response:
    return _call(ctx, FS["note"], token, json_body={"note": note or ""}, id=_require(file_id, "fileId"))


def delete_directory(ctx: AppContext, directory_id: str, token: Optional[str] = None) -> httpx.Response:
    return _call(ctx, FS["delete"], token, id=_require(directory_id, "directoryId"))


rename_directory = rename_file = rename_entry
move_directory = move_file = move_entry
