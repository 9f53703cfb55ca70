import os
from typing import Callable, List, Optional, Sequence

import httpx

from . import api
from .errors import InvalidArgument
from .models import AppContext, BulkItemResult, UploadRequest
from .utils import get_logger

logger = get_logger("buzzcli")


def bulk_upload(
    ctx: AppContext,
    parent_id: str,
    files: Sequence[str],
    token: Optional[str] = None,
    progress_factory: Optional[Callable[[str], Callable[[int, int], None]]] = None,
) -> List[BulkItemResult]:
    """Upload each file into ``parent_id`` under its base name, one at a time.

    Missing files are skipped with a warning and transport failures are
    recorded; neither stops the loop. Earlier uploads are never rolled back.
    """
    if not parent_id or not files:
        raise InvalidArgument("Usage: bulk-upload <parentId> <file1> [file2] ...")
    bearer = api.bearer_token(ctx, token)

    results: List[BulkItemResult] = []
    for file_path in files:
        if not os.path.isfile(file_path):
            ctx.echo(f"Warning: {file_path} does not exist, skipping...")
            results.append(BulkItemResult(file_path, "skipped", detail="file does not exist"))
            continue
        file_name = os.path.basename(file_path)
        ctx.echo(f"Bulk uploading {file_name} to directory {parent_id}...")
        on_progress = progress_factory(file_name) if progress_factory else None
        try:
            resp = api.upload(ctx, UploadRequest(file_path, file_name, parent_id=parent_id),
                              token=bearer, on_progress=on_progress)
        except httpx.RequestError as exc:
            logger.error("Upload of %s failed: %s", file_path, exc)
            results.append(BulkItemResult(file_path, "failed", detail=str(exc)))
            continue
        ctx.show_response(resp)
        results.append(BulkItemResult(file_path, "ok", status_code=resp.status_code))
    return results


def bulk_delete(ctx: AppContext, ids: Sequence[str], token: Optional[str] = None) -> List[BulkItemResult]:
    if not ids:
        raise InvalidArgument("Usage: bulk-delete <dirId1> [dirId2] [dirId3] ...")
    bearer = api.bearer_token(ctx, token)

    results: List[BulkItemResult] = []
    for dir_id in ids:
        ctx.echo(f"Deleting directory: {dir_id}")
        try:
            resp = api.delete_directory(ctx, dir_id, token=bearer)
        except httpx.RequestError as exc:
            logger.error("Delete of %s failed: %s", dir_id, exc)
            results.append(BulkItemResult(dir_id, "failed", detail=str(exc)))
            continue
        ctx.show_response(resp)
        results.append(BulkItemResult(dir_id, "ok", status_code=resp.status_code))
    return results
