import json
import os
from typing import Any, Callable, Dict, Iterator, Optional
from urllib.parse import quote

try:
    import httpx
except ModuleNotFoundError as exc:  # pragma: no cover - user environment dependency
    raise ModuleNotFoundError(
        "Missing dependency 'httpx'. Install with: pip install httpx"
    ) from exc

from endpoints import API_BASE, UPLOAD_BASE
from .utils import append_log_line, env_float, get_logger, redacted_headers, truncate_text

CHUNK_SIZE = 64 * 1024

ProgressCallback = Callable[[int, int], None]


def build_path(template: str, **segments: str) -> str:
    """Fill a path template, encoding each value as a single path segment."""
    return template.format(**{k: quote(str(v), safe="") for k, v in segments.items()})


def iter_file(path: str, on_progress: Optional[ProgressCallback] = None) -> Iterator[bytes]:
    total = os.path.getsize(path)
    sent = 0
    with open(path, "rb") as handle:
        while True:
            chunk = handle.read(CHUNK_SIZE)
            if not chunk:
                break
            sent += len(chunk)
            if on_progress is not None:
                on_progress(sent, total)
            yield chunk


class CloudClient:
    def __init__(
        self,
        api_base: Optional[str] = None,
        upload_base: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_base = (api_base or os.getenv("BUZZHEAVIER_API_BASE") or API_BASE).rstrip('/')
        self.upload_base = (upload_base or os.getenv("BUZZHEAVIER_UPLOAD_BASE") or UPLOAD_BASE).rstrip('/')
        self.timeout = timeout if timeout is not None else env_float("BUZZHEAVIER_TIMEOUT")
        self.logger = get_logger('buzzcli')
        self.http_log_path = os.getenv("BUZZHEAVIER_HTTP_LOG")
        self._client = httpx.Client(timeout=self.timeout, transport=transport)

    @staticmethod
    def _auth_headers(token: Optional[str]) -> Dict[str, str]:
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _log_request(self, method: str, url: str, headers: Dict[str, str], payload: Any = None) -> None:
        redacted = redacted_headers(headers)
        self.logger.debug('HTTP %s %s headers=%s', method, url, redacted)
        if not self.http_log_path:
            return
        if payload is not None:
            append_log_line(self.http_log_path, f"{method} {url} headers={redacted} payload={payload}")
        else:
            append_log_line(self.http_log_path, f"{method} {url} headers={redacted}")

    def _log_response(self, method: str, resp: httpx.Response) -> None:
        url = str(resp.request.url)
        if not resp.is_success:
            self.logger.warning('HTTP %s %s returned status %s', method, url, resp.status_code)
        if self.http_log_path:
            append_log_line(
                self.http_log_path,
                f"{method} {url} status={resp.status_code} response={truncate_text(resp.text or '')}",
            )

    def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self.api_base}{path}"
        headers = self._auth_headers(token)
        payload = None
        if json_body is not None:
            payload = json.dumps(json_body, ensure_ascii=False)
        self._log_request(method, url, headers, payload)
        resp = self._client.request(method, url, headers=headers, json=json_body)
        self._log_response(method, resp)
        return resp

    def send_file(
        self,
        method: str,
        path: str,
        file_path: str,
        token: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> httpx.Response:
        url = f"{self.upload_base}{path}"
        headers = self._auth_headers(token)
        headers["Content-Length"] = str(os.path.getsize(file_path))
        self._log_request(method, url, headers)
        body = iter_file(file_path, on_progress)
        try:
            resp = self._client.request(method, url, headers=headers, params=params, content=body)
        except OSError as exc:
            raise httpx.RequestError(f"reading {file_path} failed: {exc}") from exc
        finally:
            body.close()
        self._log_response(method, resp)
        return resp

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CloudClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
