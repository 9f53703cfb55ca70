import json
from typing import List

import httpx
import pytest

from buzzcli.client import CloudClient
from buzzcli.models import AppContext


class Recorder:
    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: object = {"code": 200, "data": {}}
        self.error: Exception = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, content=self.body)

    @property
    def count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def make_client(recorder):
    def factory() -> CloudClient:
        return CloudClient(
            api_base="https://api.test/api",
            upload_base="https://upload.test",
            transport=httpx.MockTransport(recorder),
        )
    return factory


@pytest.fixture()
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "config" / "buzzheavier-cli" / "config"
    monkeypatch.setenv("BUZZHEAVIER_CONFIG", str(path))
    return path


@pytest.fixture()
def ctx(make_client, config_path):
    context = AppContext(client=make_client(), config_path=config_path)
    yield context
    context.client.close()


@pytest.fixture()
def authed_ctx(ctx):
    ctx.token = "stored-token"
    return ctx


@pytest.fixture()
def sample_file(tmp_path):
    path = tmp_path / "movie.mp4"
    path.write_bytes(b"0123456789" * 10)
    return path
