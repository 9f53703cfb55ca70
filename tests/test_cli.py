import json

import httpx
import pytest

from buzzcli.cli import COMMANDS, main


ALL_COMMANDS = {
    "set-token", "interactive", "upload-anon", "upload-auth", "upload-loc", "upload-note",
    "bulk-upload", "locations", "account", "get-root", "get-dir", "create-dir", "rename-dir",
    "move-dir", "rename-file", "move-file", "add-note-file", "delete-dir", "bulk-delete",
}


def test_command_set_is_complete():
    assert set(COMMANDS) == ALL_COMMANDS


@pytest.mark.parametrize("name", ["upload", "rm", "list", "SET-TOKEN"])
def test_unknown_command_exits_1_with_usage(name, make_client, config_path, recorder, capsys):
    assert main([name], client=make_client()) == 1
    out = capsys.readouterr().out
    assert f"Unknown command: {name}" in out
    assert "Usage:" in out
    assert recorder.count == 0


def test_no_arguments_prints_usage(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_help_exits_0(capsys):
    assert main(["--help"]) == 0
    assert "bulk-upload" in capsys.readouterr().out


def test_set_token_then_account_sends_bearer(make_client, config_path, recorder, capsys):
    assert main(["set-token", "abc123"], client=make_client()) == 0
    assert f"Token saved to {config_path}" in capsys.readouterr().out

    assert main(["account"], client=make_client()) == 0
    req = recorder.last
    assert req.url.path == "/api/account"
    assert req.headers["Authorization"] == "Bearer abc123"


def test_set_token_without_value_exits_1(make_client, config_path, capsys):
    assert main(["set-token"], client=make_client()) == 1
    assert "You must provide a token" in capsys.readouterr().out
    assert not config_path.exists()


def test_explicit_token_argument_overrides_stored(make_client, config_path, recorder):
    main(["set-token", "stored"], client=make_client())
    assert main(["get-root", "explicit"], client=make_client()) == 0
    assert recorder.last.headers["Authorization"] == "Bearer explicit"


def test_missing_credential_exits_1(make_client, config_path, recorder, capsys):
    assert main(["account"], client=make_client()) == 1
    assert "set-token" in capsys.readouterr().out
    assert recorder.count == 0


def test_create_dir_end_to_end(make_client, config_path, recorder, capsys):
    main(["set-token", "tok"], client=make_client())
    recorder.body = {"code": 201, "data": {"id": "new1", "name": "Movies"}}

    assert main(["create-dir", "Movies", "root123"], client=make_client()) == 0

    req = recorder.last
    assert req.method == "POST"
    assert req.url.path == "/api/fs"
    assert json.loads(req.content) == {"name": "Movies", "parentId": "root123"}
    out = capsys.readouterr().out
    assert "Creating directory 'Movies' under parentId='root123'..." in out
    assert '"id": "new1"' in out


def test_upload_anon_missing_file_exits_1_without_request(make_client, config_path, recorder, tmp_path, capsys):
    missing = tmp_path / "nope.mp4"
    assert main(["upload-anon", str(missing), "nope.mp4"], client=make_client()) == 1
    assert recorder.count == 0
    out = capsys.readouterr().out
    assert f"file does not exist: {missing}" in out
    assert "Uploading" not in out


def test_upload_note_via_cli(make_client, config_path, recorder, sample_file):
    assert main(["upload-note", str(sample_file), "movie.mp4", "hello world"], client=make_client()) == 0
    assert recorder.last.url.params["note"] == "aGVsbG8gd29ybGQ="


def test_missing_positional_argument_exits_1(make_client, config_path, recorder, capsys):
    assert main(["get-dir"], client=make_client()) == 1
    assert "usage: buzzheavier get-dir" in capsys.readouterr().out
    assert recorder.count == 0


def test_too_many_arguments_exits_1(make_client, config_path, recorder):
    assert main(["locations", "extra"], client=make_client()) == 1
    assert recorder.count == 0


def test_api_error_body_is_printed_and_exit_is_0(make_client, config_path, recorder, capsys):
    recorder.status_code = 403
    recorder.body = {"error": "forbidden"}
    assert main(["locations"], client=make_client()) == 0
    assert '"error": "forbidden"' in capsys.readouterr().out


def test_non_json_body_printed_verbatim(make_client, config_path, recorder, capsys):
    recorder.body = b"plain text reply"
    assert main(["locations"], client=make_client()) == 0
    assert "plain text reply" in capsys.readouterr().out


def test_transport_failure_is_reported_and_exit_is_0(make_client, config_path, recorder):
    recorder.error = httpx.ConnectError("unreachable")
    assert main(["locations"], client=make_client()) == 0
    assert recorder.count == 1


def test_bulk_upload_via_cli(make_client, config_path, recorder, tmp_path, capsys):
    main(["set-token", "tok"], client=make_client())
    a = tmp_path / "a.bin"
    a.write_bytes(b"a")
    assert main(["bulk-upload", "p1", str(a), str(tmp_path / "gone.bin")], client=make_client()) == 0
    assert recorder.count == 1
    assert "skipping" in capsys.readouterr().out


def test_bulk_upload_without_files_exits_1(make_client, config_path, recorder):
    main(["set-token", "tok"], client=make_client())
    assert main(["bulk-upload", "p1"], client=make_client()) == 1
    assert recorder.count == 0


def test_bulk_delete_via_cli(make_client, config_path, recorder):
    main(["set-token", "tok"], client=make_client())
    assert main(["bulk-delete", "d1", "d2", "d3"], client=make_client()) == 0
    assert [r.url.path for r in recorder.requests] == ["/api/fs/d1", "/api/fs/d2", "/api/fs/d3"]


def test_values_starting_with_dash_are_positional(make_client, config_path, recorder):
    assert main(["set-token", "-Abc123"], client=make_client()) == 0
    assert main(["add-note-file", "f1", "-draft"], client=make_client()) == 0
    req = recorder.last
    assert req.url.path == "/api/fs/f1"
    assert json.loads(req.content) == {"note": "-draft"}
    assert req.headers["Authorization"] == "Bearer -Abc123"


def test_dash_prefixed_explicit_token(make_client, config_path, recorder):
    assert main(["get-dir", "d1", "--tok"], client=make_client()) == 0
    assert recorder.last.headers["Authorization"] == "Bearer --tok"


def test_redirect_loop_is_reported_and_exit_is_0(make_client, config_path, recorder):
    recorder.error = httpx.TooManyRedirects("too many redirects")
    assert main(["locations"], client=make_client()) == 0
