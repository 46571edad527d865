"""Tests for entauth.output -- stream discipline and formats."""

from __future__ import annotations

import json

import pytest

from entauth.output import OutputFormat, OutputManager, debug, get_output, reset_output, set_output


class TestDiagnostics:
    def test_error_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN, no_color=True).error("bad thing")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error: bad thing" in captured.err

    def test_quiet_suppresses_info_not_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        out = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        out.info("hello")
        out.success("done")
        out.error("broken")
        err = capsys.readouterr().err
        assert "hello" not in err
        assert "done" not in err
        assert "broken" in err

    def test_debug_only_when_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("hidden")
        OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True).debug("shown")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "[debug] shown" in err

    def test_module_helpers_use_global(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True))
        debug("via global")
        assert "via global" in capsys.readouterr().err

    def test_get_output_creates_default(self) -> None:
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        OutputManager(format=OutputFormat.PLAIN).warning("careful")
        assert "Warning: careful" in capsys.readouterr().err


class TestFormatResolution:
    def test_auto_is_plain_when_not_a_tty(self) -> None:
        # pytest captures stdout, so it is never a TTY here.
        assert OutputManager().format == OutputFormat.PLAIN

    def test_explicit_format_wins(self) -> None:
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestFormatResponse:
    def test_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.JSON).format_response({"logged_in": True, "source": None})
        data = json.loads(capsys.readouterr().out)
        assert data == {"logged_in": True, "source": None}

    def test_plain(self, capsys: pytest.CaptureFixture[str]) -> None:
        OutputManager(format=OutputFormat.PLAIN).format_response(
            {"logged_in": False, "source": None, "auth_header": "x-access-auth-token"}
        )
        lines = capsys.readouterr().out.splitlines()
        assert lines == ["logged_in\tno", "source\t-", "auth_header\tx-access-auth-token"]


class TestRichMarkupEscaping:
    @pytest.fixture(autouse=True)
    def _colour_allowed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")

    def test_bracketed_text_survives_in_diagnostics(self, capsys: pytest.CaptureFixture[str]) -> None:
        detail = "[type=list_type, input_value={}, input_type=dict]"
        out = OutputManager(format=OutputFormat.PLAIN, verbose=True)
        out.info(f"info {detail}")
        out.success(f"success {detail}")
        out.warning(f"warning {detail}")
        out.error(f"error {detail}")
        out.suggest(f"suggest {detail}")
        err = capsys.readouterr().err
        for label in ("info", "success", "warning", "error", "suggest"):
            assert f"{label} {detail}" in err
