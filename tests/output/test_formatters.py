"""Tests for format_result output mode selection."""

import json

import pytest

from linknav.output.formatters import OutputSettings, format_result
from linknav.services.result import ServiceResult

_OK = ServiceResult(ok=True, op="rebuild_cache", data={"total": 4, "failed": 0, "cached": 4})
_ERR = ServiceResult.failure("links", "NOT_FOUND", "No document found for 'Ghost'", target="Ghost")


class TestOutputSettings:
    def test_defaults(self) -> None:
        settings = OutputSettings()
        assert (settings.json_output, settings.quiet, settings.verbose) == (False, False, False)

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            OutputSettings().quiet = True  # type: ignore[misc]


class TestJsonMode:
    def test_success(self) -> None:
        payload = json.loads(format_result(_OK, settings=OutputSettings(json_output=True)))
        assert payload["ok"] is True
        assert payload["op"] == "rebuild_cache"
        assert payload["data"]["cached"] == 4

    def test_error(self) -> None:
        payload = json.loads(format_result(_ERR, json_output=True))
        assert payload["ok"] is False
        assert payload["error"]["code"] == "NOT_FOUND"
        assert payload["error"]["detail"] == {"target": "Ghost"}

    def test_settings_take_precedence(self) -> None:
        output = format_result(_OK, settings=OutputSettings(quiet=True), json_output=True)
        assert output == "OK: rebuild_cache"


class TestHumanModes:
    def test_quiet(self) -> None:
        assert format_result(_OK, settings=OutputSettings(quiet=True)) == "OK: rebuild_cache"

    def test_quiet_error(self) -> None:
        output = format_result(_ERR, settings=OutputSettings(quiet=True))
        assert output.startswith("ERROR: links")
        assert "Ghost" in output

    def test_default(self) -> None:
        output = format_result(_OK)
        assert "OK" in output
        assert "cached" in output

    def test_verbose_shows_error_detail(self) -> None:
        output = format_result(_ERR, settings=OutputSettings(verbose=True))
        assert "ERROR" in output
        assert "target: Ghost" in output
