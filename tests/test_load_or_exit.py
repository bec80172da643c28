"""
Tests for the print-and-exit entry point wrapper.
"""

from pathlib import Path

import pytest

from demo_options import DemoOption
from settings_loader import SettingsLoader, load_or_exit


def test_returns_resolved_settings(tmp_path: Path):
    config_path = tmp_path / "app.conf"
    _ = config_path.write_text("port=7000\noutput=build\n")

    snapshot = load_or_exit(DemoOption, ["-o", "dist"], config_path)

    assert snapshot[DemoOption.PORT] == "7000"
    assert snapshot[DemoOption.OUTPUT] == "dist"
    assert snapshot[DemoOption.VERBOSE] == "false"


def test_missing_config_file_uses_defaults(tmp_path: Path):
    snapshot = load_or_exit(DemoOption, [], tmp_path / "absent.conf")
    assert dict(snapshot) == {option: option.default_value for option in DemoOption}


def test_help_prints_every_option_and_exits_zero(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as exc_info:
        _ = load_or_exit(DemoOption, ["--help", "--bogus"])

    assert exc_info.value.code == 0
    out = capsys.readouterr().out
    assert out == "".join(option.help_description() for option in DemoOption)
    assert "-v, --verbose\n\tPrint progress information\n" in out


def test_unknown_flag_exits_one(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as exc_info:
        _ = load_or_exit(DemoOption, ["--unknown", "x"])

    assert exc_info.value.code == 1
    assert "Argument --unknown is not a valid flag." in capsys.readouterr().err


def test_missing_argument_exits_three(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as exc_info:
        _ = load_or_exit(DemoOption, ["-v"])

    assert exc_info.value.code == 3
    assert "Flag -v requires an argument." in capsys.readouterr().err


def test_malformed_config_line_exits_two(tmp_path: Path):
    config_path = tmp_path / "app.conf"
    _ = config_path.write_text("verbose\n")

    with pytest.raises(SystemExit) as exc_info:
        _ = load_or_exit(DemoOption, [], config_path)

    assert exc_info.value.code == 2


def test_unknown_config_key_exits_one(tmp_path: Path):
    config_path = tmp_path / "app.conf"
    _ = config_path.write_text("colour=blue\n")

    with pytest.raises(SystemExit) as exc_info:
        _ = load_or_exit(DemoOption, [], config_path)

    assert exc_info.value.code == 1


def test_unreadable_config_file_exits_four(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    """A directory in place of the file is reported, not a traceback."""
    with pytest.raises(SystemExit) as exc_info:
        _ = load_or_exit(DemoOption, [], tmp_path)

    assert exc_info.value.code == 4
    assert "Cannot read configuration file" in capsys.readouterr().err


# =============================================================================
# OUTPUT TESTS
# =============================================================================


def test_error_is_the_only_stderr_output(capsys: pytest.CaptureFixture[str]):
    """No log lines accompany the error message."""
    with pytest.raises(SystemExit):
        _ = load_or_exit(DemoOption, ["--unknown", "x"])

    captured = capsys.readouterr()
    assert captured.err.strip() == (
        "Argument --unknown is not a valid flag. See --help for options."
    )
    assert captured.out == ""


def test_successful_load_writes_nothing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    config_path = tmp_path / "app.conf"
    _ = config_path.write_text("port=7000\n")

    _ = load_or_exit(DemoOption, ["-p", "1"], config_path)
    loader = SettingsLoader(DemoOption)
    loader.apply_argument_vector(["-o", "dist"])

    captured = capsys.readouterr()
    assert captured.err == ""
    assert captured.out == ""
