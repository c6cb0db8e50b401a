from datetime import timedelta

import pytest

from prockit.watch import main, parse_interval, run_watch


def test_comma_parse():
    assert parse_interval("1,5") == timedelta(milliseconds=1500)


def test_different_nanos_length():
    assert parse_interval("1.12345") == timedelta(seconds=1, microseconds=123450)
    assert parse_interval("1.1234") == timedelta(seconds=1, microseconds=123400)


def test_period_parse():
    assert parse_interval("1.5") == timedelta(milliseconds=1500)


def test_empty_seconds_interval():
    assert parse_interval(".5") == timedelta(milliseconds=500)


def test_seconds_only():
    assert parse_interval("7") == timedelta(seconds=7)


def test_empty_nanoseconds_interval():
    assert parse_interval("1.") == timedelta(milliseconds=1000)


def test_too_many_nanos():
    assert parse_interval("1.00000000009") == timedelta(seconds=1)


def test_invalid_nano():
    with pytest.raises(ValueError):
        parse_interval("1.00000000000a")


def test_fraction_is_clamped_to_minimum():
    assert parse_interval("0.05") == timedelta(milliseconds=100)


def test_whole_zero_is_not_clamped():
    assert parse_interval("0") == timedelta(0)


@pytest.mark.parametrize("text", ["", "abc", "definitely-not-valid", "1.5.3", "-1", "1.x"])
def test_invalid_intervals(text):
    with pytest.raises(ValueError):
        parse_interval(text)


def test_run_watch_stops_on_failure(tmp_path):
    counter = tmp_path / "count"
    command = f'echo x >> "{counter}"; test $(wc -l < "{counter}") -lt 3'
    code = run_watch(command, timedelta(milliseconds=100))
    assert code == 1
    assert counter.read_text().count("x") == 3


def test_run_watch_reports_failure(capsys):
    assert run_watch("exit 7", 0.1) == 7
    assert "watch: command failed: exit status: 7" in capsys.readouterr().err


def test_invalid_interval(capsys):
    assert main(["-n", "definitely-not-valid", "true"]) == 1
    err = capsys.readouterr().err
    assert "Invalid argument" in err
    assert "definitely-not-valid" in err


def test_invalid_arg():
    with pytest.raises(SystemExit) as excinfo:
        main(["--definitely-invalid"])
    assert excinfo.value.code == 1


def test_main_exits_cleanly_after_command_failure(capsys):
    assert main(["-n", "0.1", "false"]) == 0
    assert "command failed" in capsys.readouterr().err