import os

import pytest

from prockit.top import (
    Filter,
    FilterKind,
    apply_width,
    collect,
    construct_filter,
    main,
    render_table,
    selected_fields,
    try_into_uid,
)


def test_apply_width_truncates():
    assert apply_width("abcdef", 3) == "abc"


def test_apply_width_pads():
    assert apply_width("ab", 5) == "ab   "


def test_try_into_uid_numeric():
    assert try_into_uid("0") == "0"
    assert try_into_uid("19999") == "19999"


def test_try_into_uid_root_name():
    assert try_into_uid("root") == "0"


def test_try_into_uid_unknown_user():
    with pytest.raises(ValueError, match="Invalid user"):
        try_into_uid("NOT_EXIST")


def test_selected_fields_order():
    fields = selected_fields()
    assert fields[0] == "PID"
    assert fields[-1] == "COMMAND"
    assert len(fields) == 12


def test_no_filter_accepts_everything():
    accept = construct_filter(None)
    assert accept(1) and accept(123456)


def test_pid_filter():
    accept = construct_filter(Filter(FilterKind.PID, (1, 2)))
    assert accept(1)
    assert not accept(3)


def test_collect_own_pid():
    pid = os.getpid()
    rows = collect(Filter(FilterKind.PID, (pid,)), ["PID"])
    assert rows == [[str(pid)]]


def test_render_table_columns_align():
    text = render_table([["A", "BB"], ["CCC", "D"]])
    lines = text.split("\n")
    assert [line.split() for line in lines] == [["A", "BB"], ["CCC", "D"]]
    assert len(lines[0]) == len(lines[1])


def test_render_table_width_cut():
    text = render_table([["ABCDEFGH", "X"]], width=4)
    assert text == " ABC"


def test_invalid_arg():
    with pytest.raises(SystemExit) as info:
        main(["--definitely-invalid"])
    assert info.value.code == 1


def test_conflict_arg():
    with pytest.raises(SystemExit) as info:
        main(["-p=0", "-U=0"])
    assert info.value.code == 1


def _check_root_rows(output):
    rows = [line.split() for line in output.splitlines()]
    rows = [row for row in rows if len(row) >= 2 and row[0].isdigit()]
    return all(row[1] == "root" for row in rows)


def test_flag_user_by_name(capsys):
    assert main(["-U=root"]) == 0
    assert _check_root_rows(capsys.readouterr().out)


def test_flag_user_by_uid(capsys):
    assert main(["-U=0"]) == 0
    assert _check_root_rows(capsys.readouterr().out)


def test_flag_user_unknown_uid_succeeds():
    assert main(["-U=19999"]) == 0


def test_flag_user_not_exist(capsys):
    assert main(["-U=NOT_EXIST"]) == 1
    assert "Invalid user" in capsys.readouterr().err


@pytest.mark.parametrize("args", [["-p=1"], ["-p=1,2,3"], ["-p=1", "-p=2", "-p=3"]])
def test_arg_p(args, capsys):
    assert main(args) == 0
    assert "PID" in capsys.readouterr().out


def test_list_fields(capsys):
    assert main(["-O"]) == 0
    assert "PID" in capsys.readouterr().out.split()