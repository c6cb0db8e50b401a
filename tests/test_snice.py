import os

from prockit.snice import (
    ALL_SIGNALS,
    collect_pids,
    format_signal_list,
    format_signal_table,
    main,
    verbose_report,
)
from prockit.snice_action import ActionResult, SelectedTarget, TargetKind


def test_signal_display_list():
    assert format_signal_list(ALL_SIGNALS) == (
        "HUP INT QUIT ILL TRAP ABRT BUS FPE KILL USR1 SEGV USR2 PIPE ALRM TERM STKFLT\n"
        "CHLD CONT STOP TSTP TTIN TTOU URG XCPU XFSZ VTALRM PROF WINCH POLL PWR SYS"
    )


def test_signal_display_table():
    assert format_signal_table(ALL_SIGNALS) == (
        " 1 HUP      2 INT      3 QUIT     4 ILL      5 TRAP     6 ABRT     7 BUS\n"
        " 8 FPE      9 KILL    10 USR1    11 SEGV    12 USR2    13 PIPE    14 ALRM\n"
        "15 TERM    16 STKFLT  17 CHLD    18 CONT    19 STOP    20 TSTP    21 TTIN\n"
        "22 TTOU    23 URG     24 XCPU    25 XFSZ    26 VTALRM  27 PROF    28 WINCH\n"
        "29 POLL    30 PWR     31 SYS"
    )


def test_no_args_fails():
    assert main([]) == 1


def test_no_process_selected():
    assert main(["-u=invalid_user"]) == 1


def test_invalid_priority_fails(capsys):
    assert main(["4-", "-p", "1"]) == 1
    assert "failed to parse argument: '4-'" in capsys.readouterr().err


def test_list_flag_prints_signals(capsys):
    assert main(["-l"]) == 0
    assert capsys.readouterr().out == format_signal_list(ALL_SIGNALS) + "\n"


def test_table_flag_prints_table(capsys):
    assert main(["-L"]) == 0
    assert capsys.readouterr().out == format_signal_table(ALL_SIGNALS) + "\n"


def test_collect_pids_deduplicates_and_sorts():
    targets = [
        SelectedTarget(TargetKind.PID, 5),
        SelectedTarget(TargetKind.PID, 3),
        SelectedTarget(TargetKind.PID, 5),
    ]
    assert collect_pids(targets) == [3, 5]


def test_verbose_report_skips_unknown_results():
    assert verbose_report([os.getpid()], [None]) == ""


def test_verbose_report_lists_process():
    report = verbose_report([os.getpid()], [ActionResult.SUCCESS])
    assert len(report.splitlines()) == 1
    fields = report.split()
    assert str(os.getpid()) in fields
    assert fields[-1] == "Success"


def test_renice_self_with_zero_change():
    assert main(["+0", "-p", str(os.getpid())]) == 0