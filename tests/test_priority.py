import pytest

from prockit.priority import Priority, PriorityError, PriorityKind


def test_parse():
    assert Priority.parse("-4") == Priority(PriorityKind.DECREASE, 4)
    assert Priority.parse("+4") == Priority(PriorityKind.INCREASE, 4)
    assert Priority.parse("4") == Priority(PriorityKind.TO, 4)


@pytest.mark.parametrize("text", ["-4-", "+4+", "", "abc", "-", "4294967296"])
def test_parse_errors(text):
    with pytest.raises(PriorityError) as exc:
        Priority.parse(text)
    assert str(exc.value) == f"failed to parse argument: '{text}'"
    assert exc.value.value == text


def test_to_string():
    assert str(Priority(PriorityKind.DECREASE, 4)) == "-4"
    assert str(Priority(PriorityKind.INCREASE, 4)) == "+4"
    assert str(Priority(PriorityKind.TO, 4)) == "4"


def test_default():
    assert Priority.default() == Priority(PriorityKind.INCREASE, 4)
    assert str(Priority.default()) == "+4"


def test_apply():
    assert Priority.parse("+3").apply(5) == 8
    assert Priority.parse("-3").apply(5) == 2
    assert Priority.parse("10").apply(5) == 10


@pytest.mark.parametrize("text", ["-7", "+0", "19"])
def test_round_trip(text):
    assert str(Priority.parse(text)) == text