import pytest

from neuroshell.core.common.exceptions import IndexOutOfBoundsError
from neuroshell.core.utils.message_index import (
    IndexResolution,
    ordinal_suffix,
    resolve_index,
)


@pytest.mark.parametrize(
    ("spec", "expected"),
    [
        ("1", IndexResolution(4, "last message")),
        ("2", IndexResolution(3, "second-to-last message")),
        ("3", IndexResolution(2, "third-to-last message")),
        ("4", IndexResolution(1, "4th from last message")),
        (".1", IndexResolution(0, "first message")),
        (".2", IndexResolution(1, "second message")),
        (".3", IndexResolution(2, "third message")),
        (".5", IndexResolution(4, "5th message")),
        (" 1 ", IndexResolution(4, "last message")),
    ],
)
def test_resolve_index(spec: str, expected: IndexResolution) -> None:
    assert resolve_index(spec, 5) == expected


@pytest.mark.parametrize("spec", ["0", "6", ".6", ".0", "-1", "abc", "", ".", "1.5"])
def test_invalid_indices_fail(spec: str) -> None:
    with pytest.raises(IndexOutOfBoundsError) as exc_info:
        resolve_index(spec, 5)
    assert "valid range: 1-5" in exc_info.value.message


def test_error_names_the_mode() -> None:
    with pytest.raises(IndexOutOfBoundsError) as reverse:
        resolve_index("6", 5)
    with pytest.raises(IndexOutOfBoundsError) as forward:
        resolve_index(".6", 5)

    assert "Reverse order index 6" in reverse.value.message
    assert "Normal order index .6" in forward.value.message


def test_empty_list_has_no_valid_index() -> None:
    with pytest.raises(IndexOutOfBoundsError) as exc_info:
        resolve_index("1", 0)
    assert "there are no messages" in exc_info.value.message


@pytest.mark.parametrize(
    ("n", "suffix"),
    [(1, "st"), (2, "nd"), (3, "rd"), (4, "th"), (11, "th"), (12, "th"), (13, "th"),
     (21, "st"), (22, "nd"), (23, "rd"), (101, "st"), (111, "th"), (112, "th")],
)
def test_ordinal_suffix(n: int, suffix: str) -> None:
    assert ordinal_suffix(n) == suffix


def test_teen_labels_use_th() -> None:
    assert resolve_index("11", 20).label == "11th from last message"
    assert resolve_index(".12", 20).label == "12th message"
    assert resolve_index(".13", 20).label == "13th message"
