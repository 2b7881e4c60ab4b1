import pytest

from services.llm_generate.app.answer_format import LINE_BREAK, format_answer


def test_split_on_separator() -> None:
    ans = format_answer("Answer is 42.***Because the manual states X on page 3.")
    assert ans.short == "Answer is 42."
    assert ans.detailed == "Because the manual states X on page 3."


def test_no_separator_gives_short_only() -> None:
    ans = format_answer("I could not find the answer in the provided manual.")
    assert ans.short == "I could not find the answer in the provided manual."
    assert ans.detailed is None
    assert ans.to_wire() == {"short": "I could not find the answer in the provided manual."}


def test_blank_detailed_segment_is_omitted() -> None:
    ans = format_answer("Short.***   ")
    assert ans.short == "Short."
    assert ans.detailed is None
    assert "detailed" not in ans.to_wire()


def test_newlines_become_line_break_marker() -> None:
    ans = format_answer("Line1\nLine2***Detail1\nDetail2")
    assert ans.short == f"Line1{LINE_BREAK}Line2"
    assert ans.detailed == f"Detail1{LINE_BREAK}Detail2"
    assert LINE_BREAK == "<br>"


def test_segments_are_trimmed_before_normalizing() -> None:
    ans = format_answer("\n  Press *Reset*.  \n***\n\n1. Open the lid.\n2. Hold  the button.\n")
    assert ans.short == "Press *Reset*."
    assert ans.detailed == "1. Open the lid.<br>2. Hold  the button."


def test_split_happens_on_first_separator_only() -> None:
    ans = format_answer("Yes.***Step one.***Step two.")
    assert ans.short == "Yes."
    assert ans.detailed == "Step one.***Step two."


def test_carriage_returns_are_kept() -> None:
    ans = format_answer("A\r\nB***C\r\nD")
    assert ans.short == "A\r<br>B"
    assert ans.detailed == "C\r<br>D"


def test_leading_separator_promotes_detail_to_short() -> None:
    ans = format_answer("***Only an explanation.")
    assert ans.short == "Only an explanation."
    assert ans.detailed is None


@pytest.mark.parametrize("raw", ["", "   ", "***", "  ***  "])
def test_blank_input_is_rejected(raw) -> None:
    with pytest.raises(ValueError):
        format_answer(raw)
