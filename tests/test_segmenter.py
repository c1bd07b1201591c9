from __future__ import annotations

from docintel.pipeline.segmenter import is_clause_candidate, segment


def test_segment_splits_on_terminal_punctuation() -> None:
    text = "The contractor shall deliver the goods on time. Is this a question about scope? Payment is due upon receipt!"
    assert segment(text) == (
        "The contractor shall deliver the goods on time",
        "Is this a question about scope",
        "Payment is due upon receipt",
    )


def test_segment_drops_short_units_and_collapses_whitespace() -> None:
    text = "Too short. The   supplier\nmust   maintain\tinsurance coverage. Ok."
    assert segment(text) == ("The supplier must maintain insurance coverage",)


def test_segment_is_deterministic() -> None:
    text = "First sentence is long enough here. Second sentence is long enough too."
    assert segment(text) == segment(text)


def test_segment_empty_text() -> None:
    assert segment("") == ()
    assert segment("   ") == ()


def test_segment_does_not_split_decimals() -> None:
    units = segment("The fee is 2.5 percent of the annual contract value. Next one follows here.")
    assert units[0] == "The fee is 2.5 percent of the annual contract value"


def test_clause_candidate_length_gate() -> None:
    assert not is_clause_candidate("x" * 30)
    assert is_clause_candidate("x" * 31)
    assert is_clause_candidate("x" * 25, min_clause_length=20)
