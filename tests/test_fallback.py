# tests/test_fallback.py
import pytest

from limeai.fallback.catalog import DEFAULT_KEY, FLOWCHART_CATALOG
from limeai.fallback.podcast import create_fallback_podcast_script, split_by_sentences
from limeai.fallback.selector import score_entry, select_fallback


def test_empty_input_returns_default():
    assert select_fallback("") == FLOWCHART_CATALOG[DEFAULT_KEY]
    assert select_fallback("   ") == FLOWCHART_CATALOG[DEFAULT_KEY]
    assert select_fallback(None) == FLOWCHART_CATALOG[DEFAULT_KEY]


def test_exact_short_match():
    assert select_fallback("git") == FLOWCHART_CATALOG["git"]
    assert select_fallback("  GIT ") == FLOWCHART_CATALOG["git"]


def test_short_substring_match_either_direction():
    # key contains input
    assert select_fallback("boot") == FLOWCHART_CATALOG["computer boot"]
    # input contains key
    assert select_fallback("webpages") == FLOWCHART_CATALOG["web"]


def test_scored_match_for_longer_input():
    got = select_fallback("understanding machine learning basics")
    assert got == FLOWCHART_CATALOG["machine learning"]


def test_unrelated_long_input_returns_default():
    assert select_fallback("the history of ancient rome") == FLOWCHART_CATALOG[DEFAULT_KEY]


def test_tie_keeps_first_catalog_entry():
    catalog = {DEFAULT_KEY: "d", "alpha net": "first", "beta net": "second"}
    assert select_fallback("some net thing here", catalog) == "first"


def test_short_tokens_do_not_score():
    assert score_entry(["an", "of"], "machine learning") == 0


def test_score_entry_counts_substring_and_overlap():
    # "learning": +8 (key contains), +4 (key token match)
    assert score_entry(["learning"], "machine learning") == 12


def test_split_by_sentences_stops_after_limit_on_sentence_end():
    text = ("word " * 50).strip() + ". tail words here."
    out = split_by_sentences(text, 20)
    assert out.endswith("word.")
    assert "tail" not in out


def test_split_by_sentences_returns_all_without_terminal():
    assert split_by_sentences("no terminal punctuation", 5) == "no terminal punctuation"


def test_fallback_script_uses_host_guest_labels():
    script = create_fallback_podcast_script("Photosynthesis converts light. " * 40, "educational")
    lines = [ln for ln in script.splitlines() if ln.strip()]
    assert lines[0].startswith("HOST:")
    assert "professor" in lines[0]
    assert any(ln.startswith("GUEST:") for ln in lines)
    assert "Photosynthesis" in script


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        FLOWCHART_CATALOG["new"] = "x"  # type: ignore[index]
