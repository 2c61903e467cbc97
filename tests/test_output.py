"""Tests for council/output.py."""

from rich.console import Console

import council.output as output
from council.models import ParticipantScore, SelectionResult, StoryAnalysis
from council.output import _preview, participants_table


def test_preview_short_text_unchanged():
    assert _preview("Public banks keep interest local.") == "Public banks keep interest local."


def test_preview_truncates():
    text = " ".join(f"w{i}" for i in range(60))
    preview = _preview(text, words=5)
    assert preview == "w0 w1 w2 w3 w4..."


def test_participants_table_rows(registry):
    table = participants_table(registry.all())
    assert table.row_count == 7
    assert [c.header for c in table.columns][1:] == ["ID", "Name", "Role", "Specialty"]


def _capture(monkeypatch) -> Console:
    recorder = Console(record=True, width=120)
    monkeypatch.setattr(output, "console", recorder)
    return recorder


def test_print_selection_lists_scores(monkeypatch):
    recorder = _capture(monkeypatch)
    result = SelectionResult(
        participant_id="policy",
        score=3.0,
        scores=(ParticipantScore("policy", 3.0), ParticipantScore("economist", 0.0)),
        reason="keywords",
    )
    output.print_selection(result)
    text = recorder.export_text()
    assert "Selected policy" in text
    assert "policy=3.0" in text
    assert "economist=0.0" in text


def test_print_reply_marks_fallback(monkeypatch):
    recorder = _capture(monkeypatch)
    output.print_reply("EconAgent", "AI Economist", "Public banking works.", fallback=True)
    text = recorder.export_text()
    assert "EconAgent" in text
    assert "Public banking works." in text
    assert "fallback" in text


def test_print_moderation_default(monkeypatch):
    recorder = _capture(monkeypatch)
    output.print_moderation(True, "low", [], fallback=True)
    text = recorder.export_text()
    assert "approved" in text
    assert "moderation unavailable" in text


def test_print_analysis_fallback_note(monkeypatch):
    recorder = _capture(monkeypatch)
    output.print_analysis(StoryAnalysis(themes=["rent_burden"], fallback=True))
    text = recorder.export_text()
    assert "rent_burden" in text
    assert "provider unavailable" in text
