"""
Tests for the Instrument Analyzer.

Tests verify that the analyzer correctly:
    - Counts questions per type and dataset
    - Detects select questions without a choice list
    - Detects unused choice lists and empty repeat groups
"""

from hfcgen.analyzer import analyze_instrument
from hfcgen.builder import build_instrument_model
from hfcgen.examples import build_household_instrument


def test_household_inventory():
    """Counts on the example instrument."""
    report = analyze_instrument(build_instrument_model(*build_household_instrument(), name="household"))

    assert report.instrument_name == "household"
    assert report.total_questions == 15
    assert report.total_groups == 1
    assert report.total_choice_lists == 5
    assert report.questions_by_dataset == {"survey": 11, "members": 4}
    assert report.questions_by_type["select_one"] == 4
    assert report.unused_choice_lists == {"old_list"}
    assert report.missing_choice_lists == {}


def test_missing_choice_list():
    """A select question whose list has no numeric codes is flagged."""
    model = build_instrument_model(
        [("crops", "maize", "Maize")],
        [("select_one crops", "crop", "Main crop")],
    )
    report = analyze_instrument(model)

    assert report.missing_choice_lists == {"crop": "crops"}
    assert any("crop (crops)" in w for w in report.warnings)


def test_empty_repeat_group():
    """A repeat holding only notes is reported."""
    model = build_instrument_model([], [
        ("begin_repeat", "loop", "Loop"),
        ("note", "info", "Info"),
        ("end_repeat", "loop_end", ""),
    ])
    report = analyze_instrument(model)

    assert report.empty_groups == ["loop"]
    assert len(report.warnings) == 1


def test_summary_lines():
    report = analyze_instrument(build_instrument_model(*build_household_instrument(), name="hh"))
    lines = report.summary_lines()
    assert lines[0].startswith("instrument=hh questions=15")
    assert "dataset members: 4 questions" in lines
