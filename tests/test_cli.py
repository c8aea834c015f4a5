"""
Tests for the hfcgen command line.

main() is called in-process; log lines go to stdout and are read with capsys.
"""

import pandas as pd
from hfcgen.cli import EXIT_FATAL, EXIT_SUCCESS, main
from hfcgen.serialization import model_from_yaml


def base_args(instrument, output):
    return [str(instrument), "-o", str(output), "--data-dir", "data", "--enumerator", "enum_id"]


def test_writes_do_file(household_xlsx, tmp_path, capsys):
    """A valid workbook produces the script and a SUMMARY line."""
    output = tmp_path / "checks" / "household.do"
    assert main(base_args(household_xlsx, output)) == EXIT_SUCCESS

    text = output.read_text(encoding="utf-8")
    assert "* High-frequency checks for household" in text
    out = capsys.readouterr().out
    assert "INFO reading instrument" in out
    assert "WARN Unused choice lists: old_list" in out
    assert f"SUMMARY wrote {output} questions=15 datasets=2 groups=1" in out


def test_report_and_dump_model(household_xlsx, tmp_path, capsys):
    output = tmp_path / "household.do"
    dump = tmp_path / "model.yaml"
    args = base_args(household_xlsx, output) + ["--dump-model", str(dump), "--report"]
    assert main(args) == EXIT_SUCCESS

    model = model_from_yaml(dump.read_text(encoding="utf-8"))
    assert model.name == "household"
    assert len(model.questions) == 15
    assert "INFO dataset members: 4 questions" in capsys.readouterr().out


def test_config_file(household_xlsx, tmp_path):
    output = tmp_path / "from_config.do"
    config = tmp_path / "hfc.yaml"
    config.write_text(
        f"instrument: {household_xlsx}\n"
        f"output: {output}\n"
        "data_dir: data\n"
        "enumerator: enum_id\n"
        "success_condition: consent == 1\n",
        encoding="utf-8",
    )
    assert main(["--config", str(config)]) == EXIT_SUCCESS
    assert "_hfc_success = (consent == 1)" in output.read_text(encoding="utf-8")


def test_unbalanced_repeats_fail_before_writing(tmp_path, write_workbook, capsys):
    """A fatal instrument error is one ERROR line and no script."""
    path = write_workbook(tmp_path / "broken.xlsx", {
        "survey": pd.DataFrame({
            "type": ["begin_repeat", "integer", "text"],
            "name": ["loop", "age", "name"],
            "label": ["Loop", "Age", "Name"],
        }),
    })
    output = tmp_path / "broken.do"
    assert main(base_args(path, output)) == EXIT_FATAL

    assert not output.exists()
    errors = [line for line in capsys.readouterr().out.splitlines() if line.startswith("ERROR")]
    assert len(errors) == 1
    assert errors[0].startswith("ERROR MalformedInstrument:")


def test_missing_workbook(tmp_path, capsys):
    output = tmp_path / "x.do"
    assert main(base_args(tmp_path / "missing.xlsx", output)) == EXIT_FATAL
    assert not output.exists()
    assert "ERROR instrument not found" in capsys.readouterr().out


def test_invalid_config(household_xlsx, tmp_path, capsys):
    """Missing enumerator is a config error."""
    assert main([str(household_xlsx), "-o", str(tmp_path / "x.do"), "--data-dir", "data"]) == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_unwritable_output_fails_cleanly(household_xlsx, tmp_path, capsys):
    """An output path that is a directory gives one ERROR line and no model dump."""
    output = tmp_path / "outdir"
    output.mkdir()
    dump = tmp_path / "model.yaml"
    args = base_args(household_xlsx, output) + ["--dump-model", str(dump)]
    assert main(args) == EXIT_FATAL

    assert not dump.exists()
    errors = [line for line in capsys.readouterr().out.splitlines() if line.startswith("ERROR")]
    assert len(errors) == 1
    assert errors[0].startswith("ERROR cannot write output:")
