"""
Stata do-file generator for high-frequency checks.

Converts an InstrumentModel into a do-file that loads each dataset and
runs data-quality checks against it.

Sections per dataset (root first, then each repeat group):
    - value and variable labels
    - duplicate submission keys (root only)
    - submissions per enumerator (root only)
    - missing values
    - select_one values outside their choice list
    - select_multiple tokens outside their choice list
    - numeric outliers (beyond N standard deviations)
    - dates and datetimes in the future
    - GPS coordinates out of range
    - string variables for review
    - success-condition rate per enumerator (root only, optional)

Only the text is built here; the host statistical package runs it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from hfcgen import __version__
from hfcgen.model import ROOT_DATASET, DatasetVariables, InstrumentModel, QuestionType
from hfcgen.sanitize import sanitize_label

MAX_LABEL_LENGTH = 80
MAX_INLIST_CODES = 250
SEPARATOR = "*" + "-" * 71

# Characters Stata would expand or choke on inside the quoted data directory
UNSAFE_PATH_CHARS = ("$", '"', "`", "\n", "\r")


@dataclass(frozen=True)
class RenderOptions:
    """
    Declarative options for the generated script.

    Properties:
        enumerator: Variable identifying the enumerator
        outlier_multiplier: Standard deviations from the mean that flag an outlier
        success_condition: Stata expression for a successful interview ("" skips the check)
        output_path: Where save_do_file writes the script
        data_dir: Directory holding <dataset>.dta files
        instrument_name: Shown in the script header (defaults to the model name)
    """

    enumerator: str
    outlier_multiplier: float = 3.0
    success_condition: str = ""
    output_path: str = "hfc_checks.do"
    data_dir: str = "data"
    instrument_name: str = ""


def _stata_string(text: str, limit: int = MAX_LABEL_LENGTH) -> str:
    """Quote text for Stata, dropping characters Stata would expand."""
    text = sanitize_label(text)
    if len(text) > limit:
        text = text[: limit - 3].rstrip() + "..."
    return f'"{text}"'


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return repr(value)


def _local(name: str, variables: Sequence[str]) -> str:
    return f"local {name} {' '.join(variables)}"


def _header(model: InstrumentModel, options: RenderOptions) -> List[str]:
    bad = [c for c in UNSAFE_PATH_CHARS if c in options.data_dir]
    if bad:
        raise ValueError(f"data_dir {options.data_dir!r} contains characters Stata would expand: {bad}")
    data_dir = options.data_dir.strip().rstrip("/\\") or "."
    name = options.instrument_name or model.name
    return [
        f"* High-frequency checks for {sanitize_label(name)}",
        f"* Generated by hfcgen {__version__}. Edit the instrument, not this file.",
        "",
        "version 15",
        "clear all",
        "set more off",
        "",
        f'global hfc_datadir "{data_dir}"',
        f"global hfc_enum {options.enumerator}",
        f"global hfc_outlier_mult {_format_number(options.outlier_multiplier)}",
        "",
    ]


def _labels(dataset: DatasetVariables, model: InstrumentModel) -> List[str]:
    lines = ["* Labels"]
    defined = set()
    for question in model.questions_in(dataset.key):
        lines.append(f"capture label variable {question.name} {_stata_string(question.label_variable)}")
        list_name = question.choice_list
        if question.question_type != QuestionType.SELECT_ONE or list_name not in model.choices:
            continue
        if list_name not in defined:
            entries = model.choices.get(list_name)
            for index, entry in enumerate(entries):
                mode = "replace" if index == 0 else "add"
                lines.append(f"label define {list_name} {entry.code} {_stata_string(entry.label)}, {mode}")
            defined.add(list_name)
        lines.append(f"capture label values {question.name} {list_name}")
    lines.append("")
    return lines


def _duplicates() -> List[str]:
    return [
        "* Duplicate submissions",
        "capture confirm variable key",
        "if !_rc {",
        "    duplicates tag key, generate(_hfc_dup)",
        "    list key $hfc_enum if _hfc_dup > 0, abbreviate(32) noobs",
        "    drop _hfc_dup",
        "}",
        "",
        "* Submissions per enumerator",
        "capture noisily tabulate $hfc_enum, missing",
        "",
    ]


def _missing(variables: Sequence[str]) -> List[str]:
    if not variables:
        return []
    return [
        "* Missing values",
        _local("hfc_vars", variables),
        "foreach var of local hfc_vars {",
        "    capture confirm variable `var'",
        "    if _rc continue",
        "    quietly count if missing(`var')",
        "    if r(N) > 0 display as text \"`var': \" r(N) \" missing\"",
        "}",
        "",
    ]


def _select_one(dataset: DatasetVariables, model: InstrumentModel, id_vars: str) -> List[str]:
    lines: List[str] = []
    for name in dataset.of_type(QuestionType.SELECT_ONE):
        question = model.get_question(name)
        codes = model.choices.codes(question.choice_list) if question.choice_list else []
        if not codes:
            lines.append(f"* {name}: no numeric choice list, range not checked")
            continue
        if len(codes) > MAX_INLIST_CODES:
            lines.append(f"* {name}: choice list too long for inlist(), range not checked")
            continue
        code_args = ", ".join(str(c) for c in codes)
        lines.append(
            f"capture noisily list {id_vars} {name} "
            f"if !missing({name}) & !inlist({name}, {code_args}), abbreviate(32) noobs"
        )
    if lines:
        lines = ["* Select-one values outside the choice list"] + lines + [""]
    return lines


def _select_multiple(dataset: DatasetVariables, model: InstrumentModel, id_vars: str) -> List[str]:
    lines: List[str] = []
    for name in dataset.of_type(QuestionType.SELECT_MULTIPLE):
        question = model.get_question(name)
        codes = model.choices.codes(question.choice_list) if question.choice_list else []
        if not codes:
            lines.append(f"* {name}: no numeric choice list, tokens not checked")
            continue
        lines.extend([
            f"capture confirm string variable {name}",
            "if !_rc {",
            f'    generate _hfc_rest = " " + {name} + " "',
            f"    foreach code in {' '.join(str(c) for c in codes)} {{",
            '        replace _hfc_rest = subinstr(_hfc_rest, " `code\' ", " ", .)',
            "    }",
            f'    capture noisily list {id_vars} {name} if trim(_hfc_rest) != "", abbreviate(32) noobs',
            "    drop _hfc_rest",
            "}",
        ])
    if lines:
        lines = ["* Select-multiple tokens outside the choice list"] + lines + [""]
    return lines


def _outliers(variables: Sequence[str], id_vars: str) -> List[str]:
    if not variables:
        return []
    return [
        "* Numeric outliers",
        _local("hfc_numeric", variables),
        "foreach var of local hfc_numeric {",
        "    capture confirm numeric variable `var'",
        "    if _rc continue",
        "    quietly summarize `var'",
        "    if r(N) < 2 continue",
        "    local hfc_low = r(mean) - $hfc_outlier_mult * r(sd)",
        "    local hfc_high = r(mean) + $hfc_outlier_mult * r(sd)",
        f"    capture noisily list {id_vars} `var' if !missing(`var') & (`var' < `hfc_low' | `var' > `hfc_high'), abbreviate(32) noobs",
        "}",
        "",
    ]


def _future_dates(dates: Sequence[str], datetimes: Sequence[str], id_vars: str) -> List[str]:
    if not dates and not datetimes:
        return []
    lines = ["* Dates in the future"]
    for name in dates:
        lines.append(
            f"capture noisily list {id_vars} {name} "
            f'if !missing({name}) & {name} > date(c(current_date), "DMY"), abbreviate(32) noobs'
        )
    for name in datetimes:
        lines.append(
            f"capture noisily list {id_vars} {name} "
            f'if !missing({name}) & {name} > clock(c(current_date) + " " + c(current_time), "DMYhms"), '
            "abbreviate(32) noobs"
        )
    lines.append("")
    return lines


def _gps(variables: Sequence[str], id_vars: str) -> List[str]:
    if not variables:
        return []
    lines = ["* GPS coordinates out of range"]
    for name in variables:
        lines.append(
            f"capture noisily list {id_vars} {name}latitude "
            f"if !missing({name}latitude) & !inrange({name}latitude, -90, 90), abbreviate(32) noobs"
        )
        lines.append(
            f"capture noisily list {id_vars} {name}longitude "
            f"if !missing({name}longitude) & !inrange({name}longitude, -180, 180), abbreviate(32) noobs"
        )
    lines.append("")
    return lines


def _strings(variables: Sequence[str]) -> List[str]:
    if not variables:
        return []
    return [
        "* String variables for review",
        _local("hfc_strings", variables),
        "foreach var of local hfc_strings {",
        "    capture noisily codebook `var', compact",
        "}",
        "",
    ]


def _success(condition: str) -> List[str]:
    return [
        "* Success rate per enumerator",
        f"capture noisily generate byte _hfc_success = ({condition})",
        "if !_rc {",
        "    tabstat _hfc_success, by($hfc_enum) statistics(mean n)",
        "    drop _hfc_success",
        "}",
        "",
    ]


def _dataset_section(dataset: DatasetVariables, model: InstrumentModel, options: RenderOptions) -> List[str]:
    is_root = dataset.key == ROOT_DATASET
    id_vars = "$hfc_enum" if is_root else "parent_key"
    title = "survey root" if is_root else f"repeat group {_stata_string(dataset.name)}"

    lines = [
        SEPARATOR,
        f"* Dataset: {dataset.key} ({title})",
        SEPARATOR,
        f'use "$hfc_datadir/{dataset.key}.dta", clear',
        "",
    ]

    if not dataset.all_variables:
        lines.extend(["* No variables to check", ""])
        return lines

    lines.extend(_labels(dataset, model))
    if is_root:
        lines.extend(_duplicates())
    lines.extend(_missing(dataset.all_variables))
    lines.extend(_select_one(dataset, model, id_vars))
    lines.extend(_select_multiple(dataset, model, id_vars))
    lines.extend(_outliers(dataset.of_type(QuestionType.NUMERIC), id_vars))
    lines.extend(_future_dates(
        dataset.of_type(QuestionType.DATE),
        dataset.of_type(QuestionType.DATETIME),
        id_vars,
    ))
    lines.extend(_gps(dataset.of_type(QuestionType.GEOPOINT), id_vars))
    lines.extend(_strings(dataset.of_type(QuestionType.STRING)))
    if is_root and options.success_condition:
        lines.extend(_success(options.success_condition))
    return lines


def generate_do_file(model: InstrumentModel, options: RenderOptions) -> str:
    """
    Generate the check script for an instrument.

    Args:
        model: Finished InstrumentModel
        options: Rendering options

    Returns:
        Do-file text
    """
    lines = _header(model, options)
    for dataset in model.datasets.values():
        lines.extend(_dataset_section(dataset, model, options))
    lines.append("* End of checks")
    return "\n".join(lines) + "\n"


def save_do_file(model: InstrumentModel, options: RenderOptions) -> Path:
    """
    Generate the script and write it to options.output_path.

    The text is fully built before the file is opened, so a failure
    never leaves a partial script behind.

    Returns:
        Path of the written file
    """
    text = generate_do_file(model, options)
    path = Path(options.output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return path


__all__ = ["RenderOptions", "generate_do_file", "save_do_file"]
