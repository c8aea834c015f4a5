"""
Command-line entry point.

Flow:
    config (file + flags) -> read workbook -> build model
        -> [report] -> write do-file -> [dump model]

Any fatal error is logged as a single ERROR line and the process exits
with EXIT_FATAL.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from hfcgen.analyzer import analyze_instrument
from hfcgen.backends.stata_generator import save_do_file
from hfcgen.builder import build_instrument_model
from hfcgen.config import ConfigError, load_config
from hfcgen.errors import InstrumentError
from hfcgen.log import log_summary, setup_logging
from hfcgen.serialization import dump_model
from hfcgen.xlsform_reader import read_instrument

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="hfcgen",
        description="Generate a high-frequency check do-file from an XLSForm instrument",
    )
    p.add_argument("instrument", nargs="?", help="XLSForm workbook (.xlsx)")
    p.add_argument("-o", "--output", help="Do-file to write")
    p.add_argument("--config", type=Path, help="YAML file with generator settings")
    p.add_argument("--data-dir", dest="data_dir", help="Directory holding the collected .dta files")
    p.add_argument("--enumerator", help="Variable identifying the enumerator")
    p.add_argument("--outlier-multiplier", dest="outlier_multiplier", type=float,
                   help="Standard deviations from the mean that flag an outlier (default 3)")
    p.add_argument("--success-condition", dest="success_condition",
                   help="Stata expression true for a successful interview")
    p.add_argument("--survey-sheet", dest="survey_sheet", help="Name of the survey sheet")
    p.add_argument("--choices-sheet", dest="choices_sheet", help="Name of the choices sheet")
    p.add_argument("--dump-model", dest="dump_model", type=Path,
                   help="Also write the parsed model (.json or .yaml)")
    p.add_argument("--report", action="store_true", help="Log an inventory of the instrument")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)

    overrides = {
        "instrument": args.instrument,
        "output": args.output,
        "data_dir": args.data_dir,
        "enumerator": args.enumerator,
        "outlier_multiplier": args.outlier_multiplier,
        "success_condition": args.success_condition,
        "survey_sheet": args.survey_sheet,
        "choices_sheet": args.choices_sheet,
    }
    try:
        cfg = load_config(args.config, overrides)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.info(f"reading instrument {cfg.instrument}")
    try:
        choice_rows, survey_rows = read_instrument(
            cfg.instrument_path,
            survey_sheet=cfg.survey_sheet,
            choices_sheet=cfg.choices_sheet,
        )
        model = build_instrument_model(choice_rows, survey_rows, name=cfg.instrument_path.stem)
    except FileNotFoundError as e:
        logger.error(str(e))
        return EXIT_FATAL
    except ValueError as e:  # pandas: not a readable workbook
        logger.error(f"cannot read {cfg.instrument}: {e}")
        return EXIT_FATAL
    except InstrumentError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return EXIT_FATAL

    report = analyze_instrument(model)
    if args.report:
        for line in report.summary_lines():
            logger.info(line)
    for warning in report.warnings:
        logger.warning(warning)

    # The do-file is written before the model dump
    try:
        path = save_do_file(model, cfg.render_options())
        if args.dump_model is not None:
            dump_path = dump_model(model, args.dump_model)
            logger.info(f"model written to {dump_path}")
    except OSError as e:
        logger.error(f"cannot write output: {e}")
        return EXIT_FATAL

    log_summary(
        f"wrote {path} questions={len(model.questions)} "
        f"datasets={len(model.datasets)} groups={len(model.groups)}"
    )
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
