#!/usr/bin/env python3
"""
Complete Pipeline Demo: raw rows → InstrumentModel → Analysis → Do-file

Shows the full workflow on the bundled household instrument:
1. Build the instrument model from choice and survey rows
2. Analyze the instrument
3. Generate the Stata check script
4. Dump the model as YAML
"""

from hfcgen.analyzer import analyze_instrument
from hfcgen.backends import RenderOptions, generate_do_file, save_do_file
from hfcgen.builder import build_instrument_model
from hfcgen.examples import build_household_instrument
from hfcgen.serialization import dump_model


def main():
    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: rows → model → analysis → do-file")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Build model
    # =========================================================================
    print("\n1. BUILDING MODEL...")
    choice_rows, survey_rows = build_household_instrument()
    model = build_instrument_model(choice_rows, survey_rows, name="household")
    print(f"   ✓ Survey rows: {len(survey_rows)}")
    print(f"   ✓ Relevant questions: {len(model.questions)}")
    print(f"   ✓ Repeat groups: {len(model.groups)}")
    print(f"   ✓ Choice lists: {len(model.choices)}")

    for key, dataset in model.datasets.items():
        print(f"   ✓ Dataset {key}: {', '.join(dataset.all_variables) or '(empty)'}")

    # =========================================================================
    # STEP 2: Analyze
    # =========================================================================
    print("\n2. ANALYZING INSTRUMENT...")
    report = analyze_instrument(model)
    for line in report.summary_lines():
        print(f"   {line}")

    if report.warnings:
        print(f"\n   Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"      - {warning}")

    # =========================================================================
    # STEP 3: Generate do-file
    # =========================================================================
    print("\n3. GENERATING DO-FILE...")
    options = RenderOptions(
        enumerator="enum_id",
        success_condition="consent == 1",
        output_path="household_hfc.do",
    )
    path = save_do_file(model, options)
    print(f"   ✓ Saved {path}")

    print("\n   Sample output:")
    print("-" * 80)
    lines = generate_do_file(model, options).split("\n")
    for line in lines[:25]:
        print(f"   {line}")
    if len(lines) > 25:
        print(f"   ... ({len(lines) - 25} more lines)")

    # =========================================================================
    # STEP 4: Dump model
    # =========================================================================
    print("\n4. DUMPING MODEL...")
    print(f"   ✓ Saved {dump_model(model, 'household_model.yaml')}")

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE!")
    print("\nTo run the checks:")
    print("  stata -b do household_hfc.do")
    print("=" * 80)


if __name__ == "__main__":
    main()
