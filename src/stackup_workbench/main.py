import argparse
import logging
import sys

from stackup_workbench.builder.contributor_table import export_contributors_csv
from stackup_workbench.engine.stack_engine import run_stack_document
from stackup_workbench.engine.stack_results import interpret_cpk
from stackup_workbench.reporting.pdf_report import save_pdf_report
from stackup_workbench.storage.stack_file import load_stack


def _fmt(value, spec=".4f"):
    return "N/A" if value is None else format(value, spec)


def print_summary(result):
    stack = result.stack
    print(f"Contributors:   {stack.n_contributors}")
    print(f"Stack mean:     {stack.stack_mean:.4f}")
    print(f"Worst case:     +/- {stack.worst_case:.4f}")
    print(f"RSS:            +/- {stack.rss:.4f}")
    print(f"Stack sigma:    {stack.stack_sigma:.4f}")

    if result.config.advanced_mode:
        cap = result.capability
        print(f"Cp:             {_fmt(cap.cp, '.3f')}")
        print(f"Cpk:            {_fmt(cap.achieved_cpk, '.3f')} ({interpret_cpk(cap.achieved_cpk)})")
        print(f"% out of spec:  {_fmt(cap.percent_out_of_spec, '.5f')}")
        print(f"DPMO:           {_fmt(cap.dpmo, '.1f')}")

    print(f"Criterion:      {result.acceptance.label}")
    print(f"Result:         {result.acceptance.verdict}")

    if result.pareto.has_data:
        print("Pareto:")
        for e in result.pareto:
            print(f"  #{e.item_number:<3} {e.description:<30} {e.percent:6.1f}%  ({e.category})")
    else:
        print(result.pareto.message)

    for w in result.warnings:
        print(f"Warning: {w}")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="stackup-workbench", description="Run a tolerance stack-up analysis on a saved stack file.")
    parser.add_argument("stack_file", help="Stack JSON file saved by the stack editor.")
    parser.add_argument("--report", metavar="PDF", help="Write a PDF report to this path.")
    parser.add_argument("--export-csv", metavar="CSV", help="Write the contributor table to this CSV path.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        doc = load_stack(args.stack_file)
    except (OSError, ValueError) as exc:
        print(f"Error loading stack: {exc}", file=sys.stderr)
        return 1

    result = run_stack_document(doc.contributors, doc.setup, doc.settings)
    print_summary(result)

    try:
        if args.export_csv:
            export_contributors_csv(doc.contributors, args.export_csv)
            print(f"Contributor table written to {args.export_csv}")
        if args.report:
            save_pdf_report(result, args.report, doc.setup)
            print(f"Report written to {args.report}")
    except (OSError, ValueError) as exc:
        print(f"Error writing output: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
