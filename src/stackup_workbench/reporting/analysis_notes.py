from stackup_workbench.engine.acceptance import FAIL, PASS
from stackup_workbench.engine.stack_engine import StackAnalysisResult
from stackup_workbench.engine.stack_results import interpret_cpk
from stackup_workbench.engine.tolerance import AsymmetricTolerance, parse_tolerance
from stackup_workbench.engine.stack_utils import row_value
from stackup_workbench.plotting import DANGER_PERCENT


def get_stack_impact_analysis(result: StackAnalysisResult) -> list:
    """Returns a list of (type, message) tuples for the stack findings."""
    notes = []
    acc = result.acceptance

    # A. Verdict against the acceptance criterion
    if acc.verdict == PASS:
        notes.append(("success", f"PASS: {acc.label}."))
    elif acc.verdict == FAIL:
        notes.append(("error", f"FAIL: {acc.label}."))
    else:
        notes.append(("info", f"Not evaluated: {acc.label}. Spec limits are incomplete for this criterion."))

    cap = result.capability
    if result.config.advanced_mode and cap.achieved_cpk is not None:
        notes.append(("info",
                      f"Achieved stack Cpk is {cap.achieved_cpk:.2f} ({interpret_cpk(cap.achieved_cpk)}), "
                      f"about {cap.dpmo:.0f} DPMO with a 1.5 sigma long-term shift."
                      ))

    # B. Where the variance comes from
    ranking = result.pareto
    if not ranking.has_data:
        notes.append(("info", ranking.message))
        return notes

    top = ranking.entries[0]
    if top.percent > DANGER_PERCENT:
        notes.append(("error",
                      f"Most Impactful Contributor: #{top.item_number} {top.description} drives {top.percent:.1f}% "
                      "of the stack variance. Tightening this tolerance or improving its process capability "
                      "gives the largest improvement."
                      ))
    else:
        notes.append(("info",
                      f"Largest contributor is #{top.item_number} {top.description} ({top.percent:.1f}%). "
                      "Variance is spread across several contributors."
                      ))

    vital = ranking.vital_few()
    if vital:
        names = ", ".join(f"#{e.item_number} {e.description}" for e in vital)
        notes.append(("info", f"Vital few (up to 80% cumulative): {names}."))

    # C. Asymmetric entries are counted with their full band
    asym = [
        i for i, row in enumerate(result.contributors, start=1)
        if isinstance(parse_tolerance(row_value(row, "tol")), AsymmetricTolerance)
    ]
    if asym:
        rows = ", ".join(f"#{i}" for i in asym)
        notes.append(("info",
                      f"Asymmetric tolerances on rows {rows} are re-centred and counted with their full band width."
                      ))

    return notes
