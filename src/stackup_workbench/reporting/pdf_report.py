import os
import tempfile
from typing import Optional

from fpdf import FPDF
from matplotlib.figure import Figure

from stackup_workbench.engine.stack_engine import StackAnalysisResult
from stackup_workbench.engine.stack_models import AnalysisSetup
from stackup_workbench.engine.stack_results import interpret_cpk
from stackup_workbench.engine.stack_utils import coerce_float, effective_cpk, row_value
from stackup_workbench.engine.tolerance import parse_tolerance
from stackup_workbench.plotting import get_pareto_chart, get_stack_distribution_chart
from stackup_workbench.reporting.analysis_notes import get_stack_impact_analysis

BRAND_BLUE = (0, 102, 153)
BRAND_DARK_BLUE = (0, 51, 102)
DARK_GREY = (51, 51, 51)
LIGHT_GREY = (240, 240, 240)


def _txt(value) -> str:
    # Core PDF fonts are latin-1 only.
    return str(value).encode("latin-1", "replace").decode("latin-1")


def _fmt(value: Optional[float], spec: str = ".3f") -> str:
    return "-" if value is None else format(value, spec)


def create_pdf_report(result: StackAnalysisResult, setup: Optional[AnalysisSetup] = None) -> bytes:
    setup = setup or AnalysisSetup()

    class PDF(FPDF):
        def header(self):
            self.set_font("helvetica", "B", 9)
            self.set_text_color(*BRAND_DARK_BLUE)
            self.cell(0, 6, "Tolerance Stack-up Analysis", align="R", new_x="LMARGIN", new_y="NEXT")
            self.set_text_color(0, 0, 0)
            self.ln(2)

        def footer(self):
            self.set_y(-15)
            self.set_font("helvetica", "I", 8)
            self.cell(0, 10, f"Page {self.page_no()}", align="C")

    def section(title: str):
        pdf.set_font("helvetica", "B", 12)
        pdf.set_text_color(*BRAND_DARK_BLUE)
        pdf.cell(0, 10, _txt(title), new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)

    def table(headers, widths, rows, aligns=None):
        pdf.set_font("helvetica", "B", 8)
        pdf.set_fill_color(*BRAND_BLUE)
        pdf.set_text_color(255, 255, 255)
        for h, w in zip(headers, widths):
            pdf.cell(w, 7, _txt(h), border=1, align="C", fill=True)
        pdf.ln()
        pdf.set_text_color(0, 0, 0)
        pdf.set_font("helvetica", size=8)
        aligns = aligns or ["L"] * len(headers)
        for row in rows:
            for val, w, a in zip(row, widths, aligns):
                pdf.cell(w, 6, _txt(val), border=1, align=a)
            pdf.ln()
        pdf.ln(4)

    def label_rows(rows):
        col1 = 50
        for label, value in rows:
            pdf.set_fill_color(*LIGHT_GREY)
            pdf.set_font("helvetica", "B", 9)
            pdf.set_text_color(*BRAND_DARK_BLUE)
            pdf.cell(col1, 7, _txt(label), border=1, fill=True)
            pdf.set_font("helvetica", size=9)
            pdf.set_text_color(*DARK_GREY)
            pdf.multi_cell(0, 7, _txt(value), border=1, new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)
        pdf.ln(4)

    pdf = PDF()
    pdf.set_auto_page_break(auto=True, margin=18)
    pdf.add_page()

    # 1. Title and metadata
    meta = setup.metadata
    pdf.set_font("helvetica", "B", 20)
    pdf.set_text_color(*BRAND_DARK_BLUE)
    pdf.cell(0, 14, _txt(meta.title or "Tolerance Analysis Report"), align="C", new_x="LMARGIN", new_y="NEXT")
    pdf.set_draw_color(*BRAND_BLUE)
    pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
    pdf.ln(4)
    pdf.set_text_color(0, 0, 0)
    label_rows([
        ("Project", meta.project or "-"),
        ("Part/Assembly Nr", meta.part_nr or "-"),
        ("Analyst Name/ID", meta.analyst or "-"),
        ("Creation Date", meta.creation_date or "-"),
    ])

    # 2. Critical requirement
    section("Critical Requirement")
    limits = result.config.spec_limits
    req = setup.critical_requirement
    label_rows([
        ("Critical Feature", req.critical_feature or "-"),
        ("Nominal Target", _fmt(limits.nominal_target)),
        ("LSL", _fmt(limits.lsl)),
        ("USL", _fmt(limits.usl)),
        ("Acceptance Criteria", result.acceptance.label),
        ("Assumptions Context", setup.assumptions_context.functional_description or "-"),
    ])

    # 3. Stack results
    section("Stack Results")
    stack = result.stack
    lo3, hi3 = stack.sigma_range(3)
    lo6, hi6 = stack.sigma_range(6)
    label_rows([
        ("Stack Mean", _fmt(stack.stack_mean)),
        ("Worst Case", f"+/- {_fmt(stack.worst_case, '.4f')}  ({_fmt(stack.worst_case_limits[0])} / {_fmt(stack.worst_case_limits[1])})"),
        ("RSS", f"+/- {_fmt(stack.rss, '.4f')}  ({_fmt(stack.rss_limits[0])} / {_fmt(stack.rss_limits[1])})"),
        ("Stack Sigma", _fmt(stack.stack_sigma, ".4f")),
        ("+/- 3 Sigma", f"{_fmt(lo3)} / {_fmt(hi3)}"),
        ("+/- 6 Sigma", f"{_fmt(lo6)} / {_fmt(hi6)}"),
        ("Result", result.acceptance.verdict),
    ])

    # 4. Capability
    if result.config.advanced_mode:
        cap = result.capability
        section("Process Capability")
        label_rows([
            ("Cp", _fmt(cap.cp, ".3f")),
            ("Cpk", f"{_fmt(cap.achieved_cpk, '.3f')}  ({interpret_cpk(cap.achieved_cpk)})"),
            ("Z (min)", _fmt(cap.z_min, ".2f")),
            ("% Out of Spec", _fmt(cap.percent_out_of_spec, ".5f")),
            ("DPMO (1.5 sigma shift)", _fmt(cap.dpmo, ".1f")),
            ("Sigma Level", _fmt(cap.sigma_level, ".2f")),
        ])

    # 5. Contributors
    section("Contributors")
    rows = []
    for i, c in enumerate(result.contributors, start=1):
        tol = parse_tolerance(row_value(c, "tol"))
        rows.append([
            str(i),
            (row_value(c, "description") or "")[:45],
            _fmt(coerce_float(row_value(c, "nominal"))),
            row_value(c, "direction", "+"),
            "" if tol.raw is None else str(tol.raw),
            f"{effective_cpk(row_value(c, 'cpk')):.2f}",
        ])
    table(["#", "Description", "Nominal", "Dir", "Tolerance", "Cpk"], [10, 75, 30, 12, 38, 25], rows,
          ["C", "L", "R", "C", "R", "R"])

    # 6. Pareto
    section("Pareto Contribution")
    if result.pareto.has_data:
        rows = [
            [str(rank), f"#{e.item_number}", e.description[:45], f"{e.percent:.1f}", f"{e.cumulative_percent:.1f}", e.category]
            for rank, e in enumerate(result.pareto, start=1)
        ]
        table(["Rank", "Item", "Description", "% Var", "Cum %", "Class"], [15, 15, 80, 25, 25, 30], rows,
              ["C", "C", "L", "R", "R", "L"])
    else:
        pdf.set_font("helvetica", size=9)
        pdf.multi_cell(0, 5, _txt(result.pareto.message), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

    # 7. Findings and warnings
    section("Findings")
    pdf.set_font("helvetica", size=9)
    for type_, msg in get_stack_impact_analysis(result):
        if type_ == "success":
            pdf.set_text_color(0, 100, 0)
        elif type_ == "error":
            pdf.set_text_color(150, 0, 0)
        else:
            pdf.set_text_color(0, 0, 0)
        pdf.multi_cell(0, 5, _txt(msg), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(1)
    pdf.set_text_color(0, 0, 0)

    if result.warnings:
        pdf.ln(3)
        section("Warnings")
        pdf.set_font("helvetica", size=9)
        for w in result.warnings:
            pdf.multi_cell(0, 5, _txt(f"- {w}"), new_x="LMARGIN", new_y="NEXT")

    # 8. Charts
    pdf.add_page()
    section("Charts")

    with tempfile.TemporaryDirectory() as tmpdir:
        fig_pareto = Figure(figsize=(9, 5.5))
        get_pareto_chart(result.pareto, fig_pareto.add_subplot(111))
        path_pareto = os.path.join(tmpdir, "pareto_chart.png")
        fig_pareto.savefig(path_pareto, bbox_inches="tight", dpi=100)
        pdf.image(path_pareto, x=10, w=190)
        pdf.ln(5)

        fig_dist = Figure(figsize=(9, 4.5))
        get_stack_distribution_chart(result, fig_dist.add_subplot(111))
        path_dist = os.path.join(tmpdir, "distribution_chart.png")
        fig_dist.savefig(path_dist, bbox_inches="tight", dpi=100)
        pdf.add_page()
        pdf.image(path_dist, x=10, w=190)

    out = pdf.output()
    if isinstance(out, str):
        return out.encode("latin-1")
    return bytes(out)


def save_pdf_report(result: StackAnalysisResult, output_path: str, setup: Optional[AnalysisSetup] = None):
    """Generates and saves the PDF report to a file."""
    pdf_bytes = create_pdf_report(result, setup)
    with open(output_path, "wb") as f:
        f.write(pdf_bytes)
