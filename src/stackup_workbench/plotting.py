import matplotlib.pyplot as plt
import matplotlib.transforms as mtransforms
import numpy as np

from stackup_workbench.engine.pareto import ParetoRanking, VITAL_FEW_THRESHOLD
from stackup_workbench.engine.stack_engine import StackAnalysisResult

DANGER_PERCENT = 40.0
COLOR_ACCENT = "#006699"
COLOR_DANGER = "#c0392b"


def get_pareto_chart(ranking: ParetoRanking, ax: plt.Axes):
    """Generates the Pareto contribution chart on the given Axes."""
    ax.clear()

    if not ranking.has_data:
        ax.text(0.5, 0.5, ranking.message, transform=ax.transAxes, ha="center", va="center", fontsize=10)
        ax.set_axis_off()
        return None

    entries = list(ranking)
    x_pos = np.arange(len(entries))
    percents = [e.percent for e in entries]
    cumulative = [min(e.cumulative_percent, 100.0) for e in entries]
    colors = [COLOR_DANGER if p > DANGER_PERCENT else COLOR_ACCENT for p in percents]

    ax.bar(x_pos, percents, color=colors, edgecolor="black", linewidth=0.5, zorder=3)
    ax.set_ylabel("% of Stack Variance")
    ax.set_ylim(0, 100)
    ax.set_xticks(x_pos)
    ax.set_xticklabels([f"#{e.item_number} {e.description}" for e in entries], rotation=45, ha="right", fontsize=8)
    ax.set_title("Pareto Contribution to Stack Variance")
    ax.grid(True, axis="y", linestyle=":", alpha=0.5, zorder=1)

    for x, p in zip(x_pos, percents):
        ax.text(x, p + 1, f"{p:.1f}%", ha="center", va="bottom", fontsize=8)

    ax_cum = ax.twinx()
    ax_cum.plot(x_pos, cumulative, marker="o", color="black", linewidth=1.5, zorder=4)
    ax_cum.axhline(VITAL_FEW_THRESHOLD, color="gray", linestyle="--", linewidth=1.0)
    ax_cum.set_ylim(0, 105)
    ax_cum.set_ylabel("Cumulative %")

    trans_annot = mtransforms.blended_transform_factory(ax_cum.transAxes, ax_cum.transData)
    ax_cum.text(1.01, VITAL_FEW_THRESHOLD, f"{VITAL_FEW_THRESHOLD:.0f}%", transform=trans_annot,
                color="gray", va="center", ha="left", fontsize=8)

    ax.figure.subplots_adjust(bottom=0.35)
    return ax_cum


def get_stack_distribution_chart(result: StackAnalysisResult, ax: plt.Axes):
    """Generates the stack distribution chart (normal curve, limits, WC and RSS bounds)."""
    ax.clear()
    stack = result.stack
    limits = result.config.spec_limits
    mean, sigma = stack.stack_mean, stack.stack_sigma

    span = max(stack.worst_case, 4.0 * sigma)
    for lim in (limits.lsl, limits.usl):
        if lim is not None:
            span = max(span, abs(lim - mean))
    if span == 0:
        span = 1.0
    span *= 1.15

    if sigma > 0:
        x_axis = np.linspace(mean - span, mean + span, 500)
        pdf = np.exp(-0.5 * ((x_axis - mean) / sigma) ** 2) / (sigma * np.sqrt(2 * np.pi))
        ax.plot(x_axis, pdf, color=COLOR_ACCENT, linewidth=2, label="Stack distribution", zorder=3)
        ax.fill_between(x_axis, pdf, color=COLOR_ACCENT, alpha=0.15, zorder=2)

    ax.axvline(mean, color="green", linewidth=1.5, label="Mean", zorder=2)

    wc_lo, wc_hi = stack.worst_case_limits
    rss_lo, rss_hi = stack.rss_limits
    ax.axvline(wc_lo, color="orange", linestyle="--", linewidth=1.2, label="Worst case")
    ax.axvline(wc_hi, color="orange", linestyle="--", linewidth=1.2)
    ax.axvline(rss_lo, color="purple", linestyle="-.", linewidth=1.2, label="RSS")
    ax.axvline(rss_hi, color="purple", linestyle="-.", linewidth=1.2)

    trans_annot = mtransforms.blended_transform_factory(ax.transData, ax.transAxes)
    for name, lim in (("LSL", limits.lsl), ("USL", limits.usl)):
        if lim is None:
            continue
        ax.axvline(lim, color="red", linewidth=2, zorder=4)
        ax.text(lim, 1.01, f"{name} = {lim:.3f}", transform=trans_annot,
                color="red", ha="center", va="bottom", fontsize=9, fontweight="bold")

    ax.set_xlim(mean - span, mean + span)
    ax.set_xlabel("Stack dimension")
    ax.set_yticks([])
    ax.set_title(f"Stack Distribution (mean = {mean:.3f}, sigma = {sigma:.4f})", pad=18)
    ax.legend(loc="upper right", fontsize=8)
    ax.grid(True, axis="x", linestyle=":", alpha=0.5, zorder=1)
