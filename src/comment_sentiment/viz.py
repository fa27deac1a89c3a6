from __future__ import annotations
import os, textwrap
from typing import Optional, Sequence, Tuple
import matplotlib.pyplot as plt
import pandas as pd

from .metrics import results_table
from .models import AnalyzedComment, RunStats

SENTIMENT_COLORS = {
    "positive": "#2ecc71",
    "negative": "#e74c3c",
    "neutral": "#f1c40f",
}

def _ensure_dir(p: Optional[str]) -> None:
    if p:
        d = os.path.dirname(p)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)

def _wrap(s: str, width: int) -> str:
    s = (s or "").strip()
    return "\n".join(textwrap.wrap(s, width=width)) if s else ""

def _finish(fig: plt.Figure, out_path: Optional[str], show: bool, **save_kw) -> Optional[str]:
    saved = None
    if out_path:
        _ensure_dir(out_path)
        fig.savefig(out_path, dpi=150, **save_kw)
        saved = out_path
    if show:
        plt.show()
    else:
        plt.close(fig)
    return saved


def plot_stat_tiles(
    stats: RunStats,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, Sequence[plt.Axes], Optional[str]]:
    """Five stat cards: Total Rows, Analyzed Comments, Positive, Negative, Neutral."""
    tiles = [
        ("Total Rows", stats.total, "#3498db"),
        ("Analyzed Comments", stats.valid, "#9b59b6"),
        ("Positive", stats.positive, SENTIMENT_COLORS["positive"]),
        ("Negative", stats.negative, SENTIMENT_COLORS["negative"]),
        ("Neutral", stats.neutral, SENTIMENT_COLORS["neutral"]),
    ]
    fig, axes = plt.subplots(1, len(tiles), figsize=(13, 2.2))
    for ax, (title, value, color) in zip(axes, tiles):
        ax.set_xticks([]); ax.set_yticks([])
        for side in ax.spines.values():
            side.set_edgecolor("#dddddd")
        ax.axhline(1.0, color=color, linewidth=6)
        ax.text(0.06, 0.78, title, fontsize=10, weight="bold", va="top", ha="left", transform=ax.transAxes)
        ax.text(0.06, 0.40, f"{value:,}", fontsize=22, weight="bold", va="center", ha="left",
                transform=ax.transAxes)
    fig.tight_layout()
    return fig, axes, _finish(fig, out_path, show, bbox_inches="tight")


def plot_sentiment_distribution(
    stats: RunStats,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """One horizontal bar, stacked Positive / Negative / Neutral."""
    fig, ax = plt.subplots(figsize=(10, 3))
    left = 0
    for label in ("positive", "negative", "neutral"):
        n = getattr(stats, label)
        ax.barh(["Sentiments"], [n], left=left, color=SENTIMENT_COLORS[label], label=label.title())
        if n:
            ax.text(left + n / 2, 0, str(n), ha="center", va="center", fontsize=10, weight="bold")
        left += n
    ax.set_title("Sentiment Distribution")
    ax.set_xlabel("Comments")
    ax.set_yticks([])
    ax.grid(axis="x", linestyle="--", alpha=0.5)
    ax.legend(ncols=3, loc="upper center", bbox_to_anchor=(0.5, -0.35), frameon=False)
    fig.tight_layout()
    return fig, ax, _finish(fig, out_path, show, bbox_inches="tight")


def plot_results_table(
    analyzed: Sequence[AnalyzedComment],
    out_path: Optional[str] = None,
    show: bool = False,
    *,
    limit: int = 20,
    wrap_width: int = 45,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Render the strongest comments as a table image."""
    tbl = results_table(analyzed, limit=limit)
    cells = [[_wrap(str(r["Original Comment"]), wrap_width), _wrap(str(r["Cleaned Comment"]), wrap_width),
              r["Sentiment"], f"{r['Polarity']:.2f}"] for _, r in tbl.iterrows()]
    n_lines = sum(max(c[0].count("\n"), c[1].count("\n")) + 1 for c in cells)

    fig, ax = plt.subplots(figsize=(14, 1.2 + 0.28 * max(n_lines, 1)))
    ax.axis("off")
    if cells:
        table = ax.table(cellText=cells, colLabels=list(tbl.columns),
                         loc="upper center", cellLoc="left", colLoc="left",
                         colWidths=[0.4, 0.4, 0.1, 0.1])
        table.auto_set_font_size(False)
        table.set_fontsize(9)
        for (row, col), cell in table.get_celld().items():
            if row > 0 and col == 2:
                cell.set_facecolor(SENTIMENT_COLORS.get(cells[row - 1][2], "white"))
            if row > 0:
                lines = max(cells[row - 1][0].count("\n"), cells[row - 1][1].count("\n")) + 1
                cell.set_height(0.05 * lines)
    ax.set_title(f"Analyzed Comments (top {len(cells)} by |polarity|)")
    return fig, ax, _finish(fig, out_path, show, bbox_inches="tight")


def export_results_table(
    analyzed: Sequence[AnalyzedComment],
    out_csv_path: Optional[str] = None,
    *,
    sort_by: str = "strength",
    ascending: bool = False,
    limit: Optional[int] = None,
) -> pd.DataFrame:
    """
    Save (and return) the results table.

    Columns: ['Original Comment','Cleaned Comment','Sentiment','Polarity'].
    """
    tbl = results_table(analyzed, sort_by=sort_by, ascending=ascending, limit=limit)
    if out_csv_path:
        _ensure_dir(out_csv_path)
        tbl.to_csv(out_csv_path, index=False)
    return tbl
