"""
Plotting utilities for sglife projections.

Purpose
-------
Matplotlib views of a ProjectionResult and of several scenarios side by
side. matplotlib is imported lazily so the engine never pays for it.

Functions
---------
plot_projection(result, ...)
    Two panels: net worth split into cash / CPF / investments, and the
    CPF account balances, with the monthly cash flow on a twin axis.
plot_scenarios(results, metric="net_worth", ...)
    One line per scenario for a snapshot metric, colored with the
    scenario colors when given.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Tuple

import numpy as np

if TYPE_CHECKING:
    from .engine import ProjectionResult

__all__ = ["plot_projection", "plot_scenarios"]

_METRICS = (
    "net_worth", "cash_savings", "cpf_total", "cpf_oa", "cpf_sa", "cpf_ma",
    "cash_flow", "monthly_income", "annual_expenses",
)


def plot_projection(
    result: "ProjectionResult",
    title: str = "Life Projection",
    figsize: Tuple[float, float] = (14, 6),
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Plot net worth composition and CPF balances over age.

    Parameters
    ----------
    result : ProjectionResult
    title : str
    figsize : tuple
    save_path : str, optional
        Path to save figure.
    return_fig_ax : bool, default False
        If True, returns (fig, axes).

    Returns
    -------
    None or (fig, axes)
    """
    import matplotlib.pyplot as plt

    df = result.to_frame()
    ages = df.index.to_numpy()

    fig, axes = plt.subplots(1, 2, figsize=figsize)

    # Panel 1: net worth composition
    axes[0].stackplot(
        ages,
        np.clip(df["cash_savings"].to_numpy(), 0, None),
        df["cpf_total"].to_numpy(),
        df["investments"].to_numpy(),
        labels=["Cash", "CPF", "Investments"],
        alpha=0.7,
    )
    axes[0].plot(ages, df["net_worth"], color="black", linewidth=2, label="Net worth")
    depleted = result.cash_depletion_age()
    if depleted is not None:
        axes[0].axvline(depleted, color="red", linestyle="--", alpha=0.6,
                        label=f"Cash < 0 at {depleted}")
    axes[0].set_xlabel("Age", fontsize=11)
    axes[0].set_ylabel("SGD", fontsize=11)
    axes[0].set_title("Net Worth", fontsize=12, fontweight="bold")
    axes[0].legend(loc="upper left", fontsize=9)
    axes[0].grid(True, alpha=0.3)

    # Panel 2: CPF accounts + monthly cash flow
    for col, label in (("cpf_oa", "OA"), ("cpf_sa", "SA"), ("cpf_ma", "MA")):
        axes[1].plot(ages, df[col], label=label, linewidth=2)
    twin = axes[1].twinx()
    twin.bar(ages, df["cash_flow"], color="gray", alpha=0.25, label="Monthly cash flow")
    twin.set_ylabel("Monthly cash flow", fontsize=10)
    axes[1].set_xlabel("Age", fontsize=11)
    axes[1].set_title("CPF Balances", fontsize=12, fontweight="bold")
    axes[1].legend(loc="upper left", fontsize=9)
    axes[1].grid(True, alpha=0.3)

    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, bbox_inches="tight", dpi=150)

    if return_fig_ax:
        return fig, axes


def plot_scenarios(
    results: Dict[str, "ProjectionResult"],
    metric: str = "net_worth",
    colors: Optional[Dict[str, str]] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (12, 6),
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Compare one snapshot metric across scenarios.

    Parameters
    ----------
    results : dict[str, ProjectionResult]
        Scenario label -> projection.
    metric : str, default "net_worth"
        Snapshot field to plot.
    colors : dict[str, str], optional
        Scenario label -> hex color.
    """
    if not isinstance(results, dict):
        raise TypeError("results must be a dict of label -> ProjectionResult")
    if metric not in _METRICS:
        raise ValueError(f"Unsupported metric '{metric}'. Valid: {', '.join(_METRICS)}")

    import matplotlib.pyplot as plt

    colors = colors or {}
    fig, ax = plt.subplots(figsize=figsize)
    for label, result in results.items():
        df = result.to_frame()
        ax.plot(df.index, df[metric], label=label, linewidth=2.5, color=colors.get(label))

    ax.axhline(0, color="black", linewidth=0.8, alpha=0.5)
    ax.set_xlabel("Age", fontsize=11)
    ax.set_ylabel(metric.replace("_", " ").title(), fontsize=11)
    ax.set_title(title or f"Scenario Comparison: {metric}", fontsize=13, fontweight="bold")
    ax.legend(loc="best", fontsize=10)
    ax.grid(True, alpha=0.3)
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, bbox_inches="tight", dpi=150)

    if return_fig_ax:
        return fig, ax
