"""matplotlib figures for the result panels.

Each builder takes engine output and returns a ``Figure`` that a panel can
drop into a canvas or save to disk. Nothing here touches a GUI toolkit.
"""

from __future__ import annotations

import numpy as np
from matplotlib.figure import Figure
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401 (required for 3D projection)

from quantum_composer.engine.analysis import BlochAngles
from quantum_composer.engine.measurement import MeasurementSummary
from quantum_composer.engine.state_vector import StateVector

_THEMES = {
    "light": {"bg": "#FFFFFF", "text": "#1F2937", "bar": "#3B82F6",
              "bar2": "#A855F7", "wire": "#9CA3AF", "grid": "#E5E7EB"},
    "dark": {"bg": "#1F2937", "text": "#F3F4F6", "bar": "#60A5FA",
             "bar2": "#C084FC", "wire": "#6B7280", "grid": "#374151"},
}

# Distinct colors for per-qubit state vectors
_QUBIT_COLORS = [
    "#FF4444", "#44AAFF", "#44DD44", "#FFAA22",
    "#DD44DD", "#22DDDD", "#FFDD44", "#FF66AA",
]


def _colors(theme: str) -> dict:
    return _THEMES.get(theme, _THEMES["light"])


def _style_axes(ax, colors: dict) -> None:
    ax.set_facecolor(colors["bg"])
    ax.tick_params(colors=colors["text"], labelsize=8)
    for spine in ax.spines.values():
        spine.set_color(colors["grid"])
    ax.yaxis.label.set_color(colors["text"])
    ax.xaxis.label.set_color(colors["text"])
    ax.title.set_color(colors["text"])


def _empty(ax, message: str, colors: dict) -> None:
    ax.text(0.5, 0.5, message, ha="center", va="center",
            transform=ax.transAxes, fontsize=12, color="gray")
    ax.set_xticks([])
    ax.set_yticks([])
    _style_axes(ax, colors)


def probability_figure(probabilities: dict[str, float],
                       theme: str = "light") -> Figure:
    """Bar chart of the exact measurement distribution."""
    colors = _colors(theme)
    fig = Figure(figsize=(6, 3), dpi=100)
    fig.set_facecolor(colors["bg"])
    ax = fig.add_subplot(111)
    if not probabilities:
        _empty(ax, "No probability data", colors)
        return fig

    labels = sorted(probabilities)
    values = [probabilities[k] for k in labels]
    ax.bar(range(len(labels)), values, color=colors["bar"])
    ax.set_xticks(range(len(labels)))
    ax.set_xticklabels([f"|{k}⟩" for k in labels],
                       rotation=45 if len(labels) > 8 else 0)
    ax.set_ylim(0, 1.05)
    ax.set_ylabel("Probability")
    ax.set_title("Measurement probabilities")
    _style_axes(ax, colors)
    fig.tight_layout()
    return fig


def counts_figure(summary: MeasurementSummary, theme: str = "light") -> Figure:
    """Histogram of shot counts with entropy in the title."""
    colors = _colors(theme)
    fig = Figure(figsize=(6, 3), dpi=100)
    fig.set_facecolor(colors["bg"])
    ax = fig.add_subplot(111)
    if not summary.counts:
        _empty(ax, "No measurement data", colors)
        return fig

    labels = sorted(summary.counts)
    values = [summary.counts[k] for k in labels]
    ax.bar(range(len(labels)), values, color=colors["bar2"])
    ax.set_xticks(range(len(labels)))
    ax.set_xticklabels(labels, rotation=45 if len(labels) > 8 else 0)
    ax.set_ylabel("Counts")
    ax.set_title(f"{summary.total_shots} shots, entropy {summary.entropy:.3f} bits")
    _style_axes(ax, colors)
    fig.tight_layout()
    return fig


def amplitude_figure(state: StateVector, threshold: float = 0.01,
                     theme: str = "light") -> Figure:
    """Real/imaginary parts and phase of every amplitude above ``threshold``."""
    colors = _colors(theme)
    fig = Figure(figsize=(6, 4), dpi=100)
    fig.set_facecolor(colors["bg"])
    ax_amp = fig.add_subplot(211)
    ax_phase = fig.add_subplot(212)

    data = state.data
    shown = [i for i in range(len(data)) if abs(data[i]) > threshold]
    if not shown:
        _empty(ax_amp, "No significant amplitudes", colors)
        _empty(ax_phase, "", colors)
        return fig

    x = np.arange(len(shown))
    width = 0.4
    ax_amp.bar(x - width / 2, data[shown].real, width, color=colors["bar"], label="Re")
    ax_amp.bar(x + width / 2, data[shown].imag, width, color=colors["bar2"], label="Im")
    ax_amp.axhline(0, color=colors["grid"], linewidth=0.8)
    ax_amp.set_ylim(-1.05, 1.05)
    ax_amp.set_ylabel("Amplitude")
    ax_amp.legend(fontsize=7, loc="upper right")

    ax_phase.bar(x, np.angle(data[shown]), color=colors["bar"])
    ax_phase.set_ylim(-np.pi, np.pi)
    ax_phase.set_ylabel("Phase (rad)")

    labels = [f"|{state.basis_label(i)}⟩" for i in shown]
    for ax in (ax_amp, ax_phase):
        ax.set_xticks(x)
        ax.set_xticklabels(labels, rotation=45 if len(shown) > 8 else 0)
        _style_axes(ax, colors)
    fig.tight_layout()
    return fig


def _grid(n: int) -> tuple[int, int]:
    if n <= 1:
        return 1, 1
    if n <= 2:
        return 1, 2
    if n <= 4:
        return 2, 2
    if n <= 6:
        return 2, 3
    return 3, 3


def bloch_figure(angles: list[BlochAngles], theme: str = "light") -> Figure:
    """Grid of small Bloch spheres, one per qubit."""
    colors = _colors(theme)
    fig = Figure(figsize=(6, 6), dpi=100)
    fig.set_facecolor(colors["bg"])

    rows, cols = _grid(len(angles))
    u = np.linspace(0, 2 * np.pi, 20)
    v = np.linspace(0, np.pi, 12)
    sx = np.outer(np.cos(u), np.sin(v))
    sy = np.outer(np.sin(u), np.sin(v))
    sz = np.outer(np.ones_like(u), np.cos(v))
    ring = np.linspace(0, 2 * np.pi, 60)

    for i, bloch in enumerate(angles):
        ax = fig.add_subplot(rows, cols, i + 1, projection="3d")
        ax.set_facecolor(colors["bg"])
        ax.plot_wireframe(sx, sy, sz, color=colors["wire"], alpha=0.1, linewidth=0.5)
        ax.plot(np.cos(ring), np.sin(ring), np.zeros_like(ring),
                color=colors["wire"], alpha=0.4, linewidth=0.7)
        ax.text(0, 0, 1.25, "|0⟩", color=colors["text"], ha="center", fontsize=8)
        ax.text(0, 0, -1.35, "|1⟩", color=colors["text"], ha="center", fontsize=8)

        vec_color = _QUBIT_COLORS[i % len(_QUBIT_COLORS)]
        ax.quiver(0, 0, 0, bloch.x, bloch.y, bloch.z,
                  color=vec_color, linewidth=2, arrow_length_ratio=0.15)
        ax.set_title(
            f"q{bloch.qubit}  θ={bloch.theta:.2f} φ={bloch.phi:.2f}",
            fontsize=8, color=colors["text"])
        ax.set_xlim([-1.2, 1.2])
        ax.set_ylim([-1.2, 1.2])
        ax.set_zlim([-1.2, 1.2])
        ax.set_xticks([])
        ax.set_yticks([])
        ax.set_zticks([])
        ax.set_box_aspect([1, 1, 1])
    return fig
