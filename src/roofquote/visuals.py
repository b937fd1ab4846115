"""Optional outline plot of a measured roof section."""

from __future__ import annotations

from pathlib import Path

try:  # pragma: no cover - optional dependency
    import matplotlib

    matplotlib.use("Agg")  # Ensure headless operation on CI/servers.
    import matplotlib.pyplot as plt
except Exception:  # pragma: no cover - matplotlib unavailable or misconfigured
    plt = None  # type: ignore

from .formatting import format_measurement
from .models import MeasurementResult


def plot_polygon(result: MeasurementResult, path: Path, dpi: int = 140) -> Path:
    """Render the outline with per-edge lengths in metres to ``path``.

    Image y runs downwards, so the axis is inverted to match the capture
    preview.
    """

    if plt is None:
        raise RuntimeError("matplotlib is required for plots. Install with: pip install roofquote[visuals]")
    if not result.ok:
        raise ValueError(f"Cannot plot failed measurement: {result.error}")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    points = list(result.points)
    xs = [p.x for p in points] + [points[0].x]
    ys = [p.y for p in points] + [points[0].y]

    fig, ax = plt.subplots(figsize=(8, 6), dpi=dpi)
    ax.fill(xs, ys, color="#64B5CD", alpha=0.3)
    ax.plot(xs, ys, color="#4C72B0", linewidth=2, marker="o")
    for idx, length in enumerate(result.edges_meters):
        if length <= 0:
            continue
        start, end = points[idx], points[(idx + 1) % len(points)]
        ax.annotate(
            f"{length:.2f} m",
            ((start.x + end.x) / 2, (start.y + end.y) / 2),
            ha="center",
            fontsize=8,
        )
    ax.plot([result.centroid.x], [result.centroid.y], marker="x", color="#C44E52")
    ax.set_title(format_measurement(result).splitlines()[0])
    ax.set_xlabel("x (px)")
    ax.set_ylabel("y (px)")
    ax.set_aspect("equal", adjustable="datalim")
    ax.invert_yaxis()
    ax.grid(True, linestyle="--", alpha=0.3)
    fig.tight_layout()
    fig.savefig(path, format=path.suffix.lstrip(".") or "png", bbox_inches="tight")
    plt.close(fig)
    return path


__all__ = ["plot_polygon"]
