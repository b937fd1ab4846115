from pathlib import Path

import pytest

matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")  # type: ignore[attr-defined]

from roofquote.geometry import measure
from roofquote.visuals import plot_polygon


def test_plot_polygon_writes_png(tmp_path):
    result = measure([(0, 0), (100, 0), (100, 100), (0, 100), (0, 0)], 0.1)
    target = plot_polygon(result, tmp_path / "plots" / "outline.png")
    assert target.exists()
    assert target.read_bytes()[:4] == b"\x89PNG"


def test_plot_polygon_rejects_failed_measurement(tmp_path):
    with pytest.raises(ValueError):
        plot_polygon(measure([(0, 0)], 1.0), Path(tmp_path) / "x.png")
