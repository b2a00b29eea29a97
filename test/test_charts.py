from __future__ import annotations

from goals_survey.models.survey import ChartData
from goals_survey.services.charts import ChartRenderer, ChartSeries, ChartType


def _series() -> ChartSeries:
    series = ChartSeries.from_chart_data(ChartData(title="Priority", labels=["Career", "Health"], values=[3, 7]))
    assert series is not None
    return series


def test_series_requires_labels_and_values() -> None:
    assert ChartSeries.from_chart_data(ChartData(title="Empty")) is None
    assert ChartSeries.from_chart_data(ChartData(title="No values", labels=["a"], values=[])) is None


def test_series_pairs_labels_with_values() -> None:
    series = ChartSeries.from_chart_data(ChartData(title="t", labels=["a", "b", "c"], values=[1, 2]))

    assert series is not None
    assert series.chart_type == ChartType.BAR
    assert series.to_series() == [("a", 1.0), ("b", 2.0)]


def test_render_builds_single_bar_series_from_zero() -> None:
    renderer = ChartRenderer()

    figure = renderer.render(_series())

    axes = figure.axes[0]
    assert len(axes.patches) == 2
    assert axes.get_ylim()[0] == 0
    assert axes.get_legend_handles_labels()[1] == ["Priority"]


def test_render_replaces_previous_figure() -> None:
    renderer = ChartRenderer()
    first = renderer.render(_series())

    second = renderer.render(_series())

    assert second is not first
    assert first.axes == []
    assert renderer.figure is second


def test_destroy_and_png_export() -> None:
    renderer = ChartRenderer()
    assert renderer.to_png() is None

    renderer.render(_series())
    png = renderer.to_png()
    assert png is not None and png.startswith(b"\x89PNG")

    renderer.destroy()
    assert renderer.figure is None
    assert renderer.to_png() is None
