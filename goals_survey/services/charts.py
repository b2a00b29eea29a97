from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from matplotlib.figure import Figure

from goals_survey.core.logging import get_logger
from goals_survey.models.survey import ChartData

logger = get_logger(__name__)

BAR_COLOR = (75 / 255, 192 / 255, 192 / 255, 0.6)
BAR_EDGE_COLOR = (75 / 255, 192 / 255, 192 / 255, 1.0)


class ChartType(str, Enum):
    """Supported chart shapes for report visualisations."""

    BAR = "bar"


@dataclass(frozen=True)
class ChartSeries:
    """A single labelled data series ready to hand to the charting layer."""

    chart_type: ChartType
    labels: Tuple[str, ...]
    values: Tuple[float, ...]
    title: str

    @classmethod
    def from_chart_data(cls, data: ChartData) -> "ChartSeries | None":
        """Return a bar series, or ``None`` when there is nothing to plot."""

        if not data.labels or not data.values:
            return None
        pairs = list(zip(data.labels, data.values))
        return cls(
            chart_type=ChartType.BAR,
            labels=tuple(label for label, _ in pairs),
            values=tuple(float(value) for _, value in pairs),
            title=data.title,
        )

    def to_series(self) -> List[Tuple[str, float]]:
        """Return data as a list of (label, value) tuples."""

        return list(zip(self.labels, self.values))


class ChartRenderer:
    """Holds the one live chart figure; each render replaces the previous one."""

    def __init__(self, *, width: float = 7.0, height: float = 3.6) -> None:
        self._size = (width, height)
        self._figure: Figure | None = None

    @property
    def figure(self) -> Figure | None:
        return self._figure

    def render(self, series: ChartSeries) -> Figure:
        self.destroy()

        figure = Figure(figsize=self._size)
        axes = figure.add_subplot(1, 1, 1)
        axes.bar(
            list(series.labels),
            list(series.values),
            label=series.title,
            color=BAR_COLOR,
            edgecolor=BAR_EDGE_COLOR,
            linewidth=1,
        )
        axes.set_ylim(bottom=0)
        if series.title:
            axes.legend(loc="upper right")
        axes.tick_params(axis="x", labelrotation=20)
        figure.tight_layout()

        self._figure = figure
        logger.debug("Chart rendered", extra={"points": len(series.labels)})
        return figure

    def destroy(self) -> None:
        if self._figure is not None:
            self._figure.clear()
            self._figure = None

    def to_png(self, *, dpi: int = 150) -> bytes | None:
        """Return the live chart as PNG bytes, if one is rendered."""

        if self._figure is None:
            return None
        buffer = io.BytesIO()
        self._figure.savefig(buffer, format="png", dpi=dpi, bbox_inches="tight")
        return buffer.getvalue()


__all__ = ["ChartRenderer", "ChartSeries", "ChartType"]
