from __future__ import annotations

from typing import Any, Dict, Optional, Union

import altair as alt
import pandas as pd

from explorer.projection import ChartProjection

alt.data_transformers.disable_max_rows()

SERIES_COLOR = "#00CED1"
TREND_COLOR = "#f59e0b"
PIE_COLORS = [
    "#00CED1", "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4",
    "#FFEAA7", "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE",
]
TITLE_MAX_CHARS = 20

Chart = Union[alt.Chart, alt.LayerChart]


def to_vega_spec(chart: Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def truncate_title(title: Optional[str], limit: int = TITLE_MAX_CHARS) -> str:
    title = title or ""
    return title if len(title) <= limit else f"{title[:limit]}..."


def _pie_chart(projection: ChartProjection, x_title: str) -> alt.Chart:
    groups = pd.DataFrame(
        [{"name": g.name, "value": g.value} for g in projection.pie_groups or []],
        columns=["name", "value"],
    )
    return (
        alt.Chart(groups)
        .mark_arc(outerRadius=120)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("name:N", title=x_title, sort=None, scale=alt.Scale(range=PIE_COLORS)),
            tooltip=[alt.Tooltip("name:N", title=x_title), alt.Tooltip("value:Q", format=",.2f")],
        )
    )


def build_chart(
    projection: ChartProjection,
    kind: str = "line",
    *,
    x_title: Optional[str] = None,
    y_title: Optional[str] = None,
) -> Chart:
    x_title = truncate_title(x_title if x_title is not None else projection.x_column)
    y_title = truncate_title(y_title if y_title is not None else projection.y_column)
    if kind == "pie":
        return _pie_chart(projection, x_title)

    points = pd.DataFrame(
        [{"index": i, "label": p.label, "y": p.y} for i, p in enumerate(projection.points)],
        columns=["index", "label", "y"],
    )
    base = alt.Chart(points)
    if kind == "bar":
        marks = base.mark_bar(color=SERIES_COLOR)
    elif kind == "area":
        marks = base.mark_area(color=SERIES_COLOR, opacity=0.2, line={"color": SERIES_COLOR})
    elif kind == "scatter":
        marks = base.mark_circle(color=SERIES_COLOR, size=60)
    else:
        marks = base.mark_line(color=SERIES_COLOR, point=True, interpolate="monotone")

    x = alt.X("label:N", title=x_title, sort=None)
    series = marks.encode(
        x=x,
        y=alt.Y("y:Q", title=y_title, axis=alt.Axis(format="~s")),
        tooltip=[alt.Tooltip("label:N", title=x_title), alt.Tooltip("y:Q", title=y_title, format=",.2f")],
    )

    trend = projection.trend
    if trend is None or len(projection.points) < 2:
        return series

    segment = pd.DataFrame(
        {
            "label": [projection.points[0].label, projection.points[-1].label],
            "y": [trend.start_y, trend.end_y],
        }
    )
    trend_layer = (
        alt.Chart(segment)
        .mark_line(color=TREND_COLOR, strokeDash=[5, 5], strokeWidth=2)
        .encode(x=x, y="y:Q")
    )
    return alt.layer(series, trend_layer)
