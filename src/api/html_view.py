"""Server-rendered HTML tables for the tracker."""

from html import escape

from src.models.catalog import PERIOD_LABELS, PERIODS, STOCKS
from src.models.market_data import CustomDate, PerformanceResult, TrackerSession
from src.services.formatting import ERROR_MARKER, UNAVAILABLE_MARKER, color_class, format_percentage


def performance_cell(result: PerformanceResult | None, period: str) -> str:
    """Display text for one cell of the main table."""
    if result is None:
        return UNAVAILABLE_MARKER
    if result.error:
        return ERROR_MARKER
    return format_percentage(result.values.get(period))


def _td(text: str, css: str = "") -> str:
    class_attr = f' class="{css}"' if css else ""
    return f"<td{class_attr}>{escape(text)}</td>"


def render_performance_table(session: TrackerSession) -> str:
    header = "".join(f"<th>{escape(PERIOD_LABELS[p])}</th>" for p in PERIODS)
    rows = []
    for stock in STOCKS:
        result = session.performance.get(stock.ticker)
        cells = [_td(stock.ticker, "ticker"), _td(stock.company, "company")]
        for period in PERIODS:
            text = performance_cell(result, period)
            cells.append(_td(text, "error" if text == ERROR_MARKER else color_class(text)))
        rows.append(f"<tr>{''.join(cells)}</tr>")
    return (
        '<table id="stocks-table">'
        f"<thead><tr><th>Ticker</th><th>Company</th>{header}</tr></thead>"
        f"<tbody id=\"stocks-body\">{''.join(rows)}</tbody>"
        "</table>"
    )


def render_custom_date(custom_date: CustomDate) -> str:
    rows = []
    for stock in STOCKS:
        text = custom_date.data.get(stock.ticker) or UNAVAILABLE_MARKER
        rows.append(
            "<tr>"
            f"{_td(stock.ticker, 'ticker')}{_td(stock.company, 'company')}"
            f"{_td(text, 'error' if text == ERROR_MARKER else color_class(text))}"
            "</tr>"
        )
    return (
        f'<div class="custom-date-card" data-key="{escape(custom_date.key)}">'
        f"<h3>Performance on {escape(custom_date.display)}</h3>"
        '<table class="custom-date-table">'
        "<thead><tr><th>Ticker</th><th>Company</th><th>Performance</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table></div>"
    )


def render_page(session: TrackerSession) -> str:
    """Full HTML document for the dashboard."""
    status = '<p class="loading">Loading&hellip;</p>' if session.loading else ""
    custom = "".join(render_custom_date(d) for d in session.custom_dates)
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        "<title>European Defense Stocks Tracker</title></head><body>"
        "<h1>European Defense Stocks Tracker</h1>"
        f"{status}{render_performance_table(session)}"
        f'<div id="custom-dates-container">{custom}</div>'
        "</body></html>"
    )
