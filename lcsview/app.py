"""
LCS Log Viewer — Step through the iterations of a classifier-system log

Load a log file, jump between iterations, inspect the population, match set
and action set, and chart any column of the selected set.

Panels:
  Left sidebar: Load log, navigation, iteration input, histogram and
                comparison controls
  Right: Classifier tables, histogram chart, comparison chart
"""

import logging

from dash import Dash, html, dcc, Input, Output, State
import dash
import plotly.graph_objects as go

from lcsview.comparison import compare_row, describe_row
from lcsview.config import ViewerConfig
from lcsview.errors import LogViewerError
from lcsview.histograms import parse_limit, reconcile_limits
from lcsview.log_writer import format_iteration
from lcsview.snapshot import SET_LABELS, SET_NAMES
from lcsview.timeline_store import TimelineStore

logger = logging.getLogger(__name__)

# ── Globals ──────────────────────────────────────────────────────────────────

_app = None
_config = ViewerConfig()
_store = TimelineStore(None, _config)

MAX_TABLE_ROWS = 500


def create_app(store=None, config=None):
    """Create and return a configured Dash app."""
    global _store, _config, _app
    if config is not None:
        _config = config.validate()
    if store is not None:
        _store = store
        _config = store.config

    app = Dash(__name__)
    _app = app

    # ── Styles ───────────────────────────────────────────────────────────
    dark_bg = "#0f0f1a"
    panel_bg = "#1a1a2e"
    accent = "#6366f1"
    text_color = "#e0e0ee"
    muted = "#888"

    def _panel(title, children, style_override=None):
        base_style = {
            "backgroundColor": panel_bg,
            "borderRadius": "12px",
            "padding": "16px",
            "border": "1px solid #2a2a4a",
            "marginBottom": "12px",
        }
        if style_override:
            base_style.update(style_override)
        return html.Div([
            html.H3(title, style={
                "color": text_color, "margin": "0 0 12px 0",
                "fontSize": "15px", "fontWeight": "600",
            }),
            html.Div(children),
        ], style=base_style)

    def _btn(label, id, color="#2a2a4a", **kwargs):
        return html.Button(label, id=id, n_clicks=0, style={
            "backgroundColor": color, "color": text_color,
            "border": "1px solid #3a3a5a", "borderRadius": "6px",
            "padding": "6px 14px", "cursor": "pointer",
            "fontSize": "12px", "fontWeight": "500",
            **kwargs,
        })

    def _input(id, placeholder="", type="text", value=None, width="100px"):
        return dcc.Input(
            id=id, type=type, placeholder=placeholder, value=value,
            debounce=True,
            style={
                "backgroundColor": "#1e1e3a", "color": text_color,
                "border": "1px solid #3a3a5a", "borderRadius": "4px",
                "padding": "5px 8px", "fontSize": "12px", "width": width,
            },
        )

    def _dropdown(id, options=None, value=None, placeholder="", width="140px",
                  clearable=False):
        return dcc.Dropdown(
            id=id,
            options=options or [],
            value=value,
            placeholder=placeholder,
            clearable=clearable,
            style={"width": width, "backgroundColor": "#1e1e3a",
                   "color": "#000", "fontSize": "12px"},
        )

    set_opts = [{"label": SET_LABELS[s], "value": s} for s in SET_NAMES]
    column_opts = [{"label": c, "value": c} for c in _config.column_names]
    histogram_opts = [{"label": str(h), "value": str(h)}
                      for h in _config.available_histograms()]
    first = _store.get_first_element()

    def _label(text):
        return html.Div(text, style={"color": muted, "fontSize": "12px",
                                     "marginBottom": "4px"})

    def _row(children, margin="10px"):
        return html.Div(children, style={"display": "flex", "gap": "6px",
                                         "alignItems": "center",
                                         "marginBottom": margin})

    # ── Layout ───────────────────────────────────────────────────────────

    app.layout = html.Div(
        style={
            "backgroundColor": dark_bg, "minHeight": "100vh",
            "padding": "20px", "fontFamily": "'Inter', 'Segoe UI', sans-serif",
            "color": text_color,
        },
        children=[
            # Header
            html.Div(
                style={"display": "flex", "alignItems": "center",
                       "justifyContent": "space-between", "marginBottom": "20px"},
                children=[
                    html.H1("📜 LCS Log Viewer", style={
                        "margin": "0", "fontSize": "24px",
                        "background": f"linear-gradient(135deg, {accent}, #a78bfa)",
                        "WebkitBackgroundClip": "text",
                        "WebkitTextFillColor": "transparent",
                    }),
                    html.Div(id="status-bar", style={
                        "fontSize": "13px", "color": muted,
                    }),
                ],
            ),

            html.Div(
                style={"display": "grid",
                       "gridTemplateColumns": "320px 1fr",
                       "gap": "16px"},
                children=[
                    # ── LEFT SIDEBAR: Controls ───────────────────────
                    html.Div([
                        # 1. Load
                        _panel("📂 Log File", [
                            _row([
                                _input("log-path", "path/to/experiment.log",
                                       width="190px"),
                                _btn("Load", "btn-load", color="#2a4a2a"),
                            ], margin="0"),
                            html.Div(id="load-msg", style={
                                "fontSize": "11px", "color": "#4ade80",
                                "marginTop": "4px"}),
                        ]),

                        # 2. Navigation
                        _panel("⏯ Iteration", [
                            _row([
                                _btn("⏮", "btn-first"),
                                _btn("◀", "btn-prev"),
                                _btn("▶", "btn-next"),
                                _btn("⏭", "btn-last"),
                            ]),
                            _row([
                                _input("iteration-input", "Iteration",
                                       width="120px"),
                                _btn("Go", "btn-search", color="#3a3a5a"),
                            ], margin="0"),
                            html.Div(id="search-msg", style={
                                "fontSize": "11px", "color": "#f87171",
                                "marginTop": "4px"}),
                            html.Div(id="input-text", style={
                                "fontSize": "12px", "marginTop": "8px",
                                "fontFamily": "monospace"}),
                        ]),

                        # 3. Table sorting
                        _panel("↕ Sort Tables", [
                            _row([
                                _dropdown("sort-column", column_opts,
                                          placeholder="Log order", clearable=True),
                                _dropdown("sort-order",
                                          [{"label": "Ascending", "value": "asc"},
                                           {"label": "Descending", "value": "desc"}],
                                          value="asc", width="110px"),
                            ], margin="0"),
                        ]),

                        # 4. Histogram
                        _panel("📊 Histogram", [
                            _row([
                                _dropdown("hist-set", set_opts,
                                          value="population", width="120px"),
                                _dropdown("hist-select", histogram_opts,
                                          value=(histogram_opts[0]["value"]
                                                 if histogram_opts else None),
                                          width="140px"),
                            ]),
                            _row([
                                html.Span("Lower:", style={"color": muted,
                                                           "fontSize": "12px"}),
                                _input("hist-lower", "", width="60px"),
                                html.Span("Upper:", style={"color": muted,
                                                           "fontSize": "12px"}),
                                _input("hist-upper", "", width="60px"),
                            ], margin="0"),
                        ]),

                        # 5. Comparison
                        _panel("⚖ Compare Classifier", [
                            _label("Compare one row with the rest of its set:"),
                            _row([
                                _dropdown("cmp-set", set_opts,
                                          value="population", width="120px"),
                                _input("cmp-row", "Row", type="number",
                                       value=0, width="60px"),
                                _btn("Compare", "btn-compare", color="#4a3a2a"),
                            ], margin="0"),
                        ]),
                    ]),

                    # ── RIGHT: Tables and charts ─────────────────────
                    html.Div([
                        html.Div(
                            style={"display": "grid",
                                   "gridTemplateColumns": "1fr 1fr",
                                   "gap": "12px"},
                            children=[
                                _panel("📊 Histogram", [
                                    html.Div(id="hist-info", style={
                                        "fontSize": "12px", "color": muted}),
                                    dcc.Graph(id="histogram-chart",
                                              config={"displayModeBar": False},
                                              style={"height": "260px"}),
                                ]),
                                _panel("⚖ Comparison", [
                                    dcc.Graph(id="comparison-chart",
                                              config={"displayModeBar": False},
                                              style={"height": "260px"}),
                                ]),
                            ],
                        ),
                        _panel("🧬 Population", [
                            html.Div(id="table-population",
                                     style={"maxHeight": "360px",
                                            "overflowY": "auto"}),
                        ]),
                        html.Div(
                            style={"display": "grid",
                                   "gridTemplateColumns": "1fr 1fr",
                                   "gap": "12px"},
                            children=[
                                _panel("🎯 Match Set", [
                                    html.Div(id="table-match_set",
                                             style={"maxHeight": "300px",
                                                    "overflowY": "auto"}),
                                ]),
                                _panel("⚡ Action Set", [
                                    html.Div(id="table-action_set",
                                             style={"maxHeight": "300px",
                                                    "overflowY": "auto"}),
                                ]),
                            ],
                        ),
                    ]),
                ],
            ),

            # Hidden stores for triggering updates
            dcc.Store(id="refresh-trigger", data=0),
            dcc.Store(id="current-position",
                      data=0 if first is not None else None),
        ],
    )

    # ── Callbacks ────────────────────────────────────────────────────────

    # == Load log file ==
    @app.callback(
        Output("load-msg", "children"),
        Output("current-position", "data", allow_duplicate=True),
        Output("refresh-trigger", "data", allow_duplicate=True),
        Input("btn-load", "n_clicks"),
        State("log-path", "value"),
        State("current-position", "data"),
        State("refresh-trigger", "data"),
        prevent_initial_call=True,
    )
    def load_log(n_clicks, path, current, refresh):
        message, position = _load_log(path)
        if position is None and not _store.num_snapshots:
            return message, None, refresh + 1
        if position is None:
            return message, current, refresh
        return message, position, refresh + 1

    # == Navigation ==
    @app.callback(
        Output("current-position", "data", allow_duplicate=True),
        Output("search-msg", "children"),
        Input("btn-first", "n_clicks"),
        Input("btn-prev", "n_clicks"),
        Input("btn-next", "n_clicks"),
        Input("btn-last", "n_clicks"),
        Input("btn-search", "n_clicks"),
        Input("iteration-input", "n_submit"),
        State("iteration-input", "value"),
        State("current-position", "data"),
        prevent_initial_call=True,
    )
    def navigate(first_c, prev_c, next_c, last_c, search_c, submit, text, current):
        return _navigate(dash.ctx.triggered_id, current, text)

    # == Snapshot view: status, input, tables ==
    @app.callback(
        Output("status-bar", "children"),
        Output("input-text", "children"),
        Output("iteration-input", "value"),
        Output("table-population", "children"),
        Output("table-match_set", "children"),
        Output("table-action_set", "children"),
        Input("current-position", "data"),
        Input("refresh-trigger", "data"),
        Input("sort-column", "value"),
        Input("sort-order", "value"),
    )
    def refresh_view(position, trigger, sort_column, sort_order):
        snapshot = _current_snapshot(position)
        descending = sort_order == "desc"
        tables = [_render_classifier_table(snapshot, name, sort_column, descending)
                  for name in SET_NAMES]
        input_text = f"input: {snapshot.input}" if snapshot else "input: <?>"
        field_value = format_iteration(snapshot.iteration) if snapshot else ""
        return (_render_status(snapshot), input_text, field_value, *tables)

    # == Histogram ==
    @app.callback(
        Output("histogram-chart", "figure"),
        Output("hist-info", "children"),
        Input("hist-set", "value"),
        Input("hist-select", "value"),
        Input("hist-lower", "value"),
        Input("hist-upper", "value"),
        Input("current-position", "data"),
        Input("refresh-trigger", "data"),
    )
    def update_histogram(set_name, histogram, lower, upper, position, trigger):
        edited = "upper" if dash.ctx.triggered_id == "hist-upper" else "lower"
        return _render_histogram(_current_snapshot(position), set_name,
                                 histogram, lower, upper, edited)

    # == Comparison ==
    @app.callback(
        Output("comparison-chart", "figure"),
        Input("btn-compare", "n_clicks"),
        Input("current-position", "data"),
        State("cmp-set", "value"),
        State("cmp-row", "value"),
    )
    def update_comparison(n_clicks, position, set_name, row):
        if not n_clicks:
            return _render_comparison(None, set_name, row)
        return _render_comparison(_current_snapshot(position), set_name, row)

    return app


# ── Store access ─────────────────────────────────────────────────────────────

def _load_log(path):
    """Build a new store for ``path`` and swap it in once fully loaded.
    Returns (message, position of the first snapshot or None)."""
    global _store
    if not path or not str(path).strip():
        return "⚠ Enter a log file path.", None
    path = str(path).strip()
    store = TimelineStore(path, _config)
    try:
        count = store.load()
    except LogViewerError as e:
        logger.warning("Load failed: %s", e)
        return f"❌ {e}", None
    _store = store
    if not count:
        return f"⚠ No iterations found in {path}", None
    first = store.get_first_element()
    last = store.get_last_element()
    return (f"✅ Loaded {count} iterations "
            f"({format_iteration(first.iteration)} – {format_iteration(last.iteration)})"), 0


def _current_snapshot(position):
    """Snapshot at the store position held by the UI, or None without data.
    A missing or stale position falls back to the first snapshot."""
    snapshot = None
    if position is not None:
        snapshot = _store.get_snapshot(int(position))
    return snapshot or _store.get_first_element()


def _navigate(action, current, search_text=None):
    """Resolve a navigation action. Returns (position, message).

    Previous and next follow the snapshot links, so they step through the
    log in stored order even across repeated iteration numbers.
    """
    snapshot = _current_snapshot(current)
    if snapshot is None:
        return None, "No data loaded."

    if action == "btn-first":
        target = _store.get_first_element()
    elif action == "btn-last":
        target = _store.get_last_element()
    elif action == "btn-next":
        target = snapshot.next
    elif action == "btn-prev":
        target = snapshot.previous
    elif action in ("btn-search", "iteration-input"):
        try:
            value = float(str(search_text).strip())
        except ValueError:
            return _store.position_of(snapshot), "No valid value"
        target = _store.search_element(value)
    else:
        target = snapshot
    return _store.position_of(target), ""


# ── Render Helpers ───────────────────────────────────────────────────────────

_CHART_LAYOUT = dict(
    plot_bgcolor="#1a1a2e",
    paper_bgcolor="#1a1a2e",
    font={"color": "#aaa", "size": 10},
    margin={"l": 35, "r": 15, "t": 30, "b": 30},
)


def _render_status(snapshot):
    """Status bar text for the current snapshot."""
    if snapshot is None:
        return "No data loaded."
    sizes = snapshot.set_sizes()
    return (f"Log: {_store.source_name} | Iterations: {_store.num_snapshots} | "
            f"Iteration: {format_iteration(snapshot.iteration)} | "
            f"[P] {sizes['population']}  [M] {sizes['match_set']}  "
            f"[A] {sizes['action_set']}")


def _render_classifier_table(snapshot, set_name, sort_column=None,
                             descending=False):
    """Render one classifier set as an HTML table."""
    if snapshot is None:
        return html.Div("No data.", style={"color": "#666"})
    table = snapshot.classifier_set(set_name)
    if not len(table):
        return html.Div("No classifiers.", style={"color": "#666"})

    header_style = {"padding": "4px 8px", "borderBottom": "1px solid #3a3a5a",
                    "color": "#aaa", "fontSize": "11px", "textAlign": "left"}
    row_style = {"padding": "3px 8px", "fontSize": "12px",
                 "borderBottom": "1px solid #1e1e3a", "color": "#ddd",
                 "fontFamily": "monospace"}

    rows = [html.Tr([html.Th(h, style=header_style)
                     for h in ("#",) + table.columns])]

    order = table.sorted_indices(sort_column, descending)
    for i in order[:MAX_TABLE_ROWS]:
        rows.append(html.Tr(
            [html.Td(str(i), style={**row_style, "color": "#666"})] +
            [html.Td(cell, style=row_style) for cell in table.rows[i]]
        ))

    children = [html.Table(rows, style={"width": "100%",
                                        "borderCollapse": "collapse"})]
    if len(order) > MAX_TABLE_ROWS:
        children.append(html.Div(
            f"… showing {MAX_TABLE_ROWS}/{len(order)} classifiers",
            style={"color": "#666", "fontSize": "10px", "marginTop": "4px"}))
    return html.Div(children)


def _find_histogram(name):
    for histogram in _config.available_histograms():
        if str(histogram) == name:
            return histogram
    return None


def _render_histogram(snapshot, set_name, histogram_name, lower_text=None,
                      upper_text=None, edited="lower"):
    """Histogram figure plus the classifier count line."""
    fig = go.Figure()
    info = "iteration: <?> | # classifiers: 0"
    histogram = _find_histogram(histogram_name)

    if snapshot is not None and histogram is not None and set_name:
        lower, upper = reconcile_limits(parse_limit(lower_text),
                                        parse_limit(upper_text), edited)
        data = histogram.compute(snapshot, set_name, lower, upper)
        if data.error is None:
            fig.add_trace(go.Histogram(
                x=data.values, nbinsx=100,
                marker={"color": "#6366f1",
                        "line": {"color": "#a78bfa", "width": 0.5}},
            ))
        else:
            fig.add_annotation(text=data.error, showarrow=False,
                               font={"color": "#f87171", "size": 11})
        info = f"iteration: {format_iteration(snapshot.iteration)} | {data.summary()}"
        title = f"{SET_LABELS.get(set_name, set_name)} - {histogram}"
    else:
        title = "Load a log to see histograms"

    fig.update_layout(
        **_CHART_LAYOUT,
        xaxis={"gridcolor": "#2a2a4a", "title": str(histogram or ""),
               "title_font_size": 10},
        yaxis={"gridcolor": "#2a2a4a", "title": "frequency",
               "title_font_size": 10},
        height=250,
        showlegend=False,
        title={"text": title, "font": {"size": 10, "color": "#aaa"},
               "x": 0.5, "xanchor": "center"},
    )
    return fig, info


def _row_number(value):
    """Whole row number typed by the user, or None (1.5, "x" and None are
    not row numbers)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)


def _render_comparison(snapshot, set_name, row):
    """Min / max / selected bar chart for one classifier."""
    fig = go.Figure()
    title_text = "Select a classifier and press Compare"

    if snapshot is not None and set_name:
        table = snapshot.classifier_set(set_name)
        number = _row_number(row)
        if number is None or not 0 <= number < len(table):
            title_text = f"No classifier {row} in {SET_LABELS[set_name]}"
        else:
            datasets = compare_row(table, number)
            columns = [d.column_name for d in datasets]
            for label, color, values in (
                ("max", "#f87171", [d.max for d in datasets]),
                ("min", "#22d3ee", [d.min for d in datasets]),
                ("selected", "#4ade80", [d.selected for d in datasets]),
            ):
                fig.add_trace(go.Bar(x=columns, y=values, name=label,
                                     marker={"color": color}))
            title_text = (f"{describe_row(table, number)}<br>"
                          f"- {SET_LABELS[set_name]} -")

    fig.update_layout(
        **_CHART_LAYOUT,
        xaxis={"gridcolor": "#2a2a4a"},
        yaxis={"gridcolor": "#2a2a4a"},
        height=250,
        barmode="group",
        legend={"orientation": "h", "y": 1.15, "font": {"size": 9}},
        title={"text": title_text, "font": {"size": 10, "color": "#aaa"},
               "x": 0.5, "xanchor": "center"},
    )
    return fig


# ── Main ─────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app = create_app()
    print("📜 LCS Log Viewer starting...")
    print("   Open http://127.0.0.1:8050 in your browser")
    app.run(debug=True, port=8050)
