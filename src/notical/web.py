"""Browser widget - renders the widget state as an HTML page."""

import logging

from flask import Flask, abort, redirect, render_template, request, url_for

from .core.calendar import WEEKDAY_HEADERS, format_today, grid_rows
from .widget import CalendarWidget

logger = logging.getLogger(__name__)


def create_widget_app(widget: CalendarWidget) -> Flask:
    """Create the widget Flask app bound to one widget instance."""
    app = Flask(__name__)

    @app.route("/")
    def index():
        if widget.setup_visible:
            return render_template("setup.html", widget=widget)

        return render_template(
            "calendar.html",
            widget=widget,
            weeks=grid_rows(widget.grid()),
            weekday_headers=WEEKDAY_HEADERS,
            today_label=format_today(widget.now().date()),
        )

    @app.route("/setup", methods=["POST"])
    def setup():
        widget.configure(
            request.form.get("token", ""),
            request.form.get("database_id", ""),
            use_relay=request.form.get("use_relay") == "on",
        )
        return redirect(url_for("index"))

    @app.route("/reconfigure", methods=["POST"])
    def reconfigure():
        widget.reconfigure()
        return redirect(url_for("index"))

    @app.route("/prev", methods=["POST"])
    def prev_month():
        widget.previous_month()
        return redirect(url_for("index"))

    @app.route("/next", methods=["POST"])
    def next_month():
        widget.next_month()
        return redirect(url_for("index"))

    @app.route("/refresh", methods=["POST"])
    def refresh():
        widget.load()
        return redirect(url_for("index"))

    @app.route("/add", methods=["POST"])
    def add_entry():
        url = widget.add_entry()
        if url:
            return redirect(url)
        return redirect(url_for("index"))

    @app.route("/open/<int:day>")
    def open_day(day: int):
        url = widget.entry_url(day)
        if url is None:
            abort(404)
        return redirect(url)

    return app


def run_widget(widget: CalendarWidget, port: int, host: str = "127.0.0.1") -> None:
    """Serve the widget. One request at a time, so one operation at a time."""
    app = create_widget_app(widget)
    logger.info(f"Calendar widget running on http://{host}:{port}")
    app.run(host=host, port=port, threaded=False)
