"""HTTP endpoint serving the stats summary as JSON and as a page."""

import logging
import os

from flask import Flask, jsonify, request

from errors import ConfigurationError, UpstreamError
from pipeline import StatsPipeline
from renderer import ViewFilter, render_error, render_html
from generate_stats import DEFAULT_CONFIG, DEFAULT_TEMPLATE, load_config, setup_logging

log = logging.getLogger(__name__)


def create_app(config: dict = None, template_path=DEFAULT_TEMPLATE) -> Flask:
    app = Flask(__name__)
    cfg = config if config is not None else {}

    @app.route("/api/github-stats", methods=["GET"])
    def github_stats():
        try:
            stats = StatsPipeline(cfg).run()
        except ConfigurationError as e:
            log.warning(f"No GitHub username or token found: {e}")
            return jsonify({"error": "No GitHub username or token found."}), 401
        except UpstreamError as e:
            log.error(f"Failed to fetch GitHub stats: {e}")
            return jsonify({"error": "Failed to fetch GitHub stats"}), 500

        resp = jsonify(stats)
        resp.headers["Cache-Control"] = "no-cache"
        return resp

    @app.route("/", methods=["GET"])
    def home():
        view = ViewFilter.parse(request.args.get("category"), request.args.get("visibility"))
        expanded = request.args.get("expanded") == "1"
        try:
            stats = StatsPipeline(cfg).run()
        except (ConfigurationError, UpstreamError) as e:
            log.error(f"Failed to load GitHub stats: {e}")
            return render_error(template_path, e), 500, {"Content-Type": "text/html; charset=utf-8"}

        html = render_html(stats, template_path, cfg.get("username") or os.environ.get("GITHUB_USERNAME", ""), view, expanded)
        return html, 200, {"Content-Type": "text/html; charset=utf-8"}

    @app.route("/healthz", methods=["GET"])
    def healthz():
        return jsonify({"ok": True, "token_configured": bool(os.environ.get("GITHUB_TOKEN"))})

    return app


if __name__ == "__main__":
    setup_logging()
    app = create_app(load_config(DEFAULT_CONFIG))
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port)
