"""Flask application factory for the SweatSmart climate risk service."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from flask import Flask, jsonify

import config
from backend.db import db, init_db
from backend.routes_climate import climate_bp
from backend.routes_reports import reports_bp


def create_app(test_config: Optional[Mapping] = None):
    app = Flask(__name__)
    app.config.from_object(config)
    if test_config:
        app.config.update(test_config)
    db.init_app(app)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    with app.app_context():
        init_db()
    app.register_blueprint(climate_bp, url_prefix="/climate")
    app.register_blueprint(reports_bp, url_prefix="/reports")

    @app.route("/healthz")
    def healthz():
        return jsonify({"status": "ok"})

    logging.info("Climate API: http://localhost:5000/climate")
    return app
