"""
Request logging for the JSON API

Every /api request is logged as "METHOD path status in Nms :: <json body>",
truncated to keep log lines short.
"""
import json
import logging
import time

from flask import g, request

logger = logging.getLogger('shopnish.requests')

MAX_LINE_LENGTH = 80


def format_log_line(method, path, status_code, duration_ms, payload=None):
    line = f"{method} {path} {status_code} in {duration_ms}ms"
    if payload is not None:
        line += f" :: {json.dumps(payload, default=str)}"
    if len(line) > MAX_LINE_LENGTH:
        line = line[:MAX_LINE_LENGTH - 1] + "…"
    return line


def register_request_logging(app):
    @app.before_request
    def start_timer():
        g.request_started_at = time.perf_counter()

    @app.after_request
    def log_request(response):
        if not request.path.startswith('/api'):
            return response

        started = g.get('request_started_at')
        duration_ms = int((time.perf_counter() - started) * 1000) if started else 0
        payload = response.get_json(silent=True) if response.is_json else None

        logger.info(format_log_line(request.method, request.path, response.status_code,
                                    duration_ms, payload))
        return response
