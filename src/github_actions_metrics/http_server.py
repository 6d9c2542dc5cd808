#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""The HTTP server for github-actions-metrics.

Receives the GitHub webhook deliveries and exposes the Prometheus metrics.
"""

from dataclasses import dataclass

from flask import Flask, request
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest

from github_actions_metrics.errors import InvalidSignatureError, MalformedPayloadError
from github_actions_metrics.webhook import (
    DELIVERY_ID_HEADER,
    EVENT_TYPE_HEADER,
    SIGNATURE_HEADER,
    EventDispatcher,
)

DISPATCHER_CONFIG_NAME = "event_dispatcher"
REGISTRY_CONFIG_NAME = "metrics_registry"
WEBHOOK_ROUTE = "/api/github/hook"

app = Flask(__name__)


@app.route("/health", methods=["GET"])
def get_health() -> tuple[str, int]:
    """Get the health of the HTTP server.

    Returns:
        A empty response.
    """
    return ("", 204)


@app.route(WEBHOOK_ROUTE, methods=["POST"])
def receive_webhook() -> tuple[str, int]:
    """Receive a GitHub webhook delivery.

    Returns:
        200 if the delivery was handled, 202 if its event type is not handled, 400 if the
        payload is malformed and 401 if the signature is invalid.
    """
    dispatcher: EventDispatcher = app.config[DISPATCHER_CONFIG_NAME]
    delivery_id = request.headers.get(DELIVERY_ID_HEADER)
    try:
        handled = dispatcher.dispatch(
            event_type=request.headers.get(EVENT_TYPE_HEADER),
            delivery_id=delivery_id,
            payload=request.get_data(),
            signature=request.headers.get(SIGNATURE_HEADER),
        )
    except InvalidSignatureError as err:
        app.logger.warning("Rejected delivery %s: %s", delivery_id, err)
        return (str(err), 401)
    except MalformedPayloadError as err:
        app.logger.exception("Malformed delivery %s", delivery_id)
        return (str(err), 400)
    if not handled:
        return ("", 202)
    return ("", 200)


@app.route("/metrics", methods=["GET"])
def metrics() -> tuple[bytes, int, dict[str, str]]:
    """Return prometheus metrics from the configured registry.

    Returns:
        The latest metrics from the Prometheus registry.
    """
    registry: CollectorRegistry = app.config.get(REGISTRY_CONFIG_NAME, REGISTRY)
    return (generate_latest(registry), 200, {"Content-Type": CONTENT_TYPE_LATEST})


@dataclass
class FlaskArgs:
    """Arguments for Flask HTTP server.

    Attributes:
        host: The hostname to listen on for the HTTP server.
        port: The port to listen on for the HTTP server.
        debug: Start the flask HTTP server in debug mode.
    """

    host: str
    port: int
    debug: bool


def start_http_server(
    dispatcher: EventDispatcher,
    flask_args: FlaskArgs,
    registry: CollectorRegistry = REGISTRY,
) -> None:
    """Start the HTTP server for receiving webhooks and serving metrics.

    Args:
        dispatcher: The dispatcher of webhook deliveries.
        flask_args: The arguments for the flask HTTP server.
        registry: The registry to expose on the metrics route.
    """
    app.logger.info("Starting the server on %s:%s...", flask_args.host, flask_args.port)
    app.config[DISPATCHER_CONFIG_NAME] = dispatcher
    app.config[REGISTRY_CONFIG_NAME] = registry
    app.run(
        host=flask_args.host,
        port=flask_args.port,
        debug=flask_args.debug,
        threaded=True,
        use_reloader=False,
    )
