import json
from typing import Any, Callable

import structlog
from aws_lambda_powertools.event_handler import APIGatewayHttpResolver, CORSConfig, Response, content_types
from aws_lambda_powertools.event_handler.exceptions import NotFoundError

from app.clients.simpleapi import SimpleApiClient
from app.clients.supabase import get_store
from app.services.sync import load_simpleapi_config, sync_periodo
from app.utils.utils import is_valid_periodo

logger = structlog.get_logger(__name__)

ROUTE = "/api/simple-rcv"
ALLOWED_METHODS = "GET, POST, OPTIONS"


def json_response(status_code: int, payload: dict[str, Any]) -> Response:
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=json.dumps(payload, ensure_ascii=False),
    )


def parse_body(body: str | bytes | None) -> dict[str, Any]:
    """Request body as a dict; anything else counts as empty."""
    if not body:
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def create_app(
    store_factory: Callable = get_store,
    rcv_client_factory: Callable = SimpleApiClient,
    config_loader: Callable = load_simpleapi_config,
) -> APIGatewayHttpResolver:
    """Build the resolver; factories are injected so tests can swap them."""
    resolver = APIGatewayHttpResolver(cors=CORSConfig(allow_origin="*", allow_headers=["Content-Type"]))

    @resolver.route(ROUTE, method="OPTIONS")
    def preflight() -> Response:
        return Response(
            status_code=200,
            content_type=content_types.TEXT_PLAIN,
            body="",
            headers={"Access-Control-Allow-Methods": ALLOWED_METHODS},
        )

    @resolver.route(ROUTE, method=["GET", "HEAD", "PUT", "PATCH", "DELETE"])
    def method_not_allowed() -> Response:
        return json_response(405, {"error": "Método no permitido"})

    @resolver.post(ROUTE)
    def simple_rcv() -> Response:
        body = parse_body(resolver.current_event.decoded_body)
        periodo = body.get("periodo")
        if not is_valid_periodo(periodo):
            return json_response(400, {"error": 'Parámetro "periodo" requerido (formato: YYYY-MM)'})

        store = store_factory()
        rcv_client = rcv_client_factory(config_loader())
        try:
            summary = sync_periodo(periodo, body.get("userEmail"), store, rcv_client)
        finally:
            rcv_client.close()
        return json_response(200, summary)

    @resolver.exception_handler(Exception)
    def handle_unexpected(e: Exception) -> Response:
        # NotFoundError is routed here too since it subclasses Exception
        if isinstance(e, NotFoundError):
            return json_response(404, {"error": "Not found"})
        logger.exception("simple_rcv_failed", error=str(e))
        return json_response(500, {"success": False, "error": str(e)})

    return resolver


api = create_app()
