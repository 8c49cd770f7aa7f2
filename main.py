from aws_lambda_powertools.utilities.typing import LambdaContext

from app.api.simple_rcv import api
from app.utils.observability import aws_xray_tracer


@aws_xray_tracer.capture_lambda_handler
def lambda_handler(event: dict, context: LambdaContext) -> dict:
    """
    Lambda entry point for POST /api/simple-rcv (HTTP API or Function URL).

    Request body:
        {
            "periodo": "2026-01",          # required, YYYY-MM
            "userEmail": "jere@tho.cl"     # optional
        }
    """
    return api.resolve(event, context)
