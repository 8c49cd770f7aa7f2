import logging
import os

import structlog
from aws_lambda_powertools import Tracer

aws_xray_tracer = Tracer(service=os.getenv("POWERTOOLS_SERVICE_NAME", "simple-rcv"))

# Processors shared by structlog events and stdlib records (httpx, botocore)
shared_processors = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]

# Every record leaves through this handler as one JSON line
logging_handler = logging.StreamHandler()
logging_handler.setFormatter(
    structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
    )
)
logging_logger = logging.getLogger()
logging_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
logging_logger.addHandler(logging_handler)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        *shared_processors,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)
