import os

import boto3
from botocore.config import Config

aws_session = boto3.Session(region_name=os.environ.get("AWS_REGION", "us-east-1"))

secrets_client = aws_session.client(
    service_name="secretsmanager",
    config=Config(connect_timeout=1, retries={"total_max_attempts": 2}),
)
