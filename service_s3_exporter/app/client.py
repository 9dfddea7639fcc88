"""
Storage API client construction.
"""

import boto3
from botocore.config import Config

from shared.config import ServiceConfig


def create_s3_client(config: ServiceConfig):
    """Build the S3 client shared by every probe.

    Credentials come from the default boto3 chain. botocore clients are
    safe to share between threads.
    """
    addressing_style = "path" if config.s3_force_path_style else "auto"
    session = boto3.session.Session()
    return session.client(
        "s3",
        endpoint_url=config.s3_endpoint_url or None,
        region_name=config.s3_region or None,
        use_ssl=not config.s3_disable_ssl,
        config=Config(s3={"addressing_style": addressing_style}),
    )
