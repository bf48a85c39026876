"""AWS Lambda handler for the link generator."""

from typing import Any

from loguru import logger
from mangum import Mangum

from .api import app

logger.add(lambda msg: print(msg, end=""))  # Lambda logs to stdout
handler = Mangum(app, lifespan="auto")


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """AWS Lambda entry point.

    Args:
        event: Lambda event dictionary containing request information.
        context: Lambda context object with runtime information.

    Returns:
        Response dictionary with statusCode, headers, and body.

    """
    logger.info("Lambda event: {}", event.get("rawPath") or event.get("path"))
    response = handler(event, context)
    logger.info("Lambda response status: {}", response.get("statusCode"))

    return response  # type: ignore[no-any-return]
