#!/usr/bin/env python3
"""
Example script for building an Elysia entry point and deploying it to AWS Lambda.
"""
import argparse
import logging
import sys

from elysia_lambda.config import build_config
from elysia_lambda.errors import ElysiaLambdaError
from elysia_lambda.main import ElysiaLambdaDeployer


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()]
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Example script for deploying an Elysia app to AWS Lambda"
    )

    parser.add_argument(
        "--entry",
        required=True,
        help="Path to the Elysia entry file"
    )
    parser.add_argument(
        "--function-name",
        required=True,
        help="Name of the Lambda function"
    )
    parser.add_argument(
        "--role-arn",
        required=True,
        help="ARN of the execution role"
    )
    parser.add_argument(
        "--layer-arn",
        required=True,
        help="ARN of the Bun runtime layer"
    )
    parser.add_argument(
        "--region",
        default="us-east-1",
        help="AWS region to deploy to"
    )

    # General options
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args()


def main() -> int:
    """Main entry point for the example script."""
    args = parse_args()
    setup_logging(args.verbose)

    logger = logging.getLogger(__name__)
    logger.info("Starting example deployment")

    try:
        config = build_config({
            "deploy": args.entry,
            "name": args.function_name,
            "region": args.region,
            "role": args.role_arn,
            "layers": [args.layer_arn],
            "arch": "arm64",
        })

        result = ElysiaLambdaDeployer().deploy(config)

        logger.info(f"Lambda function {result.action}: {result.function_arn}")

        return 0

    except ElysiaLambdaError as e:
        logger.error(f"Deployment failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
