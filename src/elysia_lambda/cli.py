#!/usr/bin/env python3
"""
Command-line interface for Elysia Lambda.
"""
import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

import click

from elysia_lambda import console
from elysia_lambda.config import build_config, load_config_file, merge_options, parse_env_pairs
from elysia_lambda.errors import ConfigValidationError, ElysiaLambdaError
from elysia_lambda.main import ElysiaLambdaDeployer
from elysia_lambda.wizard import run_wizard


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="elysia-lambda",
        description="Build and deploy an Elysia app to AWS Lambda"
    )

    parser.add_argument(
        "--init",
        action="store_true",
        help="Begin the setup to deploy to Lambda"
    )
    parser.add_argument(
        "--deploy",
        metavar="SRC",
        help="Deploy the entry file to AWS"
    )
    parser.add_argument(
        "--build",
        metavar="SRC",
        help="Build the entry file for AWS"
    )
    parser.add_argument(
        "-o",
        "--out",
        metavar="DEST",
        help="Where to output the build zip"
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to a yaml/json config file"
    )

    # Function settings; defaults are applied after merging the config file
    parser.add_argument(
        "-r",
        "--region",
        help="AWS region to deploy to"
    )
    parser.add_argument(
        "--role",
        help="ARN of the AWS role to attach to the lambda"
    )
    parser.add_argument(
        "--name",
        help="Name of the lambda"
    )
    parser.add_argument(
        "--layers",
        nargs="+",
        help="ARNs of the AWS layers to attach to the lambda"
    )
    parser.add_argument(
        "--description",
        help="Description of the lambda"
    )
    parser.add_argument(
        "--memory",
        type=int,
        metavar="MIB",
        help="Memory to allocate to the lambda, in MiB (default: 128)"
    )
    parser.add_argument(
        "--arch",
        choices=["arm64", "x86_64", "x64"],
        help="AWS architecture to deploy to"
    )
    parser.add_argument(
        "--env",
        action="append",
        metavar="KEY=VALUE",
        help="Environment variable for the lambda (repeatable)"
    )
    parser.add_argument(
        "--strict-probe",
        dest="probe_strict",
        action="store_true",
        default=None,
        help="Fail instead of creating the function when the existence check errors"
    )

    # General options
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args(args)


def collect_options(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge the config file (if any) with the flags that were passed."""
    file_options = load_config_file(args.config) if args.config else {}

    flag_options = {
        "deploy": args.deploy,
        "build": args.build,
        "out": args.out,
        "region": args.region,
        "role": args.role,
        "name": args.name,
        "layers": args.layers,
        "description": args.description,
        "memory": args.memory,
        "arch": args.arch,
        "probe_strict": args.probe_strict,
    }
    if args.env:
        environment = dict(file_options.get("environment") or {})
        environment.update(parse_env_pairs(args.env))
        flag_options["environment"] = environment

    return merge_options(file_options, flag_options)


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parsed_args = parse_args(args)
    setup_logging(parsed_args.verbose)
    logger = logging.getLogger("elysia_lambda.cli")

    try:
        if parsed_args.init:
            run_wizard()
            return 0

        config = build_config(collect_options(parsed_args))

        pipeline = ElysiaLambdaDeployer()
        if config.is_deploy:
            result = pipeline.deploy(config)
            console.success("Deployed!" if result.action == "created" else "Updated!")
        else:
            pipeline.build(config)
            console.success("Zip for Lambda built!")
        return 0

    except ConfigValidationError as e:
        console.error(f"Some issues were encountered:\n{e}")
        return 1
    except ElysiaLambdaError as e:
        logger.debug("Run failed", exc_info=True)
        console.error(str(e))
        return 1
    except click.Abort:
        console.error("Aborted.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
