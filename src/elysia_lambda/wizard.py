"""
Interactive setup for first-time deployments.

Asks for the deployment settings, publishes the Bun layer when needed and
writes the answers to a YAML config file.
"""
import json
import logging
import os
from typing import Any, Dict, Optional

import click
import yaml

from elysia_lambda import console
from elysia_lambda.config import DEFAULT_DESCRIPTION, DEFAULT_MEMORY
from elysia_lambda.layers.provisioner import LayerProvisioner
from elysia_lambda.layers.versions import VersionResolver

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "elysia-lambda.yaml"


def _obtain_layer(region: str, architecture: str, resolver: VersionResolver, provisioner: LayerProvisioner) -> str:
    if click.confirm("Have you created the Bun layer yet?", default=False):
        return click.prompt("What is the ARN of the Bun layer?")

    console.info("Ok! We will create that layer together.")
    choices = resolver.choices()
    version = click.prompt(
        "What version of Bun do you want to use?",
        type=click.Choice(choices),
        default=choices[0],
        show_choices=False,
    )
    layer_arn = provisioner.provision(version, architecture, region)
    console.info(f"Created the layer with ARN {layer_arn}")
    return layer_arn


def _offer_deploy_script(config_name: str, cwd: str) -> None:
    run_hint = f"Run: elysia-lambda --config {config_name}"
    package_path = os.path.join(cwd, "package.json")
    try:
        with open(package_path, "r", encoding="utf-8") as f:
            pkg = json.load(f)
    except (OSError, ValueError):
        console.success(run_hint)
        return

    scripts = pkg.setdefault("scripts", {})
    if scripts.get("deploy"):
        return

    if click.confirm("Do you want to add a deploy script to your package.json?", default=True):
        scripts["deploy"] = f"elysia-lambda --config {config_name}"
        with open(package_path, "w", encoding="utf-8") as f:
            json.dump(pkg, f, indent=2)
        logger.info(f"Added deploy script to {package_path}")
    else:
        console.success(run_hint)


def run_wizard(
    resolver: Optional[VersionResolver] = None,
    provisioner: Optional[LayerProvisioner] = None,
    cwd: Optional[str] = None,
) -> str:
    """
    Walk the user through the deployment setup.

    Returns:
        Path of the written config file
    """
    resolver = resolver or VersionResolver()
    provisioner = provisioner or LayerProvisioner()
    cwd = cwd or os.getcwd()

    console.info("Welcome to the Elysia Lambda Deployer!")
    console.info("This will walk you through the setup to deploy to AWS Lambda.")

    region = click.prompt("What region do you want to deploy to?", default="us-east-1")
    architecture = click.prompt(
        "What architecture do you want to deploy to?",
        type=click.Choice(["arm64", "x86_64"]),
        default="x86_64",
    )

    layer_arn = _obtain_layer(region, architecture, resolver, provisioner)

    role = click.prompt("What is the ARN of the role you want to use?")
    name = click.prompt("What do you want to name the lambda?", default="elysia-lambda")
    memory = click.prompt(
        "How much memory do you want to allocate to the lambda, in MiB?",
        type=click.IntRange(min=1),
        default=DEFAULT_MEMORY,
    )
    description = click.prompt("What do you want the description to be?", default=DEFAULT_DESCRIPTION)
    entry = click.prompt("What is the entry point?", default="index.js")
    config_name = click.prompt("What do you want to name the yaml file?", default=DEFAULT_CONFIG_NAME)

    settings: Dict[str, Any] = {
        "deploy": entry,
        "name": name,
        "region": region,
        "memory": memory,
        "arch": architecture,
        "description": description,
        "role": role,
        "layers": [layer_arn],
    }

    config_path = os.path.join(cwd, config_name)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings, f, sort_keys=False)
    logger.info(f"Wrote configuration to {config_path}")

    _offer_deploy_script(config_name, cwd)
    return config_path
