"""
Deployment configuration.

Handles loading the YAML/JSON config file, merging it with command line flags,
normalizing legacy values and validating the result.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import yaml

from elysia_lambda.errors import ConfigFileError, ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_MEMORY = 128
DEFAULT_DESCRIPTION = "Elysia Lambda"
ARCHITECTURES = ("arm64", "x86_64")
ARCH_ALIASES = {"x64": "x86_64"}


@dataclass
class DeploymentConfig:
    """Merged and validated options for a single build or deploy run."""

    entry_path: str
    mode: str
    out: Optional[str] = None
    name: Optional[str] = None
    region: Optional[str] = None
    role: Optional[str] = None
    layers: List[str] = field(default_factory=list)
    architecture: Optional[str] = None
    memory: int = DEFAULT_MEMORY
    description: Optional[str] = None
    environment: Optional[Dict[str, str]] = None
    probe_strict: bool = False

    @property
    def is_deploy(self) -> bool:
        return self.mode == "deploy"

    @property
    def is_build(self) -> bool:
        return self.mode == "build"


def load_config_file(path: str, cwd: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a YAML or JSON config file.

    Args:
        path: Path to the file, relative paths resolve against cwd
        cwd: Base directory (default: the current working directory)

    Returns:
        Mapping of option name to value
    """
    full_path = os.path.join(cwd or os.getcwd(), path)
    try:
        with open(full_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigFileError(f"Unable to read config file {full_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigFileError(f"Unable to parse config file {full_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(f"Config file {full_path} must contain a mapping")

    logger.info(f"Loaded configuration from {full_path}")
    return data


def merge_options(file_options: Dict[str, Any], flag_options: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge config file values with command line flags.

    The file provides the base values. A flag overwrites a key only when it was
    actually passed, i.e. its value is not None.
    """
    merged = dict(file_options)
    for key, value in flag_options.items():
        if value is not None:
            merged[key] = value
    return merged


def normalize_architecture(arch: Optional[str]) -> Optional[str]:
    """Map legacy architecture names onto the Lambda API values."""
    if arch is None:
        return None
    arch = str(arch).strip()
    return ARCH_ALIASES.get(arch, arch)


def parse_env_pairs(pairs: Iterable[str]) -> Dict[str, str]:
    """Parse KEY=VALUE strings into an environment mapping."""
    env = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigValidationError([f"Invalid environment variable '{pair}', expected KEY=VALUE."])
        env[key] = value
    return env


def _as_layer_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def build_config(options: Dict[str, Any]) -> DeploymentConfig:
    """
    Normalize and validate merged options.

    All problems are collected and raised together as a ConfigValidationError.
    """
    errors = []

    deploy = options.get("deploy")
    build = options.get("build")
    if not deploy and not build:
        errors.append("No command specified. Use --deploy or --build.")
    elif deploy and build:
        errors.append("Cannot use --deploy and --build together.")

    if build and not deploy and not options.get("out"):
        errors.append("Must specify --out when using --build.")

    # "layer" is accepted from older config files
    layers = _as_layer_list(options.get("layers") or options.get("layer"))
    arch = normalize_architecture(options.get("arch"))

    memory = DEFAULT_MEMORY
    raw_memory = options.get("memory")
    if raw_memory not in (None, ""):
        try:
            memory = int(raw_memory)
        except (TypeError, ValueError):
            memory = 0
        if memory <= 0:
            errors.append(f"Memory must be a positive number of MiB, got '{raw_memory}'.")

    environment = options.get("environment")
    if environment is not None:
        if not isinstance(environment, dict):
            errors.append("Environment must be a mapping of variable names to values.")
            environment = None
        else:
            environment = {str(k): str(v) for k, v in environment.items()}

    probe_strict = options.get("probe_strict")
    if probe_strict is None:
        probe_strict = False
    elif not isinstance(probe_strict, bool):
        errors.append(f"probe_strict must be true or false, got '{probe_strict}'.")

    if deploy:
        if not options.get("role"):
            errors.append("Must specify --role for the lambda when using --deploy.")
        if not options.get("name"):
            errors.append("Must specify --name for the lambda when using --deploy.")
        if not options.get("region"):
            errors.append("Must specify --region for the lambda when using --deploy.")
        if not layers:
            errors.append("Must specify at least one layer for the lambda with --layers when using --deploy.")
        if not arch:
            errors.append("Must specify --arch for the lambda when using --deploy.")
        elif arch not in ARCHITECTURES:
            errors.append(f"Unsupported architecture '{arch}', expected one of {', '.join(ARCHITECTURES)}.")

    if errors:
        raise ConfigValidationError(errors)

    return DeploymentConfig(
        entry_path=deploy or build,
        mode="deploy" if deploy else "build",
        out=options.get("out"),
        name=options.get("name"),
        region=options.get("region"),
        role=options.get("role"),
        layers=layers,
        architecture=arch,
        memory=memory,
        description=options.get("description"),
        environment=environment or None,
        probe_strict=probe_strict,
    )
