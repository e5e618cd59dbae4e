"""
Bun layer provisioner.
Publishes the Bun runtime layer with the bun-lambda toolchain from the Bun repository.
"""
import logging
import os
import re
import shutil
import tempfile
from typing import Optional

from elysia_lambda.config import normalize_architecture
from elysia_lambda.errors import CommandError, ProvisionError
from elysia_lambda.process import DEFAULT_TIMEOUT, run_command

logger = logging.getLogger(__name__)

BUN_REPO_URL = "https://github.com/oven-sh/bun"
TOOLCHAIN_SUBDIR = os.path.join("packages", "bun-lambda")
LAYER_ARN_PATTERN = re.compile(r"arn:aws:lambda:\S+")

# bun-lambda names architectures differently from the Lambda API
_PUBLISH_ARCH = {"x86_64": "x64", "arm64": "aarch64"}


def publish_arch(architecture: str) -> str:
    """Translate a Lambda architecture into the publish-layer --arch value."""
    arch = normalize_architecture(architecture)
    try:
        return _PUBLISH_ARCH[arch]
    except KeyError:
        raise ProvisionError(f"Unsupported architecture '{architecture}'") from None


def extract_layer_arn(output: str) -> str:
    """
    Find the layer ARN in the publish command output.

    Raises:
        ProvisionError: If no ARN is present
    """
    match = LAYER_ARN_PATTERN.search(re.sub(r"\r?\n", " ", output))
    if not match:
        raise ProvisionError("Could not find the layer ARN in the publish-layer output")
    return match.group(0)


class LayerProvisioner:
    """
    Publishes a Bun Lambda layer for a given version, architecture and region.

    This class handles:
    - Cloning the Bun repository into a scratch directory
    - Installing the bun-lambda toolchain dependencies
    - Running publish-layer and reading the layer ARN from its output
    - Removing the scratch directory afterwards
    """

    def __init__(
        self,
        repo_url: str = BUN_REPO_URL,
        bun_executable: str = "bun",
        git_executable: str = "git",
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self.repo_url = repo_url
        self.bun_executable = bun_executable
        self.git_executable = git_executable
        self.timeout = timeout

    def _cleanup(self, path: str) -> None:
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.warning(f"Failed to remove {path}: {e}")

    def provision(self, version: str, architecture: str, region: str) -> str:
        """
        Publish the layer and return its ARN.

        Args:
            version: Bun version label, or "latest"/"canary"
            architecture: Lambda architecture (arm64 or x86_64)
            region: AWS region to publish the layer to

        Returns:
            ARN of the published layer version

        Raises:
            ProvisionError: If any step fails or no ARN is reported
        """
        arch = publish_arch(architecture)
        workdir = tempfile.mkdtemp(prefix="elysia-lambda-")
        checkout = os.path.join(workdir, "bun")
        try:
            logger.info(f"Cloning {self.repo_url}")
            self._run([self.git_executable, "clone", "--depth", "1", self.repo_url, checkout])

            toolchain = os.path.join(checkout, TOOLCHAIN_SUBDIR)
            self._run([self.bun_executable, "install"], cwd=toolchain)

            logger.info(f"Publishing Bun {version} layer for {arch} in {region}")
            result = self._run(
                [
                    self.bun_executable, "run", "publish-layer",
                    "--arch", arch,
                    "--region", region,
                    "--release", version,
                ],
                cwd=toolchain,
            )

            layer_arn = extract_layer_arn(result.output)
            logger.info(f"Published layer {layer_arn}")
            return layer_arn
        finally:
            self._cleanup(workdir)

    def _run(self, cmd, cwd=None):
        try:
            return run_command(cmd, cwd=cwd, timeout=self.timeout)
        except CommandError as e:
            raise ProvisionError(f"{e}\n{e.output.strip()}".rstrip()) from e
