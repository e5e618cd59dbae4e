"""
Build and deploy pipeline for Elysia Lambda.

This module ties the pipeline stages together: rewriting the entry, generating
the launcher, bundling, packaging and finally reconciling the Lambda function.
"""
import logging
import os
import time
from typing import Callable, Optional

from elysia_lambda.build.bundler import Bundler
from elysia_lambda.build.launcher import LauncherGenerator
from elysia_lambda.build.packager import PackageAssembler
from elysia_lambda.build.transformer import EntryTransformer
from elysia_lambda.config import DeploymentConfig
from elysia_lambda.lambda_func.function_deployer import DeployResult, LambdaFunctionDeployer

logger = logging.getLogger(__name__)


def _remove(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


class ElysiaLambdaDeployer:
    """
    Main class for building and deploying an Elysia entry point to AWS Lambda.

    This class integrates all stages of the pipeline:
    - Entry rewriting
    - Launcher generation
    - Bundling
    - Archive packaging
    - Lambda function create/update
    """

    def __init__(
        self,
        transformer: Optional[EntryTransformer] = None,
        launcher: Optional[LauncherGenerator] = None,
        bundler: Optional[Bundler] = None,
        assembler: Optional[PackageAssembler] = None,
        deployer_factory: Callable[..., LambdaFunctionDeployer] = LambdaFunctionDeployer,
        workdir: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the pipeline.

        Args:
            transformer: Entry rewriter (default: EntryTransformer())
            launcher: Launcher generator (default: LauncherGenerator())
            bundler: Bundler wrapper (default: Bundler())
            assembler: Archive builder (default: PackageAssembler())
            deployer_factory: Builds the Lambda deployer for a region
            workdir: Directory for the launcher, bundle and upload archive (default: cwd)
            clock: Source of the run timestamp, in seconds
        """
        self.transformer = transformer or EntryTransformer()
        self.launcher = launcher or LauncherGenerator()
        self.bundler = bundler or Bundler()
        self.assembler = assembler or PackageAssembler()
        self.deployer_factory = deployer_factory
        self.workdir = workdir
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def _timestamp(self) -> int:
        return int(self.clock() * 1000)

    def _path(self, filename: str) -> str:
        return os.path.join(self.workdir or os.getcwd(), filename)

    def build_archive(self, entry_path: str, archive_path: str, timestamp: Optional[int] = None) -> str:
        """
        Turn an entry file into a Lambda archive.

        Every intermediate file is removed before returning, including on failure.

        Args:
            entry_path: Path to the user's entry file
            archive_path: Where to write the ZIP archive
            timestamp: Run timestamp used to name temporary files

        Returns:
            The archive path
        """
        if timestamp is None:
            timestamp = self._timestamp()

        launcher_path = self._path(f"{timestamp}.js")
        bundle_path = self._path(f"bundle.{timestamp}.js")
        mutated_path = None
        try:
            self.logger.info(f"Rewriting entry {entry_path}")
            transform = self.transformer.transform(entry_path, timestamp)
            mutated_path = transform.path

            self.launcher.generate(transform, launcher_path)

            self.logger.info(f"Bundling {entry_path}")
            self.bundler.bundle(launcher_path, bundle_path)

            return self.assembler.assemble(bundle_path, archive_path)
        finally:
            for path in (mutated_path, launcher_path, bundle_path):
                if path:
                    _remove(path)

    def build(self, config: DeploymentConfig) -> str:
        """Build the archive to the configured output path."""
        return self.build_archive(config.entry_path, config.out)

    def deploy(self, config: DeploymentConfig) -> DeployResult:
        """
        Build the archive and create or update the configured Lambda function.

        Args:
            config: Validated deploy-mode configuration

        Returns:
            DeployResult describing what was done
        """
        timestamp = self._timestamp()
        archive_path = self._path(f"bundle.{timestamp}.zip")
        self.build_archive(config.entry_path, archive_path, timestamp)

        try:
            deployer = self.deployer_factory(region_name=config.region, probe_strict=config.probe_strict)
        except Exception:
            _remove(archive_path)
            raise

        self.logger.info(f"Uploading {archive_path} to {config.region}")
        return deployer.deploy_function(config, archive_path)

    def run(self, config: DeploymentConfig):
        """Run the pipeline in the configured mode."""
        if config.is_deploy:
            return self.deploy(config)
        return self.build(config)
