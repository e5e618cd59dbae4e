"""
Lambda function deployer module.
Handles creating or updating the Lambda function that runs the bundled service.
"""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from elysia_lambda.build.packager import HANDLER_FILENAME
from elysia_lambda.config import DEFAULT_DESCRIPTION, DEFAULT_MEMORY, DeploymentConfig
from elysia_lambda.errors import RemoteApiError

logger = logging.getLogger(__name__)

RUNTIME = "provided.al2"

DEFAULT_CLIENT_CONFIG = Config(
    connect_timeout=10,
    read_timeout=120,
    retries={"max_attempts": 0},
)


@dataclass(frozen=True)
class DeployResult:
    action: str
    function_arn: Optional[str]


class LambdaFunctionDeployer:
    """
    Deploys a bundled archive to an AWS Lambda function.

    This class handles:
    - Probing whether the function already exists
    - Creating the function with the custom runtime, layers and role
    - Updating the code and configuration of an existing function
    - Removing the uploaded archive once the deployment finishes
    """

    def __init__(
        self,
        region_name: Optional[str] = None,
        probe_strict: bool = False,
        wait: bool = True,
        client_config: Optional[Config] = DEFAULT_CLIENT_CONFIG,
    ):
        """
        Initialize the Lambda function deployer.

        Args:
            region_name: AWS region name. If not provided, uses the default region.
            probe_strict: Only treat ResourceNotFoundException as a missing function.
                By default any probe failure counts as absence.
            wait: Wait for the function to become active/updated after each call.
            client_config: botocore client configuration (timeouts and retries).
        """
        self.lambda_client = boto3.client('lambda', region_name=region_name, config=client_config)
        self.probe_strict = probe_strict
        self.wait = wait

    def _wait_for(self, waiter_name: str, function_name: str) -> None:
        if not self.wait:
            return
        waiter = self.lambda_client.get_waiter(waiter_name)
        waiter.wait(FunctionName=function_name)

    def _function_exists(self, function_name: str) -> bool:
        """
        Check if a Lambda function exists.

        Args:
            function_name: Name of the Lambda function to check

        Returns:
            True if the function exists, False otherwise
        """
        try:
            self.lambda_client.get_function(FunctionName=function_name)
            return True
        except ClientError as e:
            if e.response['Error']['Code'] == 'ResourceNotFoundException':
                return False
            if self.probe_strict:
                raise RemoteApiError(f"Unable to look up Lambda function {function_name}: {e}") from e
            logger.debug(f"Probe for {function_name} failed, treating it as missing: {e}")
            return False
        except BotoCoreError as e:
            if self.probe_strict:
                raise RemoteApiError(f"Unable to look up Lambda function {function_name}: {e}") from e
            logger.debug(f"Probe for {function_name} failed, treating it as missing: {e}")
            return False

    @staticmethod
    def _environment(environment: Optional[Dict[str, str]]) -> Dict[str, Any]:
        if not environment:
            return {}
        return {'Environment': {'Variables': dict(environment)}}

    def _create_function(
        self,
        function_name: str,
        zip_file: bytes,
        role_arn: str,
        layers: List[str],
        architecture: str,
        memory_size: int = DEFAULT_MEMORY,
        description: Optional[str] = None,
        environment: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Create a new Lambda function from a ZIP archive.

        Args:
            function_name: Name of the Lambda function
            zip_file: Contents of the deployment archive
            role_arn: ARN of the IAM role for the Lambda function
            layers: Layer version ARNs to attach
            architecture: Instruction set (arm64 or x86_64)
            memory_size: Memory size for the Lambda function in MiB
            description: Function description
            environment: Environment variables for the function

        Returns:
            ARN of the created Lambda function
        """
        try:
            params = {
                'FunctionName': function_name,
                'Runtime': RUNTIME,
                'Handler': HANDLER_FILENAME,
                'Layers': list(layers),
                'Description': description or DEFAULT_DESCRIPTION,
                'Code': {
                    'ZipFile': zip_file
                },
                'Role': role_arn,
                'Architectures': [architecture],
                'MemorySize': memory_size,
                **self._environment(environment),
            }

            response = self.lambda_client.create_function(**params)

            function_arn = response['FunctionArn']
            logger.info(f"Created Lambda function: {function_arn}")

            self._wait_for('function_active', function_name)

            return function_arn

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error creating Lambda function {function_name}: {e}")
            raise RemoteApiError(f"Failed to create Lambda function {function_name}: {e}") from e

    def _update_function_code(self, function_name: str, zip_file: bytes, architecture: str) -> str:
        """
        Upload a new archive to an existing Lambda function.

        Args:
            function_name: Name of the Lambda function
            zip_file: Contents of the deployment archive
            architecture: Instruction set (arm64 or x86_64)

        Returns:
            ARN of the updated Lambda function
        """
        try:
            response = self.lambda_client.update_function_code(
                FunctionName=function_name,
                ZipFile=zip_file,
                Architectures=[architecture]
            )

            function_arn = response['FunctionArn']
            logger.info(f"Updated Lambda function code: {function_arn}")

            self._wait_for('function_updated', function_name)

            return function_arn

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error updating Lambda function code for {function_name}: {e}")
            raise RemoteApiError(f"Failed to update code of Lambda function {function_name}: {e}") from e

    def _update_function_configuration(
        self,
        function_name: str,
        role_arn: str,
        layers: List[str],
        memory_size: int = DEFAULT_MEMORY,
        description: Optional[str] = None,
        environment: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Update Lambda function configuration.

        Args:
            function_name: Name of the Lambda function
            role_arn: ARN of the IAM role for the Lambda function
            layers: Layer version ARNs to attach
            memory_size: Memory size for the Lambda function in MiB
            description: Function description
            environment: Environment variables for the function

        Returns:
            ARN of the updated Lambda function
        """
        try:
            params = {
                'FunctionName': function_name,
                'Layers': list(layers),
                'Description': description or DEFAULT_DESCRIPTION,
                'Role': role_arn,
                'Handler': HANDLER_FILENAME,
                'MemorySize': memory_size,
                **self._environment(environment),
            }

            response = self.lambda_client.update_function_configuration(**params)

            function_arn = response['FunctionArn']
            logger.info(f"Updated Lambda function configuration: {function_arn}")

            self._wait_for('function_updated', function_name)

            return function_arn

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error updating Lambda function configuration for {function_name}: {e}")
            raise RemoteApiError(f"Failed to update configuration of Lambda function {function_name}: {e}") from e

    def _update_function(self, config: DeploymentConfig, zip_file: bytes) -> str:
        # Both updates are attempted; the first failure is raised afterwards
        failure = None
        function_arn = None

        try:
            function_arn = self._update_function_code(
                function_name=config.name,
                zip_file=zip_file,
                architecture=config.architecture
            )
        except RemoteApiError as e:
            failure = e

        try:
            function_arn = self._update_function_configuration(
                function_name=config.name,
                role_arn=config.role,
                layers=config.layers,
                memory_size=config.memory,
                description=config.description,
                environment=config.environment
            )
        except RemoteApiError as e:
            failure = failure or e

        if failure is not None:
            raise failure
        return function_arn

    def deploy_function(self, config: DeploymentConfig, archive_path: str) -> DeployResult:
        """
        Deploy an archive to a Lambda function.

        If the function doesn't exist, it will be created.
        If the function exists, its code and configuration will be updated.
        The archive is deleted once the deployment finishes, whether or not it succeeded.

        Args:
            config: Validated deployment configuration
            archive_path: Path to the ZIP archive to upload

        Returns:
            DeployResult with the action taken ("created" or "updated") and the function ARN
        """
        try:
            with open(archive_path, 'rb') as f:
                zip_file = f.read()

            if self._function_exists(config.name):
                logger.info(f"Lambda \"{config.name}\" found. Updating.")
                function_arn = self._update_function(config, zip_file)
                return DeployResult(action='updated', function_arn=function_arn)

            logger.info(f"Lambda \"{config.name}\" not found. Deploying \"{config.name}\"!")
            function_arn = self._create_function(
                function_name=config.name,
                zip_file=zip_file,
                role_arn=config.role,
                layers=config.layers,
                architecture=config.architecture,
                memory_size=config.memory,
                description=config.description,
                environment=config.environment
            )
            return DeployResult(action='created', function_arn=function_arn)
        finally:
            try:
                os.remove(archive_path)
            except FileNotFoundError:
                pass
