"""
Pytest configuration file for Elysia Lambda tests.
"""
import pytest
from unittest.mock import patch

import boto3
import moto

from elysia_lambda.config import DeploymentConfig


@pytest.fixture
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    with patch.dict('os.environ', {
        'AWS_ACCESS_KEY_ID': 'testing',
        'AWS_SECRET_ACCESS_KEY': 'testing',
        'AWS_SECURITY_TOKEN': 'testing',
        'AWS_SESSION_TOKEN': 'testing',
        'AWS_DEFAULT_REGION': 'us-east-1',
    }):
        yield


@pytest.fixture
def iam_client(aws_credentials):
    """IAM client fixture."""
    with moto.mock_aws():
        yield boto3.client('iam')


@pytest.fixture
def lambda_client(aws_credentials):
    """Lambda client fixture."""
    with moto.mock_aws():
        yield boto3.client('lambda')


@pytest.fixture
def deploy_config():
    """A valid deploy-mode configuration."""
    return DeploymentConfig(
        entry_path='src/index.ts',
        mode='deploy',
        name='test-function',
        region='us-east-1',
        role='arn:aws:iam::123456789012:role/lambda-test-role',
        layers=['arn:aws:lambda:us-east-1:123456789012:layer:bun:1'],
        architecture='arm64',
        memory=256,
        description='Test function',
        environment={'STAGE': 'test'},
    )


@pytest.fixture
def entry_file(tmp_path):
    """An Elysia entry file that applies the lambda plugin."""
    path = tmp_path / 'index.ts'
    path.write_text(
        "import { Elysia } from 'elysia'\n"
        "import { lambda } from 'elysia-lambda'\n"
        "\n"
        "export default new Elysia()\n"
        "    .use(lambda())\n"
        "    .get('/', () => 'Hello Elysia')\n"
        "    .listen(3000)\n",
        encoding='utf-8'
    )
    return path
