"""
Unit tests for the Lambda function deployer.
"""
import json
import pytest
from unittest.mock import patch, MagicMock

import moto
from botocore.exceptions import ClientError

from elysia_lambda.errors import RemoteApiError
from elysia_lambda.lambda_func.function_deployer import DeployResult, LambdaFunctionDeployer

FUNCTION_ARN = 'arn:aws:lambda:us-east-1:123456789012:function:test-function'
ROLE_ARN = 'arn:aws:iam::123456789012:role/lambda-test-role'
LAYER_ARN = 'arn:aws:lambda:us-east-1:123456789012:layer:bun:1'


def _client_error(code, operation):
    return ClientError({'Error': {'Code': code, 'Message': code}}, operation)


@pytest.fixture
def lambda_function_deployer(aws_credentials):
    """Lambda function deployer fixture."""
    with moto.mock_aws():
        yield LambdaFunctionDeployer(wait=False)


@pytest.fixture
def lambda_role(iam_client):
    """Create a Lambda execution role."""
    assume_role_policy = {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": "lambda.amazonaws.com"},
                "Action": "sts:AssumeRole"
            }
        ]
    }

    response = iam_client.create_role(
        RoleName="lambda-test-role",
        AssumeRolePolicyDocument=json.dumps(assume_role_policy)
    )
    return response['Role']['Arn']


@pytest.fixture
def mock_lambda_client():
    """Patch boto3 so the deployer talks to a MagicMock client."""
    with patch('boto3.client') as mock_boto3_client:
        client = MagicMock()
        client.create_function.return_value = {'FunctionArn': FUNCTION_ARN}
        client.update_function_code.return_value = {'FunctionArn': FUNCTION_ARN}
        client.update_function_configuration.return_value = {'FunctionArn': FUNCTION_ARN}
        mock_boto3_client.return_value = client
        yield client


@pytest.fixture
def archive(tmp_path):
    path = tmp_path / 'bundle.1700000000000.zip'
    path.write_bytes(b'PK\x05\x06zip-bytes')
    return path


def test_function_exists(lambda_function_deployer, lambda_client, lambda_role):
    """Test checking if a Lambda function exists."""
    function_name = "test-function"

    # Function should not exist initially
    assert not lambda_function_deployer._function_exists(function_name)

    lambda_client.create_function(
        FunctionName=function_name,
        Runtime='python3.9',
        Role=lambda_role,
        Handler='index.handler',
        Code={'ZipFile': b'def handler(event, context): return "Hello, World!"'},
        Description='Test function',
        Timeout=30,
        MemorySize=128,
        Publish=True
    )

    assert lambda_function_deployer._function_exists(function_name)


def test_probe_failure_is_treated_as_absence(mock_lambda_client, aws_credentials):
    """Any probe error means the function is treated as missing by default."""
    mock_lambda_client.get_function.side_effect = _client_error('AccessDeniedException', 'GetFunction')

    deployer = LambdaFunctionDeployer(wait=False)

    assert deployer._function_exists('test-function') is False


def test_strict_probe_raises_on_other_errors(mock_lambda_client, aws_credentials):
    """With probe_strict only ResourceNotFoundException means absence."""
    mock_lambda_client.get_function.side_effect = _client_error('AccessDeniedException', 'GetFunction')

    deployer = LambdaFunctionDeployer(probe_strict=True, wait=False)

    with pytest.raises(RemoteApiError):
        deployer._function_exists('test-function')

    mock_lambda_client.get_function.side_effect = _client_error('ResourceNotFoundException', 'GetFunction')
    assert deployer._function_exists('test-function') is False


def test_create_function(mock_lambda_client, aws_credentials):
    """Test creating a Lambda function."""
    mock_waiter = MagicMock()
    mock_lambda_client.get_waiter.return_value = mock_waiter

    deployer = LambdaFunctionDeployer()

    function_arn = deployer._create_function(
        function_name='test-function',
        zip_file=b'zip-bytes',
        role_arn=ROLE_ARN,
        layers=[LAYER_ARN],
        architecture='arm64',
        memory_size=256
    )

    mock_lambda_client.create_function.assert_called_once_with(
        FunctionName='test-function',
        Runtime='provided.al2',
        Handler='index.js',
        Layers=[LAYER_ARN],
        Description='Elysia Lambda',
        Code={'ZipFile': b'zip-bytes'},
        Role=ROLE_ARN,
        Architectures=['arm64'],
        MemorySize=256
    )

    mock_lambda_client.get_waiter.assert_called_once_with('function_active')
    mock_waiter.wait.assert_called_once_with(FunctionName='test-function')

    assert function_arn == FUNCTION_ARN


def test_create_function_with_environment(mock_lambda_client, aws_credentials):
    """Test creating a Lambda function with environment variables."""
    deployer = LambdaFunctionDeployer(wait=False)

    deployer._create_function(
        function_name='test-function',
        zip_file=b'zip-bytes',
        role_arn=ROLE_ARN,
        layers=[LAYER_ARN],
        architecture='x86_64',
        description='My API',
        environment={'STAGE': 'prod'}
    )

    _, kwargs = mock_lambda_client.create_function.call_args
    assert kwargs['Environment'] == {'Variables': {'STAGE': 'prod'}}
    assert kwargs['Description'] == 'My API'
    assert kwargs['MemorySize'] == 128
    mock_lambda_client.get_waiter.assert_not_called()


def test_create_function_failure(mock_lambda_client, aws_credentials):
    """Create errors surface as RemoteApiError."""
    mock_lambda_client.create_function.side_effect = _client_error('InvalidParameterValueException', 'CreateFunction')

    deployer = LambdaFunctionDeployer(wait=False)

    with pytest.raises(RemoteApiError) as exc_info:
        deployer._create_function(
            function_name='test-function',
            zip_file=b'zip-bytes',
            role_arn=ROLE_ARN,
            layers=[LAYER_ARN],
            architecture='arm64'
        )

    assert isinstance(exc_info.value.__cause__, ClientError)


def test_update_function_code(mock_lambda_client, aws_credentials):
    """Test updating a Lambda function's code."""
    mock_waiter = MagicMock()
    mock_lambda_client.get_waiter.return_value = mock_waiter

    deployer = LambdaFunctionDeployer()

    function_arn = deployer._update_function_code(
        function_name='test-function',
        zip_file=b'zip-bytes',
        architecture='arm64'
    )

    mock_lambda_client.update_function_code.assert_called_once_with(
        FunctionName='test-function',
        ZipFile=b'zip-bytes',
        Architectures=['arm64']
    )

    mock_lambda_client.get_waiter.assert_called_once_with('function_updated')
    mock_waiter.wait.assert_called_once_with(FunctionName='test-function')

    assert function_arn == FUNCTION_ARN


def test_update_function_configuration(mock_lambda_client, aws_credentials):
    """Test updating a Lambda function's configuration."""
    deployer = LambdaFunctionDeployer(wait=False)

    function_arn = deployer._update_function_configuration(
        function_name='test-function',
        role_arn=ROLE_ARN,
        layers=[LAYER_ARN],
        memory_size=512,
        description='Test function',
        environment={'STAGE': 'test'}
    )

    mock_lambda_client.update_function_configuration.assert_called_once_with(
        FunctionName='test-function',
        Layers=[LAYER_ARN],
        Description='Test function',
        Role=ROLE_ARN,
        Handler='index.js',
        MemorySize=512,
        Environment={'Variables': {'STAGE': 'test'}}
    )

    assert function_arn == FUNCTION_ARN


@patch('elysia_lambda.lambda_func.function_deployer.LambdaFunctionDeployer._function_exists')
@patch('elysia_lambda.lambda_func.function_deployer.LambdaFunctionDeployer._create_function')
def test_deploy_function_new(mock_create_function, mock_function_exists, deploy_config, archive, aws_credentials):
    """Test deploying a new Lambda function."""
    mock_function_exists.return_value = False
    mock_create_function.return_value = FUNCTION_ARN

    deployer = LambdaFunctionDeployer(wait=False)

    result = deployer.deploy_function(deploy_config, str(archive))

    mock_function_exists.assert_called_once_with('test-function')
    mock_create_function.assert_called_once_with(
        function_name='test-function',
        zip_file=b'PK\x05\x06zip-bytes',
        role_arn=deploy_config.role,
        layers=deploy_config.layers,
        architecture='arm64',
        memory_size=256,
        description='Test function',
        environment={'STAGE': 'test'}
    )

    assert result == DeployResult(action='created', function_arn=FUNCTION_ARN)
    assert not archive.exists()


@patch('elysia_lambda.lambda_func.function_deployer.LambdaFunctionDeployer._function_exists')
@patch('elysia_lambda.lambda_func.function_deployer.LambdaFunctionDeployer._update_function_code')
@patch('elysia_lambda.lambda_func.function_deployer.LambdaFunctionDeployer._update_function_configuration')
def test_deploy_function_existing(
    mock_update_config, mock_update_code, mock_function_exists, deploy_config, archive, aws_credentials
):
    """Test deploying an existing Lambda function."""
    mock_function_exists.return_value = True
    mock_update_code.return_value = FUNCTION_ARN
    mock_update_config.return_value = FUNCTION_ARN

    deployer = LambdaFunctionDeployer(wait=False)

    result = deployer.deploy_function(deploy_config, str(archive))

    mock_update_code.assert_called_once_with(
        function_name='test-function',
        zip_file=b'PK\x05\x06zip-bytes',
        architecture='arm64'
    )
    mock_update_config.assert_called_once_with(
        function_name='test-function',
        role_arn=deploy_config.role,
        layers=deploy_config.layers,
        memory_size=256,
        description='Test function',
        environment={'STAGE': 'test'}
    )

    assert result == DeployResult(action='updated', function_arn=FUNCTION_ARN)
    assert not archive.exists()


@pytest.mark.parametrize('exists, expected_calls', [
    (False, {'create_function': 1, 'update_function_code': 0, 'update_function_configuration': 0}),
    (True, {'create_function': 0, 'update_function_code': 1, 'update_function_configuration': 1}),
])
def test_deploy_function_remote_calls(
    exists, expected_calls, mock_lambda_client, deploy_config, archive, aws_credentials
):
    """Create issues one mutating call, update issues two."""
    if not exists:
        mock_lambda_client.get_function.side_effect = _client_error('ResourceNotFoundException', 'GetFunction')

    deployer = LambdaFunctionDeployer(wait=False)
    deployer.deploy_function(deploy_config, str(archive))

    mock_lambda_client.get_function.assert_called_once_with(FunctionName='test-function')
    for method, count in expected_calls.items():
        assert getattr(mock_lambda_client, method).call_count == count


def test_update_configuration_attempted_when_code_update_fails(
    mock_lambda_client, deploy_config, archive, aws_credentials
):
    """A failed code update still attempts the configuration update, then raises."""
    mock_lambda_client.update_function_code.side_effect = _client_error('ResourceConflictException', 'UpdateFunctionCode')

    deployer = LambdaFunctionDeployer(wait=False)

    with pytest.raises(RemoteApiError, match='update code'):
        deployer.deploy_function(deploy_config, str(archive))

    mock_lambda_client.update_function_configuration.assert_called_once()
    assert not archive.exists()


def test_archive_removed_when_create_fails(mock_lambda_client, deploy_config, archive, aws_credentials):
    """The archive is cleaned up even if the create call fails."""
    mock_lambda_client.get_function.side_effect = _client_error('ResourceNotFoundException', 'GetFunction')
    mock_lambda_client.create_function.side_effect = _client_error('AccessDeniedException', 'CreateFunction')

    deployer = LambdaFunctionDeployer(wait=False)

    with pytest.raises(RemoteApiError):
        deployer.deploy_function(deploy_config, str(archive))

    assert not archive.exists()


def test_configuration_update_failure_after_code_update(mock_lambda_client, deploy_config, archive, aws_credentials):
    """A configuration failure after a successful code upload is still raised."""
    mock_lambda_client.update_function_configuration.side_effect = _client_error(
        'InvalidParameterValueException', 'UpdateFunctionConfiguration'
    )

    deployer = LambdaFunctionDeployer(wait=False)

    with pytest.raises(RemoteApiError, match='update configuration'):
        deployer.deploy_function(deploy_config, str(archive))

    mock_lambda_client.update_function_code.assert_called_once()
    assert not archive.exists()


@pytest.mark.parametrize('exists, message', [
    (True, 'Lambda "test-function" found. Updating.'),
    (False, 'Deploying "test-function"!'),
])
def test_deploy_function_logs_branch(exists, message, mock_lambda_client, deploy_config, archive, aws_credentials, caplog):
    """The branch taken is reported only after the existence check."""
    if not exists:
        mock_lambda_client.get_function.side_effect = _client_error('ResourceNotFoundException', 'GetFunction')

    deployer = LambdaFunctionDeployer(wait=False)
    with caplog.at_level('INFO', logger='elysia_lambda.lambda_func.function_deployer'):
        deployer.deploy_function(deploy_config, str(archive))

    assert message in caplog.text
    if exists:
        assert 'Deploying' not in caplog.text
    else:
        assert 'Updating' not in caplog.text
