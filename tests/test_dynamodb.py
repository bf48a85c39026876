"""Test the DynamoDB repository with a mocked boto3 resource."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from linkgen.exceptions import NotFoundError, SlugTakenError, StorageError
from linkgen.models import LinkRecord
from linkgen.storage import DynamoDBRepository


def client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "PutItem")


@pytest.fixture
def mock_table() -> MagicMock:
    return MagicMock()


@pytest.fixture
def repo(mock_table: MagicMock):
    """Started repository whose table is a MagicMock."""
    with patch("linkgen.storage.dynamodb.boto3.resource") as mock_boto_resource:
        mock_dynamodb = MagicMock()
        mock_dynamodb.Table.return_value = mock_table
        mock_boto_resource.return_value = mock_dynamodb

        repository = DynamoDBRepository("dynamodb://links?region=eu-west-1")
        yield repository, mock_boto_resource, mock_dynamodb


@pytest.mark.asyncio
async def test_dynamodb_initialization(repo) -> None:
    """Test table name and region are read from the URL."""
    repository, mock_boto_resource, mock_dynamodb = repo

    await repository.startup()

    assert repository.table_name == "links"
    assert repository.region == "eu-west-1"
    mock_boto_resource.assert_called_once_with("dynamodb", region_name="eu-west-1")
    mock_dynamodb.Table.assert_called_once_with("links")


@pytest.mark.asyncio
async def test_create_uses_conditional_put(repo, mock_table: MagicMock) -> None:
    """Test create writes only if the slug is absent."""
    repository, _, _ = repo
    await repository.startup()

    await repository.create("alice1", LinkRecord(name="Alice", note="Hi!"))

    kwargs = mock_table.put_item.call_args.kwargs
    assert kwargs["Item"] == {"slug": "alice1", "name": "Alice", "note": "Hi!", "fileUrl": None}
    assert kwargs["ConditionExpression"] == "attribute_not_exists(slug)"


@pytest.mark.asyncio
async def test_create_existing_slug(repo, mock_table: MagicMock) -> None:
    """Test a failed condition maps to SlugTakenError."""
    repository, _, _ = repo
    await repository.startup()
    mock_table.put_item.side_effect = client_error("ConditionalCheckFailedException")

    with pytest.raises(SlugTakenError):
        await repository.create("dup", LinkRecord(name="Dup"))


@pytest.mark.asyncio
async def test_create_other_client_error(repo, mock_table: MagicMock) -> None:
    """Test other DynamoDB errors map to StorageError."""
    repository, _, _ = repo
    await repository.startup()
    mock_table.put_item.side_effect = client_error("AccessDeniedException")

    with pytest.raises(StorageError):
        await repository.create("slug", LinkRecord(name="X"))


@pytest.mark.asyncio
async def test_put_is_unconditional(repo, mock_table: MagicMock) -> None:
    """Test put overwrites without a condition."""
    repository, _, _ = repo
    await repository.startup()

    await repository.put("slug", LinkRecord(name="X", file_url="https://cdn/x.pdf"))

    kwargs = mock_table.put_item.call_args.kwargs
    assert "ConditionExpression" not in kwargs
    assert kwargs["Item"]["fileUrl"] == "https://cdn/x.pdf"


@pytest.mark.asyncio
async def test_put_transport_error(repo, mock_table: MagicMock) -> None:
    """Test connection failures map to StorageError."""
    repository, _, _ = repo
    await repository.startup()
    mock_table.put_item.side_effect = EndpointConnectionError(endpoint_url="https://dynamodb")

    with pytest.raises(StorageError):
        await repository.put("slug", LinkRecord(name="X"))


@pytest.mark.asyncio
async def test_get_found(repo, mock_table: MagicMock) -> None:
    """Test get decodes the stored item."""
    repository, _, _ = repo
    await repository.startup()
    mock_table.get_item.return_value = {
        "Item": {"slug": "alice1", "name": "Alice", "note": "Hi!", "fileUrl": None}
    }

    record = await repository.get("alice1")

    mock_table.get_item.assert_called_once_with(Key={"slug": "alice1"})
    assert record == LinkRecord(name="Alice", note="Hi!")


@pytest.mark.asyncio
async def test_get_missing(repo, mock_table: MagicMock) -> None:
    """Test an absent item raises NotFoundError."""
    repository, _, _ = repo
    await repository.startup()
    mock_table.get_item.return_value = {}

    with pytest.raises(NotFoundError):
        await repository.get("missing")


@pytest.mark.asyncio
async def test_get_error(repo, mock_table: MagicMock) -> None:
    """Test read failures map to StorageError."""
    repository, _, _ = repo
    await repository.startup()
    mock_table.get_item.side_effect = client_error("ResourceNotFoundException")

    with pytest.raises(StorageError):
        await repository.get("slug")


@pytest.mark.asyncio
async def test_health_check(repo, mock_table: MagicMock) -> None:
    """Test health check reads the table status."""
    repository, _, _ = repo

    assert await repository.health_check() is False

    await repository.startup()
    mock_table.table_status = "ACTIVE"
    assert await repository.health_check() is True
