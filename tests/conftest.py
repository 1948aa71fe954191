import httpx
import pytest

from firefly_catalog.client import FireflyClient
from firefly_catalog.db import CatalogStore
from firefly_catalog.models import FireflyAsset

BASE_URL = "https://api.firefly.test/api/v1.0"


def make_asset(**overrides) -> FireflyAsset:
    """Build an asset from the API's camelCase payload."""
    data = {
        "fireflyAssetId": "arn:aws:s3:::payments-bucket",
        "assetId": "payments-bucket",
        "resourceId": "payments-bucket",
        "assetType": "aws_s3_bucket",
        "providerId": "123456789012",
        "name": "payments-bucket",
        "state": "managed",
        "region": "us-east-1",
        "owner": "team-payments",
        "arn": "arn:aws:s3:::payments-bucket",
        "tagsList": ["app: payments", "Env: Production"],
        "connectionSources": [],
        "connectionTargets": [],
        "consoleURL": "https://console.aws.amazon.com/s3/buckets/payments-bucket",
        "fireflyLink": "https://app.firefly.ai/inventory?asset=payments-bucket",
        "iacType": "terraform",
    }
    data.update(overrides)
    return FireflyAsset.model_validate(data)


@pytest.fixture
def asset() -> FireflyAsset:
    return make_asset()


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
async def firefly_client(http_client):
    client = FireflyClient(
        "access",
        "secret",
        base_url=BASE_URL,
        http_client=http_client,
        retry_delay=0,
    )
    yield client
    await client.aclose()


@pytest.fixture
def store():
    catalog = CatalogStore(":memory:")
    yield catalog
    catalog.close()
