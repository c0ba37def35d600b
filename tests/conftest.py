"""tests/conftest.py — Shared fixtures for all tests.

Sets environment variables before any Lambda module is imported,
then provides moto-mocked DynamoDB tables and a Datastore bound to them.
"""
import json
import os
import sys
import uuid

# Set test env vars before any Lambda module is imported
os.environ.update({
    "USERS_TABLE":        "test-users",
    "STORES_TABLE":       "test-stores",
    "USERS_EMAIL_INDEX":  "email-index",
    "RC_REGION":          "us-east-1",
    "RC_LOCALE":          "zh",
    "RC_TIMEZONE":        "UTC",
    "RC_BASE_PATH":       "/.netlify/functions/api",
    "AWS_DEFAULT_REGION": "us-east-1",
})

# Add lambda/ and project root to path so imports resolve without packaging
_root = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, os.path.join(_root, "lambda"))
sys.path.insert(0, _root)

import pytest
import boto3
from moto import mock_aws

from datastore import Datastore
from helpers import hash_password, iso_utc

# Cheap work factor for fixtures; verification reads the cost from the hash itself.
FAST_ROUNDS = 4

ADMIN_EMAIL    = "boss@example.com"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def dynamodb_tables():
    """Spin up mocked users (with email GSI) and stores tables for each test."""
    with mock_aws():
        ddb = boto3.resource("dynamodb", region_name="us-east-1")
        ddb.create_table(
            TableName="test-users",
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[
                {"AttributeName": "id",    "AttributeType": "S"},
                {"AttributeName": "email", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[{
                "IndexName":  "email-index",
                "KeySchema":  [{"AttributeName": "email", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            }],
            BillingMode="PAY_PER_REQUEST",
        )
        ddb.create_table(
            TableName="test-stores",
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        yield ddb


@pytest.fixture
def store(dynamodb_tables):
    return Datastore(users_table="test-users", stores_table="test-stores",
                     region="us-east-1", endpoint_url=None)


@pytest.fixture
def add_user(dynamodb_tables):
    """Insert a user row; returns the stored item."""
    table = dynamodb_tables.Table("test-users")

    def _add(email="someone@example.com", password="password1", name="Someone",
             role="employee", is_active=True, created_at=None, **extra):
        item = {
            "id":            str(uuid.uuid4()),
            "name":          name,
            "email":         email,
            "password_hash": hash_password(password, rounds=FAST_ROUNDS),
            "role":          role,
            "store_limit":   10,
            "is_active":     is_active,
            "created_at":    created_at or "2026-01-01T00:00:00.000Z",
            **extra,
        }
        table.put_item(Item=item)
        return item
    return _add


@pytest.fixture
def admin(add_user):
    return add_user(email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name="Boss",
                    role="super_admin")


@pytest.fixture
def add_store(dynamodb_tables):
    """Insert a store row. Datetimes are stored the way the service writes them; strings go in verbatim."""
    table = dynamodb_tables.Table("test-stores")

    def _add(name="Shop", platform="meituan", owner_id=None, created_at=None, updated_at=None):
        item = {"id": str(uuid.uuid4()), "name": name, "platform": platform}
        if owner_id:
            item["owner_id"] = owner_id
        if created_at is not None:
            item["created_at"] = created_at if isinstance(created_at, str) else iso_utc(created_at)
        if updated_at is not None:
            item["updated_at"] = updated_at if isinstance(updated_at, str) else iso_utc(updated_at)
        table.put_item(Item=item)
        return item
    return _add


def make_event(path, method="POST", body=None, raw_body=None, prefix="/.netlify/functions/api"):
    """API Gateway v1-style proxy event."""
    if raw_body is None:
        raw_body = json.dumps(body) if body is not None else None
    return {"httpMethod": method, "path": prefix + path, "body": raw_body, "headers": {}}


def parse(resp) -> dict:
    return json.loads(resp["body"]) if resp["body"] else {}
