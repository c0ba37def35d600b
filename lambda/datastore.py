"""lambda/datastore.py — DynamoDB access for the users and stores tables.

One Datastore is built per invocation (Datastore.from_env) and handed to the
route handlers; tests build one against moto-mocked tables instead.

boto3 resources are not thread-safe, so each thread that touches the store
(the dashboard fans reads out on a pool) gets its own session + resource.
"""
import threading
import time
import boto3
from boto3.dynamodb.conditions import Attr, Key

from helpers import (
    REGION, USERS_TABLE, STORES_TABLE, USERS_EMAIL_INDEX, DYNAMODB_ENDPOINT,
)

_BATCH_GET_MAX       = 100
_UNPROCESSED_PAUSE_S = 0.05


def _projection(fields) -> dict:
    """ProjectionExpression with every attribute aliased ('name' and 'role' are reserved words)."""
    names = {f"#{f}": f for f in fields}
    return {"ProjectionExpression": ", ".join(names), "ExpressionAttributeNames": names}


class Datastore:
    def __init__(self, users_table=USERS_TABLE, stores_table=STORES_TABLE,
                 region=REGION, endpoint_url=DYNAMODB_ENDPOINT,
                 email_index=USERS_EMAIL_INDEX):
        self.users_table_name  = users_table
        self.stores_table_name = stores_table
        self.email_index       = email_index
        self._region           = region
        self._endpoint_url     = endpoint_url
        self._local            = threading.local()

    @classmethod
    def from_env(cls):
        return cls()

    # ── Per-thread handles ────────────────────────────────────────────────────

    def _resource(self):
        res = getattr(self._local, "resource", None)
        if res is None:
            session = boto3.Session(region_name=self._region)
            res     = session.resource("dynamodb", endpoint_url=self._endpoint_url)
            self._local.resource = res
        return res

    @property
    def users(self):
        return self._resource().Table(self.users_table_name)

    @property
    def stores(self):
        return self._resource().Table(self.stores_table_name)

    # ── Generic reads ─────────────────────────────────────────────────────────

    def count(self, which: str, condition=None) -> int:
        """Number of items in the "users" or "stores" table matching `condition` (full paginated scan)."""
        table  = getattr(self, which)
        kwargs = {"Select": "COUNT"}
        if condition is not None:
            kwargs["FilterExpression"] = condition
        total, resp = 0, table.scan(**kwargs)
        total += resp.get("Count", 0)
        while "LastEvaluatedKey" in resp:
            resp = table.scan(ExclusiveStartKey=resp["LastEvaluatedKey"], **kwargs)
            total += resp.get("Count", 0)
        return total

    def scan(self, which: str, fields=None, condition=None) -> list:
        table  = getattr(self, which)
        kwargs = _projection(fields) if fields else {}
        if condition is not None:
            kwargs["FilterExpression"] = condition
        items, resp = [], table.scan(**kwargs)
        items.extend(resp.get("Items", []))
        while "LastEvaluatedKey" in resp:
            resp = table.scan(ExclusiveStartKey=resp["LastEvaluatedKey"], **kwargs)
            items.extend(resp.get("Items", []))
        return items

    # ── Users ─────────────────────────────────────────────────────────────────

    def users_by_email(self, email: str, condition=None) -> list:
        """All user items whose email matches exactly, via the email GSI."""
        kwargs = {
            "IndexName":              self.email_index,
            "KeyConditionExpression": Key("email").eq(email),
        }
        if condition is not None:
            kwargs["FilterExpression"] = condition
        table = self.users
        items, resp = [], table.query(**kwargs)
        items.extend(resp.get("Items", []))
        while "LastEvaluatedKey" in resp:
            resp = table.query(ExclusiveStartKey=resp["LastEvaluatedKey"], **kwargs)
            items.extend(resp.get("Items", []))
        return items

    def active_users_by_email(self, email: str, role: str) -> list:
        return self.users_by_email(
            email, Attr("role").eq(role) & Attr("is_active").eq(True))

    def get_users(self, ids, fields=("id", "name")) -> list:
        """Batched lookup of users by id. Unknown ids are simply absent."""
        ids, found = list(dict.fromkeys(i for i in ids if i)), []
        res        = self._resource()
        for start in range(0, len(ids), _BATCH_GET_MAX):
            request = {self.users_table_name: {
                "Keys": [{"id": i} for i in ids[start:start + _BATCH_GET_MAX]],
                **_projection(fields),
            }}
            while request:
                resp = res.batch_get_item(RequestItems=request)
                found.extend(resp.get("Responses", {}).get(self.users_table_name, []))
                request = resp.get("UnprocessedKeys") or None
                if request:
                    time.sleep(_UNPROCESSED_PAUSE_S)
        return found

    def put_user(self, item: dict):
        self.users.put_item(Item=item, ConditionExpression=Attr("id").not_exists())
