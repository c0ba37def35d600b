"""lambda/dashboard.py — Dashboard summary: counts, platform mix, recent activity.

The six reads are independent and fan out on a thread pool; any failure
propagates out of build_dashboard and the router answers 500. No partial data.
"""
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from boto3.dynamodb.conditions import Attr

from helpers import ok, _to_py, iso_utc, now_utc, LOCALE, TIMEZONE
from auth import require_admin
from logging_utils import log_app_event
from shared.activity import format_activity, labels_for, parse_timestamp

RECENT_LIMIT  = 10
ACTIVE_WINDOW = timedelta(days=7)

_RECENT_FIELDS = ("id", "name", "platform", "created_at", "owner_id")


def platform_distribution(rows) -> list:
    """[{platform, count}] sorted by count descending; ties keep first-seen order."""
    counts = Counter(r.get("platform") for r in rows)
    return [{"platform": p, "count": c} for p, c in counts.most_common()]


def most_recent(rows, limit=RECENT_LIMIT) -> list:
    dated = [r for r in rows if r.get("created_at")]
    dated.sort(key=lambda r: parse_timestamp(r["created_at"]), reverse=True)
    return dated[:limit]


def count_since(rows, field, since) -> int:
    """Rows whose `field` timestamp is at or after `since`, compared as instants (offsets honoured)."""
    return sum(1 for r in rows if r.get(field) and parse_timestamp(r[field]) >= since)


def recent_activities(store, rows, now, labels) -> list:
    """One activity entry per store; owner names come from one batched lookup."""
    if not rows:
        return []
    owners = {u["id"]: u.get("name") for u in store.get_users(r.get("owner_id") for r in rows)}
    return [format_activity(r, owners.get(r.get("owner_id")), now, labels) for r in rows]


def build_dashboard(store, as_of, labels=None, tz=None) -> dict:
    labels         = labels or labels_for(LOCALE)
    today_start    = as_of.astimezone(tz or TIMEZONE).replace(hour=0, minute=0, second=0, microsecond=0)
    seven_days_ago = as_of - ACTIVE_WINDOW

    queries = {
        "total_stores":     lambda: store.count("stores"),
        "total_users":      lambda: store.count("users", Attr("is_active").eq(True)),
        "today_new_stores": lambda: count_since(store.scan("stores", fields=("created_at",)), "created_at", today_start),
        "active_stores":    lambda: count_since(store.scan("stores", fields=("updated_at",)), "updated_at", seven_days_ago),
        "platforms":        lambda: store.scan("stores", fields=("platform",)),
        "recent":           lambda: most_recent(store.scan("stores", fields=_RECENT_FIELDS)),
    }
    with ThreadPoolExecutor(max_workers=len(queries)) as pool:
        futures = {key: pool.submit(fn) for key, fn in queries.items()}
        results = {key: fut.result() for key, fut in futures.items()}

    recent = _to_py(results["recent"])
    return {
        "summary": {
            "total_stores":     results["total_stores"],
            "total_users":      results["total_users"],
            "today_new_stores": results["today_new_stores"],
            "active_stores":    results["active_stores"],
        },
        "platform_distribution": platform_distribution(results["platforms"]),
        "recent_activities":     recent_activities(store, recent, as_of, labels),
        "timestamp":             iso_utc(as_of),
    }


@require_admin(missing_status=400)
def dashboard_data(store, body, admin):
    """POST /dashboard/data"""
    data = build_dashboard(store, now_utc())
    log_app_event("dashboard", "info", admin=admin["email"],
                  total_stores=data["summary"]["total_stores"])
    return ok({"data": data})
