"""shared/activity.py — Relative-time labels and dashboard activity entries.

Used by:
  - lambda/dashboard.py (recent_activities feed)

Pure functions only: no datastore access, no clock reads. Callers pass `now`.
"""
from datetime import datetime, timezone, timedelta

_MS_PER_MINUTE = 60 * 1000
_MS_PER_HOUR   = 60 * _MS_PER_MINUTE
_MS_PER_DAY    = 24 * _MS_PER_HOUR

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Display strings per deployment language. {n} = bucket count,
# {owner}/{platform}/{name} = activity fields.
ACTIVITY_LABELS = {
    "zh": {
        "just_now":       "刚刚",
        "minutes_ago":    "{n}分钟前",
        "hours_ago":      "{n}小时前",
        "yesterday":      "昨天",
        "day_before":     "前天",
        "days_ago":       "{n}天前",
        "unknown_owner":  "用户",
        "store_created":  "{owner}创建了{platform}门店「{name}」",
    },
    "en": {
        "just_now":       "just now",
        "minutes_ago":    "{n} minutes ago",
        "hours_ago":      "{n} hours ago",
        "yesterday":      "yesterday",
        "day_before":     "the day before yesterday",
        "days_ago":       "{n} days ago",
        "unknown_owner":  "user",
        "store_created":  "{owner} created a {platform} store named '{name}'",
    },
}
DEFAULT_LOCALE = "zh"


def labels_for(locale: str) -> dict:
    """Label table for `locale`, falling back to the default language."""
    return ACTIVITY_LABELS.get((locale or "").lower(), ACTIVITY_LABELS[DEFAULT_LOCALE])


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string (or pass through a datetime) as an aware datetime.

    Accepts a trailing 'Z'. Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def epoch_ms(dt: datetime) -> int:
    return (parse_timestamp(dt) - _EPOCH) // timedelta(milliseconds=1)


def format_relative_time(past, now, labels=None) -> str:
    """Human label for how long ago `past` was, relative to `now`.

    Buckets are floor divisions of the elapsed milliseconds, so "yesterday"
    means 24h <= elapsed < 48h rather than the previous calendar date.
    Timestamps in the future read as "just now".
    """
    labels  = labels or labels_for(DEFAULT_LOCALE)
    elapsed = epoch_ms(now) - epoch_ms(past)
    minutes = elapsed // _MS_PER_MINUTE
    hours   = elapsed // _MS_PER_HOUR
    days    = elapsed // _MS_PER_DAY

    if minutes < 1:  return labels["just_now"]
    if minutes < 60: return labels["minutes_ago"].format(n=minutes)
    if hours < 24:   return labels["hours_ago"].format(n=hours)
    if days == 1:    return labels["yesterday"]
    if days == 2:    return labels["day_before"]
    return labels["days_ago"].format(n=days)


def format_activity(store: dict, owner_name, now, labels=None) -> dict:
    """Build one recent-activity entry for a newly created store."""
    labels     = labels or labels_for(DEFAULT_LOCALE)
    created_at = parse_timestamp(store["created_at"])
    content    = labels["store_created"].format(
        owner=owner_name or labels["unknown_owner"],
        platform=store.get("platform") or "",
        name=store.get("name") or "",
    )
    return {
        "time":      format_relative_time(created_at, now, labels),
        "content":   content,
        "timestamp": epoch_ms(created_at),
    }
