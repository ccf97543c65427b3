"""Small formatting helpers shared by the aggregator and the exporters."""

import re
from datetime import datetime, timezone


def format_date(value: str | datetime | None) -> str:
    """Format an ISO 8601 timestamp (or datetime) as ``MM/DD/YYYY`` in UTC.

    Returns an empty string for missing or unparseable input.
    """
    if not value:
        return ""

    if isinstance(value, datetime):
        moment = value
    else:
        try:
            # fromisoformat only accepts a trailing Z from Python 3.11 on
            moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return ""

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)

    return f"{moment.month:02d}/{moment.day:02d}/{moment.year}"


def get_package_page_url(base_url: str, package_name: str, version: str | None = None) -> str:
    """Build the public package page URL, optionally pinned to a version."""
    if not package_name:
        return ""

    url = f"{base_url.rstrip('/')}/{package_name}"
    if version:
        return f"{url}/v/{version}"
    return url


def sanitize_file_name(name: str) -> str:
    """Lower-case a package name and replace anything but ``[a-z0-9]`` with dashes."""
    return re.sub(r"[^a-z0-9]", "-", name.lower().replace("@", ""))
