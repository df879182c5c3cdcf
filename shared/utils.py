"""Shared utility functions."""
import os
import re
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import urlparse


def generate_job_id() -> str:
    """Generate a unique job ID."""
    return f"job_{uuid.uuid4().hex[:12]}"


def get_utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def validate_url(url: str) -> bool:
    """Validate that a URL is properly formatted."""
    try:
        result = urlparse(url)
        return all([result.scheme in ('http', 'https'), result.netloc])
    except Exception:
        return False


def url_host(url: str) -> str:
    """
    Return the host part of a URL with the scheme and a leading ``www.`` removed.

    Characters that are not safe in a filename (a port separator, for
    instance) are replaced with underscores.
    """
    host = re.sub(r'^[a-zA-Z][a-zA-Z0-9+.-]*://', '', url.strip())
    host = re.split(r'[/?#]', host, maxsplit=1)[0]
    # Drop credentials if present
    host = host.rsplit('@', 1)[-1]
    if host.lower().startswith('www.'):
        host = host[4:]
    host = re.sub(r'[^\w.-]', '_', host)
    return host or "page"


def filesystem_timestamp(now: Optional[datetime] = None) -> str:
    """ISO timestamp with colons and periods replaced so it can live in a filename."""
    now = now or get_utc_now()
    stamp = now.isoformat(timespec="microseconds").replace("+00:00", "Z")
    return re.sub(r'[:.]', '-', stamp)


def build_pdf_filename(url: str, now: Optional[datetime] = None) -> str:
    """Build the output filename for a URL: ``<host>_<timestamp>.pdf``."""
    return f"{url_host(url)}_{filesystem_timestamp(now)}.pdf"


def unique_pdf_path(output_dir: str, url: str, now: Optional[datetime] = None) -> str:
    """
    Full path for a URL's PDF inside output_dir.

    The timestamp already separates repeated hosts; a counter is appended on
    the rare clash within the same microsecond.
    """
    filename = build_pdf_filename(url, now)
    path = os.path.join(output_dir, filename)
    stem, ext = os.path.splitext(filename)
    counter = 1
    while os.path.exists(path):
        path = os.path.join(output_dir, f"{stem}-{counter}{ext}")
        counter += 1
    return path


def resolve_output_dir(
    output_path: Optional[str],
    default_dir: str,
    unusable_paths: Iterable[str] = ()
) -> str:
    """Substitute the default directory for an empty or known-unusable output path."""
    if not output_path or not output_path.strip():
        return default_dir
    if output_path.strip() in set(unusable_paths):
        return default_dir
    return output_path
