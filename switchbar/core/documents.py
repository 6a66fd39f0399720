"""Build indexable documents and canonical URL keys from candidates."""

from typing import Tuple
from urllib.parse import SplitResult, urlsplit

from .errors import InvalidURLError
from .models import CandidateRecord, IndexedDocument


def split_url(url: str) -> SplitResult:
    """Parse an absolute URL, raising ``InvalidURLError`` if it is not one."""
    if not url or not isinstance(url, str):
        raise InvalidURLError(str(url), "empty")
    try:
        parts = urlsplit(url.strip())
        # Touch the port so malformed netlocs fail here rather than later
        parts.port
    except ValueError as e:
        raise InvalidURLError(url, str(e)) from e
    if not parts.scheme or not (parts.netloc or parts.path):
        raise InvalidURLError(url)
    return parts


def url_parts(url: str) -> Tuple[str, str, str]:
    """Return ``(base, query, hash)`` where base is scheme, host and path."""
    parts = split_url(url)
    if parts.netloc:
        base = f"{parts.scheme}://{parts.netloc}{parts.path}"
    else:
        base = f"{parts.scheme}:{parts.path}"
    query = f"?{parts.query}" if parts.query else ""
    fragment = f"#{parts.fragment}" if parts.fragment else ""
    return base, query, fragment


def canonical_url(url: str) -> str:
    """URL without query string or fragment, used to merge sources."""
    return url_parts(url)[0]


def url_host(url: str) -> str:
    """Lowercased hostname without port or credentials."""
    return split_url(url).hostname or ""


def to_document(record: CandidateRecord) -> IndexedDocument:
    """
    Map a candidate onto separately weighted fields.

    Raises:
        InvalidURLError: If the record URL cannot be parsed
    """
    base, query, fragment = url_parts(record.url)
    return IndexedDocument(
        id=record.id,
        title=record.title,
        url_base=base,
        url_query=query,
        url_hash=fragment,
        source_type=record.source_type,
    )
