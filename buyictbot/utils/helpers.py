from __future__ import annotations
# buyictbot/utils/helpers.py
import re
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from dateutil import parser as dateparser


# --------------------------- Text / URL utils ---------------------------

_WS_RE = re.compile(r"\s+")
def normalize_ws(s: Optional[str]) -> str:
    """Collapse whitespace and trim."""
    return _WS_RE.sub(" ", (s or "").strip())

def canonicalize_url(u: Optional[str]) -> str:
    """
    Normalize URLs for dedup:
    - lower-case scheme/host
    - remove fragment
    - keep query but sort keys
    """
    if not u:
        return ""
    p = urlparse(u.strip())
    q = urlencode(sorted(parse_qsl(p.query, keep_blank_values=True)))
    return urlunparse((
        (p.scheme or "").lower(),
        (p.netloc or "").lower(),
        p.path or "",
        p.params or "",
        q,
        "",  # strip fragment
    ))


# --------------------------- Dates --------------------------------------

def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def parse_when(s: Optional[str]) -> Optional[str]:
    """
    Parse a portal date like '12 November 2025 6:00pm (Canberra time)' → ISO 8601.
    AU portals write dates day-first. Returns None if parsing fails.
    """
    txt = normalize_ws(s)
    if not txt:
        return None
    try:
        return dateparser.parse(txt, dayfirst=True, fuzzy=True).isoformat()
    except (ValueError, OverflowError):
        return None


# --------------------------- Misc helpers -------------------------------

def preview(text: Optional[str], n: int = 140) -> str:
    t = normalize_ws(text)
    return (t[:n] + "…") if len(t) > n else t
