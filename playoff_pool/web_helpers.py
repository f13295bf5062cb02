from __future__ import annotations

from typing import Any, Dict, Optional

import requests

# -------------------------
# Constants
# -------------------------


# --- WEB REQUEST CONFIG ---
UA = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
      "AppleWebKit/537.36 (KHTML, like Gecko) "
      "Chrome/126.0.0.0 Safari/537.36")

HEADERS = {"User-Agent": UA, "Accept": "application/json", "Accept-Language": "en-US,en;q=0.9"}


# -------------------------
# Helpers
# -------------------------


def get_json(url: str, params: Optional[Dict[str, Any]] = None, timeout: float = 25) -> Any:
    """
    GET a JSON document. Non-2xx responses raise requests.HTTPError so prefect
    task retries can take over.
    """
    r = requests.get(url, params=params, headers=HEADERS, timeout=timeout)
    r.raise_for_status()
    return r.json()
