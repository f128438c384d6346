"""Browser-like request headers for outbound platform fetches.

Every fetch attempt gets a freshly randomized header set so consecutive
attempts do not share one fingerprint.
"""

import random
from typing import Optional

from models.video import RequestOptions, StreamKind

PLATFORM_ORIGIN = "https://www.youtube.com"

# User agent rotation to avoid rate limiting (desktop and mobile)
DESKTOP_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]

MOBILE_USER_AGENTS = [
    "Mozilla/5.0 (Linux; Android 10) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_2 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (Android 14; Mobile; rv:121.0) Gecko/121.0 Firefox/121.0",
]

USER_AGENTS = DESKTOP_USER_AGENTS + MOBILE_USER_AGENTS

ACCEPT_LANGUAGE = "en-US,en;q=0.9"


def get_random_user_agent(rng: Optional[random.Random] = None) -> str:
    """Get a random user agent to avoid detection."""
    return (rng or random).choice(USER_AGENTS)


def generate_random_ip(rng: Optional[random.Random] = None) -> str:
    """Synthetic IPv4 address made of four independent bytes in 0..254."""
    rng = rng or random
    return ".".join(str(rng.randint(0, 254)) for _ in range(4))


def random_headers(
    rng: Optional[random.Random] = None, forwarded_for: bool = True
) -> dict[str, str]:
    """Build a plausible same-site browser header set.

    Args:
        rng: Random source (default: module-level ``random``). Pass a seeded
            ``random.Random`` for reproducible output.
        forwarded_for: Include a synthetic ``X-Forwarded-For`` address

    Returns:
        Header dictionary
    """
    headers = {
        "User-Agent": get_random_user_agent(rng),
        "Accept-Language": ACCEPT_LANGUAGE,
        "Referer": f"{PLATFORM_ORIGIN}/",
        "Origin": PLATFORM_ORIGIN,
    }
    if forwarded_for:
        headers["X-Forwarded-For"] = generate_random_ip(rng)
    return headers


def build_request_options(
    kind: StreamKind,
    quality: Optional[str] = None,
    timeout: float = 15.0,
    rng: Optional[random.Random] = None,
    forwarded_for: bool = True,
) -> RequestOptions:
    """Fresh options for one fetch attempt."""
    return RequestOptions(
        headers=random_headers(rng, forwarded_for=forwarded_for),
        timeout=timeout,
        quality=quality,
        kind=kind,
    )
