"""Runtime environment predicates and deep-link construction."""
import re
from typing import Optional
from urllib.parse import quote

__all__ = ["is_mobile", "build_deep_link"]

MOBILE_USER_AGENT = re.compile(
    r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini",
    re.IGNORECASE,
)


def is_mobile(user_agent: Optional[str]) -> bool:
    return bool(user_agent) and MOBILE_USER_AGENT.search(user_agent) is not None


def build_deep_link(template: str, dapp_url: str) -> str:
    """
    Fill a wallet deep-link template with the dapp URL.

    Templates may use ``{url}`` (the URL percent-encoded as a query value) or
    ``{host_path}`` (the URL without its scheme, as MetaMask's universal link
    expects).

    Example:
        >>> build_deep_link("https://metamask.app.link/dapp/{host_path}",
        ...                 "https://example.org/app")
        'https://metamask.app.link/dapp/example.org/app'
    """
    host_path = re.sub(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", "", dapp_url)
    return template.format(url=quote(dapp_url, safe=""), host_path=host_path)
