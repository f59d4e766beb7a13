"""WordPress.org plugin directory lookup."""

import logging
from typing import Optional

import aiohttp

from wpdi.constants import DEFAULT_DIRECTORY_API

logger = logging.getLogger(__name__)


class WordPressOrgDirectory:
    """Asks the plugin directory for a plugin's current download link."""

    def __init__(self, api_url: str = DEFAULT_DIRECTORY_API, timeout: float = 30):
        self.api_url = api_url
        self.timeout = timeout

    async def fetch_latest_download_link(self, slug: str) -> Optional[str]:
        """Fetch the ``download_link`` of a plugin.

        Returns:
            The link, or None if the directory has no usable answer
        """
        params = {
            "action": "plugin_information",
            "request[slug]": slug,
            "request[fields][download_link]": "1",
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.api_url, params=params) as response:
                if response.status != 200:
                    response_text = await response.text()
                    logger.error(f"[Directory] HTTP {response.status} for '{slug}': {response_text[:200]}")
                    return None
                data = await response.json(content_type=None)

        if not isinstance(data, dict) or data.get("error"):
            logger.warning(f"[Directory] No plugin information for '{slug}'")
            return None

        link = data.get("download_link")
        return link if isinstance(link, str) and link else None
