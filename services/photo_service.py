import httpx
import logging
from typing import Optional

from core.config import settings

logger = logging.getLogger(__name__)

PEXELS_SEARCH_URL = "https://api.pexels.com/v1/search"

async def fetch_destination_image(destination: str) -> Optional[str]:
    """
    Looks up a representative photo for the destination on Pexels.
    Returns None when the key is missing or the lookup fails.
    """
    api_key = settings.PEXELS_API_KEY
    if not api_key:
        logger.info("Pexels API key is not configured; skipping destination image.")
        return None

    params = {"query": f"{destination} travel", "per_page": 1}
    headers = {"Authorization": api_key}

    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        try:
            response = await client.get(PEXELS_SEARCH_URL, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Error from Pexels API: %s", e.response.status_code)
            return None
        except (httpx.RequestError, ValueError) as e:
            logger.warning("Error fetching destination image: %s", e)
            return None

    photos = data.get("photos") or []
    if photos:
        return (photos[0].get("src") or {}).get("large")
    return None
