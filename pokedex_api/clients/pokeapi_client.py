import httpx
import logging
from pokedex_api.exceptions import NotFound, UpstreamUnavailable

logger = logging.getLogger(__name__)


class PokeAPIClient:
    BASE_URL = "https://pokeapi.co/api/v2"
    LIST_LIMIT = 150

    def __init__(self, base_url: str | None = None, timeout: float = 5.0):
        self.client = httpx.AsyncClient(base_url=base_url or self.BASE_URL, timeout=timeout)

    async def _get_json(self, url: str, **kwargs) -> dict:
        """GETs a URL and decodes the body. Status errors are left to the caller."""
        response = await self.client.get(url, **kwargs)
        response.raise_for_status()  # Raises for 4xx/5xx status codes
        return response.json()

    async def fetch_list(self) -> list[dict]:
        """Fetches the first LIST_LIMIT {name, url} pairs from /pokemon."""
        try:
            data = await self._get_json("/pokemon", params={"limit": self.LIST_LIMIT})
            return data["results"]
        except httpx.HTTPStatusError as e:
            logger.error(f"PokeAPI list fetch failed with status {e.response.status_code}")
            raise UpstreamUnavailable(f"PokeAPI failed with status {e.response.status_code}")
        except httpx.RequestError as e:
            # Handle network failures/timeouts
            logger.error(f"PokeAPI network error while fetching list: {str(e)}")
            raise UpstreamUnavailable(f"PokeAPI network error: {str(e)}")
        except (ValueError, KeyError):
            logger.error("PokeAPI list response parsing error.")
            raise UpstreamUnavailable("PokeAPI returned an unexpected response format.")

    async def fetch_detail_raw(self, name: str) -> dict:
        """Fetches the raw /pokemon/{name} record. Names are matched case-insensitively."""
        normalized_name = name.lower()

        try:
            return await self._get_json(f"/pokemon/{normalized_name}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                # Map external 404 to a standardized internal 404
                raise NotFound(f"Pokemon '{name}' not found")
            logger.error(f"PokeAPI detail fetch for '{normalized_name}' failed with status {e.response.status_code}")
            raise UpstreamUnavailable(f"PokeAPI failed with status {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error(f"PokeAPI network error while fetching '{normalized_name}': {str(e)}")
            raise UpstreamUnavailable(f"PokeAPI network error: {str(e)}")
        except ValueError:
            logger.error(f"PokeAPI detail response for '{normalized_name}' could not be parsed.")
            raise UpstreamUnavailable("PokeAPI returned an unexpected response format.")

    async def _fetch_resource(self, url: str, kind: str) -> dict:
        # Species and chain URLs come from upstream payloads, so any failure
        # (including 404) counts as the upstream being unavailable.
        try:
            return await self._get_json(url)
        except httpx.HTTPStatusError as e:
            logger.error(f"PokeAPI {kind} fetch failed with status {e.response.status_code}: {url}")
            raise UpstreamUnavailable(f"PokeAPI {kind} request failed with status {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error(f"PokeAPI network error while fetching {kind}: {str(e)}")
            raise UpstreamUnavailable(f"PokeAPI network error: {str(e)}")
        except ValueError:
            logger.error(f"PokeAPI {kind} response could not be parsed: {url}")
            raise UpstreamUnavailable(f"PokeAPI returned an unexpected {kind} format.")

    async def fetch_species(self, url: str) -> dict:
        return await self._fetch_resource(url, "species")

    async def fetch_evolution_chain(self, url: str) -> dict:
        return await self._fetch_resource(url, "evolution chain")

    async def close(self):
        """Close the HTTP client (call on app shutdown)."""
        await self.client.aclose()
