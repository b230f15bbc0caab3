import logging
from pydantic import ValidationError
from pokedex_api.clients.cache_client import CacheClient
from pokedex_api.clients.pokeapi_client import PokeAPIClient
from pokedex_api.services.evolution_resolver import EvolutionChainResolver, id_from_url
from pokedex_api.services.favorites_store import FavoritesStore
from pokedex_api.exceptions import UpstreamUnavailable
from pokedex_api.models import CatalogEntry, EvolutionStep, PokemonDetail

logger = logging.getLogger(__name__)


class PokemonService:
    # All collaborators are injected; their lifecycle belongs to the app lifespan
    def __init__(
        self,
        poke_client: PokeAPIClient,
        cache: CacheClient,
        evolution_resolver: EvolutionChainResolver,
        favorites: FavoritesStore,
        list_cache_key: str = "pokemon_list",
        official_image_url: str = "",
        cache_ttl_ms: int = CacheClient.DEFAULT_TTL_MS,
    ):
        self._poke_client = poke_client
        self._cache = cache
        self._evolution_resolver = evolution_resolver
        self._favorites = favorites
        self._list_cache_key = list_cache_key
        self._official_image_url = official_image_url
        self._cache_ttl_ms = cache_ttl_ms

    async def get_list(self, search: str | None = None) -> list[CatalogEntry]:
        """
        Returns the first 150 Pokemon, read through the cache.
        The optional search filter runs after the cache on every request.
        """
        entries = None
        cached = await self._cache.get(self._list_cache_key)
        if cached.hit:
            try:
                entries = [CatalogEntry.model_validate(item) for item in cached.value]
                logger.info("Serving Pokemon list from cache")
            except (ValidationError, TypeError):
                # Wrong-shape entry: refetch and overwrite it
                logger.warning(f"Discarding malformed cache entry '{self._list_cache_key}'")

        if entries is None:
            logger.info("Cache miss - fetching Pokemon list from PokeAPI")
            results = await self._poke_client.fetch_list()
            entries = [self._to_catalog_entry(item) for item in results]
            # Best effort: a failed write is already logged by the cache client
            await self._cache.set(
                self._list_cache_key,
                [entry.model_dump() for entry in entries],
                self._cache_ttl_ms,
            )

        if search:
            term = search.lower()
            entries = [entry for entry in entries if term in entry.name.lower()]
        return entries

    def _to_catalog_entry(self, item: dict) -> CatalogEntry:
        try:
            pokemon_id = id_from_url(item["url"])
            return CatalogEntry(
                name=item["name"],
                id=pokemon_id,
                image=f"{self._official_image_url}/{pokemon_id}.png",
            )
        except (KeyError, TypeError, ValueError, IndexError):
            logger.error(f"PokeAPI list entry could not be parsed: {item!r}")
            raise UpstreamUnavailable("PokeAPI returned an unexpected response format.")

    async def get_detail(self, name: str) -> PokemonDetail:
        """
        Returns abilities, types, artwork and the flattened evolution chain
        for one Pokemon. NotFound / UpstreamUnavailable propagate unchanged.
        """
        cache_key = CacheClient.detail_key(name)

        cached = await self._cache.get(cache_key)
        if cached.hit:
            try:
                detail = PokemonDetail.model_validate(cached.value)
                logger.info(f"Serving details for {name} from cache")
                return detail
            except ValidationError:
                logger.warning(f"Discarding malformed cache entry '{cache_key}'")

        logger.info(f"Cache miss - fetching details for {name} from PokeAPI")
        details = await self._poke_client.fetch_detail_raw(name)
        try:
            species_url = details["species"]["url"]
        except (KeyError, TypeError):
            logger.error(f"PokeAPI detail for '{name}' has no species reference")
            raise UpstreamUnavailable("PokeAPI returned an unexpected response format.")
        evolution = await self._evolution_resolver.resolve(species_url)

        try:
            full_details = self._compose_detail(details, evolution)
        except (KeyError, TypeError, ValidationError):
            logger.error(f"PokeAPI detail for '{name}' could not be parsed")
            raise UpstreamUnavailable("PokeAPI returned an unexpected response format.")

        await self._cache.set(cache_key, full_details.model_dump(), self._cache_ttl_ms)
        return full_details

    def _compose_detail(self, details: dict, evolution: list[EvolutionStep]) -> PokemonDetail:
        sprites = details.get("sprites") or {}
        official_artwork = (sprites.get("other") or {}).get("official-artwork") or {}

        return PokemonDetail(
            id=details["id"],
            name=details["name"],
            abilities=[a["ability"]["name"] for a in details.get("abilities", [])],
            types=[t["type"]["name"] for t in details.get("types", [])],
            image=official_artwork.get("front_default") or sprites.get("front_default"),
            evolution=evolution,
        )

    # --- Favorites: no cache, no upstream ---

    async def get_favorites(self) -> list[str]:
        return await self._favorites.list()

    async def add_favorite(self, name: str) -> list[str]:
        return await self._favorites.add(name)

    async def remove_favorite(self, name: str) -> list[str]:
        return await self._favorites.remove(name)
