from fastapi import Depends, Request
from pokedex_api.clients import CacheClient, PokeAPIClient
from pokedex_api.config import Settings, get_settings
from pokedex_api.services import EvolutionChainResolver, FavoritesStore, PokemonService

# Shared handles are created by the lifespan in main.py and kept on app.state.
# Tests swap them out through app.dependency_overrides.


def get_poke_client(request: Request) -> PokeAPIClient:
    return request.app.state.poke_client


def get_cache_client(request: Request) -> CacheClient:
    return request.app.state.cache_client


def get_favorites_store(request: Request) -> FavoritesStore:
    return request.app.state.favorites_store


def get_pokemon_service(
    poke_client: PokeAPIClient = Depends(get_poke_client),
    cache_client: CacheClient = Depends(get_cache_client),
    favorites_store: FavoritesStore = Depends(get_favorites_store),
    settings: Settings = Depends(get_settings),
) -> PokemonService:
    return PokemonService(
        poke_client=poke_client,
        cache=cache_client,
        evolution_resolver=EvolutionChainResolver(poke_client, settings.pokemon_image_url),
        favorites=favorites_store,
        list_cache_key=settings.pokemon_list_cache_key,
        official_image_url=settings.pokemon_official_image_url,
        cache_ttl_ms=settings.cache_ttl_ms,
    )
