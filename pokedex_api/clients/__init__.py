"""Client modules for external API and cache communication."""
from .pokeapi_client import PokeAPIClient
from .cache_client import CacheClient, CacheResult

__all__ = [
    'PokeAPIClient',
    'CacheClient',
    'CacheResult',
]
