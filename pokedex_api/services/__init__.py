"""Catalog, evolution and favorites services."""
from .evolution_resolver import EvolutionChainResolver
from .favorites_store import FavoritesStore
from .pokemon_service import PokemonService

__all__ = [
    'EvolutionChainResolver',
    'FavoritesStore',
    'PokemonService',
]
