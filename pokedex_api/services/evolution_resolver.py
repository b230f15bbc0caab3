import logging
from pokedex_api.clients.pokeapi_client import PokeAPIClient
from pokedex_api.exceptions import InternalDependencyFailure, UpstreamUnavailable
from pokedex_api.models import EvolutionStep

logger = logging.getLogger(__name__)


def id_from_url(url: str) -> int:
    """Returns the trailing numeric path segment of a PokeAPI resource URL."""
    return int([segment for segment in url.split("/") if segment][-1])


class EvolutionChainResolver:
    """
    Flattens a species' evolution chain into a linear list of steps.

    Only the first entry of every ``evolves_to`` list is followed, so branching
    chains (e.g. eevee) yield a single path. This is expected behavior.
    """

    def __init__(self, poke_client: PokeAPIClient, image_base_url: str):
        self._poke_client = poke_client
        self._image_base_url = image_base_url

    async def resolve(self, species_url: str) -> list[EvolutionStep]:
        try:
            species = await self._poke_client.fetch_species(species_url)
            chain_url = (species.get("evolution_chain") or {}).get("url")
            if not chain_url:
                # Some species carry no evolution data at all
                return []
            chain_data = await self._poke_client.fetch_evolution_chain(chain_url)
        except UpstreamUnavailable as e:
            raise InternalDependencyFailure(e.detail)

        try:
            return self._walk(chain_data.get("chain"))
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            logger.error(f"Evolution chain from {chain_url} could not be parsed: {e}")
            raise InternalDependencyFailure("PokeAPI returned an unexpected evolution chain format.")

    def _walk(self, node: dict | None) -> list[EvolutionStep]:
        steps = []
        current = node

        while current:
            species = current.get("species") or {}
            species_url = species.get("url")
            if species_url:
                pokemon_id = id_from_url(species_url)
                steps.append(
                    EvolutionStep(
                        name=species.get("name", ""),
                        id=pokemon_id,
                        image=f"{self._image_base_url}/{pokemon_id}.png",
                    )
                )
            else:
                logger.warning("Skipping evolution node without a species URL")

            children = current.get("evolves_to") or []
            current = children[0] if children else None

        return steps
