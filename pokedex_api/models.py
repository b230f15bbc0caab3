from pydantic import BaseModel, Field


# One row of the catalog list (built from PokeAPI's {name, url} pairs)
class CatalogEntry(BaseModel):
    name: str
    id: int
    image: str


# One stage of a flattened evolution chain, base form first
class EvolutionStep(BaseModel):
    name: str
    id: int
    image: str


# Full detail view returned by GET /api/pokemon/{name}
class PokemonDetail(BaseModel):
    id: int
    name: str
    abilities: list[str]
    types: list[str]
    image: str | None
    evolution: list[EvolutionStep]


# Request body for POST /api/favorites
class FavoriteCreate(BaseModel):
    name: str = Field(min_length=2)
