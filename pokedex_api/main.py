import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from pokedex_api import db
from pokedex_api.clients import CacheClient, PokeAPIClient
from pokedex_api.config import get_settings
from pokedex_api.dependencies import get_pokemon_service
from pokedex_api.logging_config import setup_logging
from pokedex_api.models import CatalogEntry, FavoriteCreate, PokemonDetail
from pokedex_api.services import FavoritesStore, PokemonService

logger = logging.getLogger(__name__)

settings = get_settings()
setup_logging(settings.log_level)

# Applies to every route; storage is in-process memory
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Settings are re-read here so tests can patch the environment before startup
    settings = get_settings()

    engine = db.create_engine(settings.database_url)
    await db.init_db(engine)

    app.state.poke_client = PokeAPIClient(base_url=settings.pokeapi_url)
    app.state.cache_client = CacheClient(redis_url=settings.redis_url)
    app.state.favorites_store = FavoritesStore(
        db.create_session_factory(engine),
        case_sensitive=settings.favorites_case_sensitive,
    )
    logger.info(f"Pokedex API started (PokeAPI: {settings.pokeapi_url}, cache: {settings.redis_url})")

    try:
        yield
    finally:
        await app.state.poke_client.close()
        await app.state.cache_client.close()
        await engine.dispose()


app = FastAPI(
    title="Pokedex Favorites API",
    description="Caching proxy for PokeAPI with a persisted list of favorite Pokemon.",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_url],
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Malformed payloads are a client error (400), not FastAPI's default 422
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.get("/health", summary="Liveness check")
async def health():
    return {"status": "ok"}


@app.get(
    "/api/pokemon",
    response_model=list[CatalogEntry],
    summary="Lists the first 150 Pokemon, optionally filtered by name",
)
async def get_pokemon_list(
    search: str | None = None,
    service: PokemonService = Depends(get_pokemon_service),
):
    # UpstreamUnavailable (503) propagates as an HTTPException
    return await service.get_list(search)


@app.get(
    "/api/pokemon/{name}",
    response_model=PokemonDetail,
    summary="Returns abilities, types, artwork and evolution chain for one Pokemon",
)
async def get_pokemon_details(
    name: str,
    service: PokemonService = Depends(get_pokemon_service),
):
    # NotFound (404), UpstreamUnavailable (503) and InternalDependencyFailure (500)
    # are HTTPExceptions and are mapped by FastAPI directly
    return await service.get_detail(name)


@app.get("/api/favorites", response_model=list[str], summary="Lists favorite Pokemon names")
async def get_favorites(service: PokemonService = Depends(get_pokemon_service)):
    return await service.get_favorites()


@app.post(
    "/api/favorites",
    response_model=list[str],
    status_code=status.HTTP_201_CREATED,
    summary="Adds a favorite (no-op if already present)",
)
async def add_favorite(
    favorite: FavoriteCreate,
    service: PokemonService = Depends(get_pokemon_service),
):
    return await service.add_favorite(favorite.name)


@app.delete("/api/favorites/{name}", response_model=list[str], summary="Removes a favorite")
async def remove_favorite(
    name: str,
    service: PokemonService = Depends(get_pokemon_service),
):
    return await service.remove_favorite(name)
