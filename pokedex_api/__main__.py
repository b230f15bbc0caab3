import uvicorn
from pokedex_api.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run("pokedex_api.main:app", host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
