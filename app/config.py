import os  # lets us read environment variables (from the OS)
from functools import (
    lru_cache,  # tiny built-in cache; we use it to reuse one Settings object
)

from dotenv import load_dotenv  # loads variables from a local .env file
from pydantic import BaseModel  # Pydantic gives us a typed, validated settings class

load_dotenv()  # read .env and put those key=value pairs into environment variables


class Settings(BaseModel):  # our typed container for config values
    # database connection string; default is a SQLite file in the project folder
    # change effect: point to a different DB (e.g., Postgres) or file path
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./financeflow.db")

    # the currency every normalized total is expressed in
    # change effect: summaries, portfolio total and "available" switch unit
    reference_currency: str = os.getenv("REFERENCE_CURRENCY", "USD")

    # the other supported currency; amounts in it carry a captured rate
    secondary_currency: str = os.getenv("SECONDARY_CURRENCY", "ARS")

    # historical rate CDN; "@{date}" or "@latest" is appended to this prefix
    rate_api_url: str = os.getenv(
        "RATE_API_URL", "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api"
    )

    # seconds before a rate request gives up (then we fall back / return 0)
    rate_timeout_seconds: float = float(os.getenv("RATE_TIMEOUT_SECONDS", "8"))

    # root log level for the app loggers
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache  # make sure Settings() is created once and reused (fast + consistent)
def get_settings() -> Settings:
    return Settings()  # build from env (already loaded by load_dotenv())
