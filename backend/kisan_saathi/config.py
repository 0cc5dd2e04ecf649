# backend/kisan_saathi/config.py
import os
from typing import Optional
from dotenv import load_dotenv
from pathlib import Path

dotenv_path = Path(__file__).parents[2] / '.env'
load_dotenv(dotenv_path)


def _csv(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "Kisan Saathi AI")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # --- OpenAI (contextual location inference) ---
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str   = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    LLM_TIMEOUT_SEC: float = float(os.getenv("LLM_TIMEOUT_SEC", "45"))

    # --- IP geolocation ---
    IPGEOLOCATION_API_KEY: str = os.getenv("IPGEOLOCATION_API_KEY", "")
    IP_LOOKUP_TIMEOUT_SEC: float = float(os.getenv("IP_LOOKUP_TIMEOUT_SEC", "10"))
    # ISPs route a lot of Indian traffic through Delhi
    BLOCKED_IP_CITIES: tuple[str, ...] = _csv("BLOCKED_IP_CITIES", "Delhi,New Delhi")

    # --- Agmarknet ---
    AGMARKNET_BASE_URL: str = os.getenv("AGMARKNET_BASE_URL", "https://agmarknet.gov.in")
    AGMARKNET_GET_TIMEOUT_SEC: float  = float(os.getenv("AGMARKNET_GET_TIMEOUT_SEC", "15"))
    AGMARKNET_POST_TIMEOUT_SEC: float = float(os.getenv("AGMARKNET_POST_TIMEOUT_SEC", "20"))

    DEFAULT_CROP: str  = os.getenv("DEFAULT_CROP", "Rice")
    DEFAULT_STATE: str = os.getenv("DEFAULT_STATE", "Uttar Pradesh")

    # --- Location cascade ---
    GPS_MAX_ATTEMPTS: int = int(os.getenv("GPS_MAX_ATTEMPTS", "3"))
    GPS_ACCURACY_THRESHOLD_M: float = float(os.getenv("GPS_ACCURACY_THRESHOLD_M", "100"))
    GPS_RETRY_DELAY_SEC: float = float(os.getenv("GPS_RETRY_DELAY_SEC", "1.0"))
    GPS_TIMEOUT_SEC: float = float(os.getenv("GPS_TIMEOUT_SEC", "30"))
    GEOCODE_TIMEOUT_SEC: float = float(os.getenv("GEOCODE_TIMEOUT_SEC", "20"))
    MANUAL_LOCATION_MAX_AGE_SEC: int = int(os.getenv("MANUAL_LOCATION_MAX_AGE_SEC", str(7 * 24 * 3600)))

    # --- Weather / soil ---
    WEATHER_TIMEOUT_SEC: float = float(os.getenv("WEATHER_TIMEOUT_SEC", "15"))
    SOIL_TIMEOUT_SEC: float    = float(os.getenv("SOIL_TIMEOUT_SEC", "20"))

    # Fallback randomness; unset in production
    FALLBACK_SEED: Optional[int] = _optional_int("FALLBACK_SEED")

    # Cache
    PRICE_CACHE_TTL_SEC: int = int(os.getenv("PRICE_CACHE_TTL_SEC", "1800"))
    FALLBACK_PRICE_CACHE_TTL_SEC: int = int(os.getenv("FALLBACK_PRICE_CACHE_TTL_SEC", "300"))
    LOCATION_CACHE_TTL_SEC: int = int(os.getenv("LOCATION_CACHE_TTL_SEC", "300"))
    WEATHER_CACHE_TTL_SEC: int = int(os.getenv("WEATHER_CACHE_TTL_SEC", "1800"))
    SOIL_CACHE_TTL_SEC: int = int(os.getenv("SOIL_CACHE_TTL_SEC", str(24 * 3600)))

settings = Settings()
