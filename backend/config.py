import os
from datetime import timedelta
from typing import Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:5174"]
TOKEN_VALIDITY = timedelta(days=365)


def is_production(config) -> bool:
    return str(config.get("APP_ENV") or "").strip().lower() == "production"


def parse_origins(raw_value: Optional[str]) -> List[str]:
    origins: List[str] = []
    for origin in (raw_value or "").split(","):
        trimmed = origin.strip()
        if trimmed:
            origins.append(trimmed)
    return origins or list(DEFAULT_CORS_ORIGINS)


def build_config(overrides: Optional[Dict[str, object]] = None) -> Dict[str, object]:
    """Collect the Flask settings from the environment.

    Values in ``overrides`` take precedence, which is how tests swap in a
    fixed secret or flip the environment to production.
    """
    config: Dict[str, object] = {
        "APP_ENV": os.getenv("APP_ENV", "development"),
        "MONGO_URI": os.getenv("MONGO_URI", "mongodb://localhost:27017/plantNetDB"),
        "JWT_SECRET_KEY": os.getenv("ACCESS_TOKEN_SECRET", "change-me-in-production"),
        "CORS_ORIGINS": parse_origins(os.getenv("CORS_ALLOWED_ORIGINS")),
        "RESEND_API_KEY": (os.getenv("RESEND_API_KEY") or "").strip(),
        "ORDER_SENDER_EMAIL": (
            os.getenv("ORDER_SENDER_EMAIL", "plantNet <orders@plantnet.store>")
            or "plantNet <orders@plantnet.store>"
        ),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
    }

    trusted_proxy_hops_raw = os.getenv("TRUSTED_PROXY_HOPS", "1")
    try:
        config["TRUSTED_PROXY_HOPS"] = max(0, int(trusted_proxy_hops_raw))
    except (TypeError, ValueError):
        config["TRUSTED_PROXY_HOPS"] = 1

    if overrides:
        config.update(overrides)

    # --- Session cookie ---
    production = is_production(config)
    config.setdefault("JWT_TOKEN_LOCATION", ["cookies"])
    config.setdefault("JWT_ACCESS_COOKIE_NAME", "token")
    config.setdefault("JWT_ACCESS_TOKEN_EXPIRES", TOKEN_VALIDITY)
    config.setdefault("JWT_COOKIE_SECURE", production)
    config.setdefault("JWT_COOKIE_SAMESITE", "None" if production else "Strict")
    config.setdefault("JWT_COOKIE_CSRF_PROTECT", False)

    return config
