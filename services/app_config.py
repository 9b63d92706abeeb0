from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, asdict
from typing import Any

from loguru import logger

# If you set APP_CONFIG_PATH, it overrides the default location (useful for production/testing).
DEFAULT_CONFIG_PATH = "config/app_config.json"
ENV_CONFIG_PATH = "APP_CONFIG_PATH"
ENV_API_BASE_URL = "API_BASE_URL"


def get_config_path() -> str:
    return os.environ.get(ENV_CONFIG_PATH) or DEFAULT_CONFIG_PATH


# ------------------------------------------------------------------ Config models

@dataclass
class ApiConfig:
    base_url: str = "https://api.seregelagebeya.com"
    timeout_s: float = 10.0
    verify_ssl: bool = True
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class AuthConfig:
    login_required: bool = True
    login_path: str = "/api/v1/login"
    username_field: str = "phone_number"
    password_field: str = "password"
    token_field: str = "token"
    # same key the browser dashboard used in localStorage
    token_storage_key: str = "authToken"


@dataclass
class ListConfig:
    debounce_ms: int = 500
    page_sizes: list[int] = field(default_factory=lambda: [5, 10, 20, 50, 100])
    default_page_size: int = 10


@dataclass
class ErrorPolicyConfig:
    redirect_on_server_error: bool = True
    redirect_on_transport_error: bool = True


@dataclass
class NavigationConfig:
    visible_routes: list[str] = field(
        default_factory=lambda: ["loans", "loan_users", "products", "users"]
    )
    main_route: str = "loans"
    dark_mode: bool = False


@dataclass
class UiConfig:
    navigation: NavigationConfig = field(default_factory=NavigationConfig)


@dataclass
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    lists: ListConfig = field(default_factory=ListConfig)
    errors: ErrorPolicyConfig = field(default_factory=ErrorPolicyConfig)
    ui: UiConfig = field(default_factory=UiConfig)


_APP_CONFIG: AppConfig | None = None


def clear_app_config_cache() -> None:
    global _APP_CONFIG
    _APP_CONFIG = None


def get_app_config() -> AppConfig:
    global _APP_CONFIG
    if _APP_CONFIG is None:
        _APP_CONFIG = load_app_config()
    return _APP_CONFIG


def load_app_config(path: str | None = None) -> AppConfig:
    config_path = path or get_config_path()
    log = logger.bind(component="AppConfig", path=config_path)

    if not os.path.exists(config_path):
        log.warning("Config not found. Writing defaults.")
        cfg = AppConfig()
        save_app_config(cfg, config_path)
    else:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        cfg = _from_dict(raw if isinstance(raw, dict) else {})

    base_url_override = os.environ.get(ENV_API_BASE_URL)
    if base_url_override:
        log.info(f"[load_app_config] - api_base_url_override - base_url={base_url_override}")
        cfg.api.base_url = base_url_override
    return cfg


def save_app_config(cfg: AppConfig, path: str | None = None) -> None:
    global _APP_CONFIG
    config_path = path or get_config_path()
    config_dir = os.path.dirname(config_path)
    if config_dir:
        os.makedirs(config_dir, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(_to_dict(cfg), f, indent=2, sort_keys=True)

    # Keep cache in sync
    _APP_CONFIG = cfg


def _to_dict(cfg: AppConfig) -> dict[str, Any]:
    return asdict(cfg)


# ------------------------------------------------------------------ Parsing

def _from_dict(data: dict[str, Any]) -> AppConfig:
    api = ApiConfig(**data.get("api", {}))
    api.headers = {str(k): str(v) for k, v in (api.headers or {}).items()}

    auth = AuthConfig(**data.get("auth", {}))

    list_raw = data.get("lists", {})
    list_cfg = ListConfig(
        debounce_ms=int(list_raw.get("debounce_ms", ListConfig().debounce_ms)),
        page_sizes=[int(n) for n in list_raw.get("page_sizes", ListConfig().page_sizes)],
        default_page_size=int(list_raw.get("default_page_size", ListConfig().default_page_size)),
    )
    if not list_cfg.page_sizes:
        list_cfg.page_sizes = ListConfig().page_sizes
    if list_cfg.default_page_size not in list_cfg.page_sizes:
        logger.warning(
            f"[_from_dict] - default_page_size_not_allowed - default_page_size={list_cfg.default_page_size} "
            f"page_sizes={list_cfg.page_sizes}"
        )
        list_cfg.default_page_size = list_cfg.page_sizes[0] if list_cfg.page_sizes else 10

    errors = ErrorPolicyConfig(**data.get("errors", {}))

    nav_data = data.get("ui", {}).get("navigation", {})
    navigation = NavigationConfig(
        visible_routes=nav_data.get("visible_routes", NavigationConfig().visible_routes),
        main_route=nav_data.get("main_route", NavigationConfig().main_route),
        dark_mode=bool(nav_data.get("dark_mode", False)),
    )

    return AppConfig(api=api, auth=auth, lists=list_cfg, errors=errors, ui=UiConfig(navigation=navigation))
