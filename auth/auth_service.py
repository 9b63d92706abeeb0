from __future__ import annotations

from typing import Any

import requests
from loguru import logger

from services.api_client import build_url
from services.app_config import get_app_config


def _pick_non_empty_str(*values: Any) -> str:
    for v in values:
        s = str(v or "").strip()
        if s:
            return s
    return ""


def extract_token(payload: Any, token_field: str) -> str:
    """Token may sit at the top level or under "data" depending on the backend version."""
    if not isinstance(payload, dict):
        return ""
    data = payload.get("data")
    data_dict = data if isinstance(data, dict) else {}
    return _pick_non_empty_str(
        payload.get(token_field),
        data_dict.get(token_field),
        payload.get("access_token"),
        data_dict.get("access_token"),
    )


def extract_display_name(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    data = payload.get("data")
    data_dict = data if isinstance(data, dict) else {}
    user = data_dict.get("user") if isinstance(data_dict.get("user"), dict) else payload.get("user")
    user_dict = user if isinstance(user, dict) else {}
    full_name = " ".join(
        part for part in (
            str(user_dict.get("first_name") or "").strip(),
            str(user_dict.get("last_name") or "").strip(),
        ) if part
    )
    return _pick_non_empty_str(full_name, user_dict.get("name"), user_dict.get("user_name"))


def authenticate_user(username: str, password: str) -> tuple[bool, str, str, str]:
    """
    Exchange credentials for a bearer token.

    Returns (ok, token, message, display_name).
    """
    cfg = get_app_config()
    auth_cfg = cfg.auth

    if not str(username or "").strip() or not password:
        return False, "", "Enter username and password.", ""

    url = build_url(cfg.api.base_url, auth_cfg.login_path)
    headers = dict(cfg.api.headers)
    headers["Accept"] = "application/json"
    payload = {
        auth_cfg.username_field: username,
        auth_cfg.password_field: password,
    }

    logger.info("REST auth start: url='{}' username='{}'", url, username)

    try:
        resp = requests.post(
            url,
            json=payload,
            headers=headers,
            timeout=cfg.api.timeout_s,
            verify=cfg.api.verify_ssl,
        )
    except requests.RequestException as ex:
        logger.warning("REST auth request failed: {}", ex)
        return False, "", f"Login request failed: {ex}", ""

    try:
        parsed_json = resp.json()
    except ValueError:
        parsed_json = None

    if not 200 <= int(resp.status_code) < 300:
        if isinstance(parsed_json, dict):
            detail = (
                str(parsed_json.get("message", "")).strip()
                or str(parsed_json.get("error", "")).strip()
                or f"HTTP {resp.status_code}"
            )
        else:
            detail = f"HTTP {resp.status_code}"
        logger.warning("REST auth rejected: username='{}' detail='{}'", username, detail)
        return False, "", f"Login rejected: {detail}", ""

    token = extract_token(parsed_json, auth_cfg.token_field)
    if not token:
        logger.warning("REST auth response without token: username='{}'", username)
        return False, "", "Login response did not contain a token.", ""

    logger.success("REST auth success: username='{}'", username)
    return True, token, "", extract_display_name(parsed_json)
