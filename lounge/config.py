from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import streamlit as st
from dotenv import load_dotenv

from lounge.errors import ConfigurationError


DEFAULT_SESSION_TTL_MINUTES = 8 * 60


# ---------------------- DATA CLASSES ----------------------

@dataclass
class SupabaseConfig:
    url: str
    key: str  # anon key; row-level security on the tables decides what it can do


@dataclass
class AdminConfig:
    password: Optional[str]
    session_ttl_minutes: int = DEFAULT_SESSION_TTL_MINUTES


@dataclass
class AppConfig:
    supabase: SupabaseConfig
    admin: AdminConfig
    log_level: str = "INFO"


# ---------------------- LOADING ----------------------

def _read_secrets() -> Mapping[str, Any]:
    try:
        return st.secrets.to_dict()
    except FileNotFoundError:
        # No secrets.toml; environment variables only
        return {}


def _section(secrets: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    val = secrets.get(name)
    return val if isinstance(val, Mapping) else {}


def load_config(
    secrets: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    if environ is None:
        load_dotenv()
        environ = os.environ
    if secrets is None:
        secrets = _read_secrets()

    # --- Supabase ---
    # Checks the [supabase] section first, then falls back to the environment
    supabase_secrets = _section(secrets, "supabase")
    url = supabase_secrets.get("url") or environ.get("SUPABASE_URL")
    key = (
        supabase_secrets.get("key")
        or supabase_secrets.get("anon_key")
        or environ.get("SUPABASE_ANON_KEY")
        or environ.get("SUPABASE_KEY")
    )
    if not url or not key:
        raise ConfigurationError(
            "Missing Supabase configuration: set [supabase] url and key in secrets.toml "
            "or SUPABASE_URL and SUPABASE_ANON_KEY in the environment."
        )

    # --- Admin ---
    # A missing password only disables the admin login
    admin_secrets = _section(secrets, "admin")
    password = admin_secrets.get("password") or environ.get("ADMIN_PASSWORD") or None
    ttl = admin_secrets.get("session_ttl_minutes") or environ.get("ADMIN_SESSION_TTL_MINUTES")
    try:
        ttl_minutes = int(ttl) if ttl else DEFAULT_SESSION_TTL_MINUTES
    except ValueError:
        raise ConfigurationError(f"Invalid admin session TTL: {ttl!r}")

    log_level = str(secrets.get("log_level") or environ.get("LOG_LEVEL") or "INFO").upper()

    return AppConfig(
        supabase=SupabaseConfig(url=url, key=key),
        admin=AdminConfig(password=password, session_ttl_minutes=ttl_minutes),
        log_level=log_level,
    )
