from __future__ import annotations

from typing import Any

from supabase import create_client

from docintel.config import Settings, settings as default_settings


def get_supabase_client(cfg: Settings | None = None) -> tuple[Any | None, str | None]:
    cfg = cfg or default_settings
    if not cfg.supabase_url or not cfg.supabase_key_present():
        return None, "SUPABASE_URL or SUPABASE_KEY missing"

    if not cfg.supabase_url_valid():
        return None, "SUPABASE_URL invalid (must look like https://<project-ref>.supabase.co)"

    try:
        return create_client(cfg.supabase_url, cfg.supabase_key), None
    except Exception as exc:  # pragma: no cover
        return None, f"Supabase init failed: {exc}"
