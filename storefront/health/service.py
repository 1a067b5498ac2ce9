"""
Diagnostics des dépendances externes (Supabase, Stripe, email, rate limit).
Ne lève jamais: chaque vérification retourne son propre état.
"""
from typing import Any, Dict
from urllib.parse import urlparse
import socket

import storefront.infra.supabase_client as supabase_client
from storefront import config

HEALTH_TABLES = ["orders", "user_settings", "users"]

def _check_table(client, name: str) -> Dict[str, Any]:
    try:
        res = client.table(name).select("*").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info() -> Dict[str, Any]:
    effective_url = config.SUPABASE_URL
    parsed = urlparse(effective_url) if effective_url else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except Exception as e:
            dns_ok = False
            dns_error = str(e)

    info: Dict[str, Any] = {
        "supabase_url": effective_url,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = supabase_client.get_supabase()
        for t in HEALTH_TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info

def health_payments_info() -> Dict[str, Any]:
    """Configuration Stripe et relais email (présence des clés, jamais leur valeur)."""
    return {
        "stripe_configured": bool(config.STRIPE_SECRET_KEY),
        "stripe_publishable_key": bool(config.STRIPE_PUBLIC_KEY),
        "currency": config.CHECKOUT_CURRENCY,
        "email_configured": bool(config.EMAIL_API_KEY),
        "idempotency_backend": config.IDEMPOTENCY_BACKEND,
    }
