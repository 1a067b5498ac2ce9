# storefront.config
from pathlib import Path
from decimal import Decimal
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

TEMPLATES_DIR = Path(__file__).resolve().parent / "emails" / "templates"

"""
Configuration centrale du backend de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, API email)
- Expose les constantes du checkout (devise, livraison forfaitaire, taxe)
- Sélectionne le registre d'idempotence (session navigateur ou Redis)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _csv_env(name: str, default: str) -> list:
    return [x.strip() for x in os.getenv(name, default).split(",") if x.strip()]

# Supabase: URL et clés (anon/service)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Cookies / sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = _clean_env(os.getenv("SESSION_SECRET_KEY") or "replace_me_with_a_long_random_secret")
ADMIN_EMAILS = _csv_env("ADMIN_EMAILS", "")

# CORS (dev)
CORS_ORIGINS = _csv_env("CORS_ORIGINS", "*")
ALLOWED_HOSTS = _csv_env("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

# Stripe: clés publiques/privées
STRIPE_PUBLIC_KEY = _clean_env(os.getenv("STRIPE_PUBLIC_KEY") or os.getenv("NEXT_PUBLIC_STRIPE_PUBLISHABLE_KEY") or "")
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")

# Checkout: montants en centimes (unités mineures)
CHECKOUT_CURRENCY = _clean_env(os.getenv("CHECKOUT_CURRENCY") or "cad").lower()
SHIPPING_FLAT_CENTS = int(os.getenv("SHIPPING_FLAT_CENTS", "1500"))
TAX_RATE = Decimal(_clean_env(os.getenv("TAX_RATE") or "0.13"))

# Email transactionnel (API HTTP du relais SMTP)
EMAIL_API_URL = _clean_env(os.getenv("EMAIL_API_URL") or "https://api.brevo.com/v3/smtp/email")
EMAIL_API_KEY = _clean_env(os.getenv("EMAIL_API_KEY") or "")
MAIL_FROM = _clean_env(os.getenv("MAIL_FROM") or "onlinesales@example.com")
STORE_NAME = _clean_env(os.getenv("STORE_NAME") or "Bearings Online Store")
EMAIL_TIMEOUT_SECONDS = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

# Registre d'idempotence de la finalisation: "session" (par navigateur) ou "redis" (durable)
IDEMPOTENCY_BACKEND = _clean_env(os.getenv("IDEMPOTENCY_BACKEND") or "session").lower()
IDEMPOTENCY_REDIS_URL = _clean_env(os.getenv("IDEMPOTENCY_REDIS_URL") or os.getenv("RATE_LIMIT_REDIS_URL") or "redis://127.0.0.1:6379/1")
IDEMPOTENCY_TTL_SECONDS = int(os.getenv("IDEMPOTENCY_TTL_SECONDS", str(7 * 24 * 3600)))
# Jetons conservés par ensemble en session (cookie signé limité à ~4 Ko)
IDEMPOTENCY_SESSION_MAX_TOKENS = int(os.getenv("IDEMPOTENCY_SESSION_MAX_TOKENS", "20"))

BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000")
