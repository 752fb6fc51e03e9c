# backend.config
from pathlib import Path
import os
from typing import List
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe), CORS/hosts
- Calcule l'URL publique utilisée pour les redirections Stripe
- require_settings(): vérification explicite au démarrage (lifespan)
"""


class ConfigError(RuntimeError):
    """Configuration obligatoire absente: le process ne doit pas servir de requêtes."""


def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


def _split_env(v: str) -> List[str]:
    return [x.strip() for x in (v or "").split(",") if x.strip()]


# Supabase (catalogue, clients, commandes)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
# Clé service-role: seule clé autorisée à écrire (clients, commandes, stock)
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Stripe: clé secrète et secret de signature webhook (obligatoires)
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_CURRENCY = (_clean_env(os.getenv("STRIPE_CURRENCY") or "") or "eur").lower()

# Pays autorisés pour la livraison (ISO 3166-1 alpha-2)
DEFAULT_SHIPPING_COUNTRIES = [
    "GB", "US", "CA", "AU", "NZ", "IE", "DE", "FR", "ES", "IT",
    "NL", "BE", "AT", "CH", "SE", "NO", "DK", "FI", "PT", "PL",
    "CZ", "GR", "HU", "RO", "BG", "HR", "SI", "SK", "LT", "LV",
    "EE", "LU", "MT", "CY", "JP", "SG", "HK", "KR", "TW", "MY",
    "TH", "IN", "AE", "SA", "IL", "ZA", "BR", "MX", "AR", "CL",
    "CO",
]
SHIPPING_COUNTRIES = [c.upper() for c in _split_env(os.getenv("SHIPPING_COUNTRIES", ""))] or DEFAULT_SHIPPING_COUNTRIES

# Chemins des pages de retour Stripe (relatifs à l'URL publique)
CHECKOUT_SUCCESS_PATH = os.getenv("CHECKOUT_SUCCESS_PATH", "/checkout/success")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/checkout")

# Pages du front servies sous la même URL publique (retours Stripe, historique):
# redirection vers l'accueil sans session. Les routes /api/* ne sont jamais concernées.
ORDERS_PAGE_PATH = "/orders"
PROTECTED_PATHS = list(dict.fromkeys([CHECKOUT_CANCEL_PATH, CHECKOUT_SUCCESS_PATH, ORDERS_PAGE_PATH]))

# Cookies / CORS / hôtes
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = _split_env(os.getenv("CORS_ORIGINS", "*"))
ALLOWED_HOSTS = _split_env(os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver"))

LOCAL_BASE_URL = "http://localhost:8000"


def get_base_url() -> str:
    """
    URL publique de la boutique, utilisée pour success_url/cancel_url.
    Priorité: BASE_URL explicite > URL fournie par la plateforme (Render) > localhost.
    """
    explicit = _clean_env(os.getenv("BASE_URL") or "")
    if explicit:
        return explicit.rstrip("/")
    platform = _clean_env(os.getenv("RENDER_EXTERNAL_URL") or "")
    if platform:
        if not platform.startswith("http"):
            platform = "https://" + platform
        return platform.rstrip("/")
    return LOCAL_BASE_URL


def missing_settings() -> List[str]:
    missing = []
    if not STRIPE_SECRET_KEY:
        missing.append("STRIPE_SECRET_KEY")
    if not STRIPE_WEBHOOK_SECRET:
        missing.append("STRIPE_WEBHOOK_SECRET")
    return missing


def require_settings() -> None:
    """
    Vérifie la configuration obligatoire (appelée au démarrage par le lifespan).
    - La clé d'écriture Supabase n'est PAS vérifiée ici: elle est contrôlée à chaque écriture.
    """
    missing = missing_settings()
    if missing:
        raise ConfigError(f"Configuration manquante: {', '.join(missing)}")
