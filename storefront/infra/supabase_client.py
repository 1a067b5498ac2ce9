"""
Clients Supabase de la boutique.
- anon: lecture de l'utilisateur depuis son jeton d'accès (auth)
- service-role: paniers durables, commandes, statuts et notifications in-app
- utilisateur: écriture de la commande au nom de l'acheteur, RLS actif
"""
from typing import Optional

from supabase import Client, create_client

from storefront.config import SUPABASE_ANON, SUPABASE_SERVICE_KEY, SUPABASE_URL

_anon_client: Optional[Client] = None
_service_client: Optional[Client] = None


def get_supabase() -> Client:
    """Client anon partagé; utilisé par auth.repository pour valider les jetons."""
    global _anon_client
    if _anon_client is None:
        if not SUPABASE_URL or not SUPABASE_ANON:
            raise RuntimeError("SUPABASE_URL/SUPABASE_ANON_KEY manquants (auth indisponible)")
        _anon_client = create_client(SUPABASE_URL, SUPABASE_ANON)
    return _anon_client


def get_service_supabase() -> Client:
    """
    Client service-role partagé (contourne la RLS).
    Les repositories cart/orders l'appellent dans leur try: une clé absente devient une valeur neutre.
    """
    global _service_client
    if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_KEY manquant: paniers et commandes indisponibles")
    if _service_client is None:
        _service_client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_client


def get_user_supabase(user_token: str) -> Client:
    """
    Client anon authentifié par le jeton de l'acheteur, créé à chaque appel.
    orders.repository.insert_order l'utilise quand la requête porte un jeton.
    """
    if not user_token:
        raise ValueError("user_token is required")
    client = create_client(SUPABASE_URL, SUPABASE_ANON)
    client.postgrest.auth(user_token)
    return client
