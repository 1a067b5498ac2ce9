from typing import Optional, Dict, Any
from storefront.config import ADMIN_EMAILS
from .repository import get_user_from_access_token as _repo_get_user_from_token

def determine_role(email: Optional[str], metadata: Dict[str, Any] | None) -> str:
    """Rôle applicatif: 'admin' via user_metadata.role ou ADMIN_EMAILS, sinon 'user'."""
    role_lower = str((metadata or {}).get("role", "")).lower()
    if role_lower == "admin":
        return "admin"
    if email and email.lower() in {e.lower() for e in ADMIN_EMAILS}:
        return "admin"
    return "user"

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise user issu de supabase.auth.get_user(access_token):
    - Retourne {id, email, name, metadata, role, token}
    - name: full_name des métadonnées, à défaut la partie locale de l'email (utilisé dans l'email de confirmation)
    """
    raw = _repo_get_user_from_token(access_token)
    email = raw.get("email")
    metadata = raw.get("user_metadata") or {}
    name = metadata.get("full_name") or metadata.get("name") or (email or "").split("@")[0]
    return {
        "id": raw.get("id"),
        "email": email,
        "name": name,
        "metadata": metadata,
        "role": determine_role(email, metadata),
        "token": access_token,
    }
