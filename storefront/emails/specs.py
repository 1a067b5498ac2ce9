"""
Caractéristiques d'un roulement pour l'email: "model|innerDiameter|outerDiameter".
Les cotes (alésage x diamètre extérieur) sont extraites du numéro de pièce,
ex: "6205-2RS 25x52x15", "UC205 25X52"; à défaut, "N/A".
"""
import re
from typing import Optional, Tuple

NOT_AVAILABLE = "N/A"

_DIMENSIONS = re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:mm)?\s*[xX×*]\s*(\d+(?:[.,]\d+)?)")


def extract_dimensions(part_number: Optional[str]) -> Tuple[str, str]:
    """Retourne (alésage, diamètre extérieur), ou (N/A, N/A) si le motif est absent."""
    match = _DIMENSIONS.search(part_number or "")
    if not match:
        return NOT_AVAILABLE, NOT_AVAILABLE
    inner, outer = (g.replace(",", ".") for g in match.groups())
    return f"{inner}mm", f"{outer}mm"


def part_model(part_number: Optional[str], fallback: str = "") -> str:
    text = (part_number or "").strip()
    if not text:
        return fallback or NOT_AVAILABLE
    match = _DIMENSIONS.search(text)
    model = text[: match.start()].strip(" -_/") if match else text
    return model or text


def part_specs(part_number: Optional[str], fallback_model: str = "") -> str:
    inner, outer = extract_dimensions(part_number)
    return f"{part_model(part_number, fallback_model)}|{inner}|{outer}"


def split_specs(specs: str) -> Tuple[str, str, str]:
    parts = [p.strip() for p in (specs or "").split("|")]
    parts += [NOT_AVAILABLE] * (3 - len(parts))
    return parts[0] or NOT_AVAILABLE, parts[1] or NOT_AVAILABLE, parts[2] or NOT_AVAILABLE
