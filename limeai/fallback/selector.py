from __future__ import annotations

from collections.abc import Mapping

from .catalog import DEFAULT_KEY, FLOWCHART_CATALOG

MIN_TOKEN_LEN = 3
SHORT_INPUT_TOKENS = 2


def _short_match(concept: str, catalog: Mapping[str, str]) -> str | None:
    """Exact key, then substring either way against non-default keys."""
    if concept in catalog:
        return catalog[concept]
    for key, output in catalog.items():
        if key != DEFAULT_KEY and (concept in key or key in concept):
            return output
    return None


def score_entry(tokens: list[str], key: str) -> float:
    """
    Keyword overlap between input tokens and one catalog key.

    Each token of length >= 3 adds its length when the key contains it, plus
    half the shorter length for every key token it contains or is contained by.
    """
    key_tokens = key.split()
    score = 0.0
    for token in tokens:
        if len(token) < MIN_TOKEN_LEN:
            continue
        if token in key:
            score += len(token)
        for key_token in key_tokens:
            if key_token in token or token in key_token:
                score += min(len(token), len(key_token)) / 2
    return score


def select_fallback(text: str | None, catalog: Mapping[str, str] = FLOWCHART_CATALOG) -> str:
    """Pick the catalog output that best matches free-text input, or the default."""
    concept = (text or "").strip().lower()
    if not concept:
        return catalog[DEFAULT_KEY]

    tokens = concept.split()
    if len(tokens) <= SHORT_INPUT_TOKENS:
        hit = _short_match(concept, catalog)
        if hit is not None:
            return hit

    best: str | None = None
    best_score = 0.0
    for key, output in catalog.items():
        if key == DEFAULT_KEY:
            continue
        score = score_entry(tokens, key)
        # Strictly greater, so the first entry keeps a tie.
        if score > best_score:
            best_score = score
            best = output

    return best if best is not None else catalog[DEFAULT_KEY]
