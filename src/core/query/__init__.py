"""Capa de consultas/caché.

Por qué:
- Deduplica lecturas concurrentes y sirve datos obsoletos-pero-válidos.
- Sincroniza la caché tras mutaciones mediante invalidación por prefijo.
"""

from core.query.cache import CacheEntry, QueryCache, Subscription
from core.query.keys import QueryKey, canonical_key
from core.query.mutations import Mutation

__all__ = [
    "CacheEntry",
    "Mutation",
    "QueryCache",
    "QueryKey",
    "Subscription",
    "canonical_key",
]
