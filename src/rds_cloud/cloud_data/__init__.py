"""
Cloud data retrieval module for the Siemens RDS cloud.

Provides the generic authenticated GET and the plant list decoder.
"""
from .http_fetch import fetch, http_generic_get
from .plants import PlantInfo, PlantList

__all__: list[str] = [
    "PlantInfo",
    "PlantList",
    "fetch",
    "http_generic_get",
]
