"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from music_conductor.application.interfaces.authorization_server import AuthorizationServer
from music_conductor.application.interfaces.catalog_client import CatalogClient

__all__ = [
    "AuthorizationServer",
    "CatalogClient",
]
