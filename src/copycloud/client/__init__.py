"""Clients for part transfer, object updates and listings."""

from .api import CloudApi
from .listing import Paginator
from .objects import ObjectManager
from .parts import PartTransferClient
from .session import ApiSession

__all__ = ["CloudApi", "ApiSession", "PartTransferClient", "ObjectManager", "Paginator"]
