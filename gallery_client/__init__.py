"""Gallery API client package."""

from gallery_client.base import BaseClient, GalleryAPIError
from gallery_client.schemas import SidebarCategory, SidebarProcedure, SidebarResponse
from gallery_client.sidebar import SidebarClient

__all__ = [
    # Base
    "BaseClient",
    "GalleryAPIError",
    # Schemas
    "SidebarCategory",
    "SidebarProcedure",
    "SidebarResponse",
    # Clients
    "SidebarClient",
]
