"""Sidebar API client - procedure categories."""

from loguru import logger

from gallery_client.base import BaseClient, GalleryAPIError
from gallery_client.schemas import SidebarResponse


class SidebarClient(BaseClient):
    """Client for the combined sidebar endpoint."""

    async def sidebar(self, api_tokens: list[str]) -> SidebarResponse:
        """POST /api/plugin/combine/sidebar - categories with their procedures."""
        tokens = [t for t in api_tokens if t]
        if not tokens:
            raise GalleryAPIError("No API tokens configured")

        data = await self._post("api/plugin/combine/sidebar", {"apiTokens": tokens})
        response = SidebarResponse.model_validate(data)
        if not response.success:
            raise GalleryAPIError("API returned unsuccessful response")

        logger.info("Sidebar: {} categories", len(response.data))
        return response
