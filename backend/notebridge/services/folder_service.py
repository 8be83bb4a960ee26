"""
NoteBridge Backend - Folder Service
=====================================

What:  Fetches the folder list for a user from the remote notes service.
Who:   Called by the notes page route and, after every successful note
       write, by NoteService to refresh the folder list.

Failure policy:
    Settings.on_folder_fetch_error selects what a failed fetch means.
    - "empty_list": log and return [] (the page renders with no folders)
    - "propagate":  re-raise UpstreamServiceError (502 to the caller)
    The post-mutation refresh always uses "empty_list".
"""

import logging
from typing import Any, List, Literal, Optional

from notebridge.exceptions import UpstreamServiceError
from notebridge.services.notes_api import NotesAPIClient

logger = logging.getLogger(__name__)

FolderFetchErrorPolicy = Literal["empty_list", "propagate"]


class FolderService:
    """Folder listing on top of a NotesAPIClient."""

    def __init__(self, api: NotesAPIClient, on_error: FolderFetchErrorPolicy = "empty_list"):
        self.api = api
        self.on_error = on_error

    async def list_folders(
        self,
        user_uuid: Optional[str],
        on_error: Optional[FolderFetchErrorPolicy] = None,
    ) -> List[Any]:
        """
        Return the user's folders, or [] when the fetch fails under "empty_list".

        Args:
            user_uuid: Authenticated user identifier, sent as ?user_uuid=
            on_error:  Per-call override of the configured failure policy

        Raises:
            UpstreamServiceError: only when the effective policy is "propagate"
        """
        policy = on_error or self.on_error
        try:
            folders = await self.api.list_folders(user_uuid)
        except UpstreamServiceError as e:
            if policy == "propagate":
                raise
            logger.warning(
                "Folder fetch failed for user %s, rendering empty list | Context: %s",
                user_uuid,
                e.context,
            )
            return []

        if not isinstance(folders, list):
            logger.warning("Folder fetch returned %s, expected a list", type(folders).__name__)
            if policy == "propagate":
                raise UpstreamServiceError(
                    message="The notes service returned an unexpected folder payload",
                    context={"type": type(folders).__name__},
                )
            return []

        return folders

    async def refresh_folders(self, user_uuid: Optional[str]) -> List[Any]:
        """Post-write refresh. Never raises for upstream failures."""
        return await self.list_folders(user_uuid, on_error="empty_list")
