from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..auth import get_owner_id
from ..models import PRESET_COLORS
from ..repositories import Repositories, get_repositories
from ..schemas import FolderCreate, FolderOut, FolderUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/folders",
    tags=["folders"],
)


# PUBLIC_INTERFACE
@router.get("/", response_model=List[FolderOut], summary="List Folders")
def list_folders(
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> List[FolderOut]:
    """
    List the current owner's folders, locally cached ones first.
    """
    return [FolderOut(**f) for f in repos.folders.list(owner_id)]


# PUBLIC_INTERFACE
@router.get("/colors", response_model=List[str], summary="Preset Folder Colors")
def folder_colors() -> List[str]:
    """
    Palette offered when creating a folder; any other hex color is accepted too.
    """
    return list(PRESET_COLORS)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=FolderOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Folder",
    responses={201: {"description": "Folder created successfully"}},
)
def create_folder(
    payload: FolderCreate,
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> FolderOut:
    return FolderOut(**repos.folders.create(owner_id, payload.model_dump()))


# PUBLIC_INTERFACE
@router.patch(
    "/{folder_id}",
    response_model=FolderOut,
    summary="Update Folder",
    responses={
        200: {"description": "Folder updated"},
        404: {"description": "Folder not found"},
    },
)
def patch_folder(
    folder_id: str,
    payload: FolderUpdate,
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> FolderOut:
    return FolderOut(**repos.folders.update(owner_id, folder_id, payload.changes()))


# PUBLIC_INTERFACE
@router.delete(
    "/{folder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Folder",
    description=(
        "Delete one of the caller's Folders. Todos in it are kept and moved to 'no category'; "
        "the number of todos updated is reported in the X-Detached-Todos header. "
        "Any other id is a no-op."
    ),
    responses={204: {"description": "Folder deleted (or already absent)"}},
)
def delete_folder(
    folder_id: str,
    response: Response,
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> None:
    """
    Delete a folder after clearing folder_id on the owner's todos that reference it.
    """
    detached = 0
    if repos.folders.owns(owner_id, folder_id):
        detached = repos.todos.detach_folder(owner_id, folder_id)
        repos.folders.delete(owner_id, folder_id)
        logger.info("Deleted folder id=%s detached_todos=%s", folder_id, detached)
    response.headers["X-Detached-Todos"] = str(detached)
    return None
