from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.exceptions import RequestValidationError

from ..auth import get_owner_id
from ..repositories import Repositories, TodoRepository, get_repositories
from ..schemas import TodoCreate, TodoList, TodoOut, TodoToggle, TodoUpdate
from ..utils import completion_counts

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)


def _get_repo(repos: Repositories = Depends(get_repositories)) -> TodoRepository:
    """
    Dependency wrapper for the todo repository to keep signatures clean.
    """
    return repos.todos


def _check_folder(repos: Repositories, owner_id: str, folder_id: Optional[str]) -> None:
    """
    Reject a folder_id that is not one of the owner's folders, using the same
    422 envelope as schema validation.
    """
    if folder_id is None or repos.folders.owns(owner_id, folder_id):
        return
    raise RequestValidationError(
        [
            {
                "type": "value_error",
                "loc": ("body", "folder_id"),
                "msg": "Value error, folder_id does not name one of your folders",
                "input": folder_id,
            }
        ]
    )


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TodoList,
    summary="List Todos",
    description=(
        "List the current owner's todos. Records kept in the local fallback cache come "
        "first, followed by remote records newest first. When the remote store is "
        "unreachable only the cached records are returned."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        503: {"description": "Neither the remote store nor the local cache is available"},
    },
)
def list_todos(owner_id: str = Depends(get_owner_id), repo: TodoRepository = Depends(_get_repo)) -> TodoList:
    """
    List todos with pending/completed counters.
    """
    items = repo.list(owner_id)
    counts = completion_counts(items)
    return TodoList(items=[TodoOut(**it) for it in items], **counts)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new, uncompleted Todo item and return it. Falls back to the local cache when the remote insert fails.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_todo(
    payload: TodoCreate,
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> TodoOut:
    """
    Create a new Todo. A folder_id must name one of the owner's folders.
    """
    _check_folder(repos, owner_id, payload.folder_id)
    created = repos.todos.create(owner_id, payload.model_dump())
    return TodoOut(**created)


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Replace Todo",
    description=(
        "Replace the editable fields of a Todo item. Omitted optional fields are cleared; "
        "the completion flag is left as is."
    ),
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
        422: {"description": "Validation error or unknown folder_id"},
    },
)
def put_todo(
    todo_id: str,
    payload: TodoCreate,
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> TodoOut:
    """
    Full update (replace) semantics implemented via the partial update by
    sending every TodoCreate field.
    """
    _check_folder(repos, owner_id, payload.folder_id)
    updated = repos.todos.update(owner_id, todo_id, payload.model_dump())
    return TodoOut(**updated)


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description="Partially update fields of a Todo item. Explicit nulls clear description, due_date or folder_id.",
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
        422: {"description": "Validation error or unknown folder_id"},
    },
)
def patch_todo(
    todo_id: str,
    payload: TodoUpdate,
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> TodoOut:
    """
    Partial update of a Todo item.
    """
    changes = payload.changes()
    _check_folder(repos, owner_id, changes.get("folder_id"))
    updated = repos.todos.update(owner_id, todo_id, changes)
    return TodoOut(**updated)


# PUBLIC_INTERFACE
@router.post(
    "/{todo_id}/toggle",
    response_model=TodoOut,
    summary="Toggle Todo",
    description="Set the completion flag of a Todo item. Setting the same value twice is harmless.",
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
    },
)
def toggle_todo(
    todo_id: str,
    payload: TodoToggle,
    owner_id: str = Depends(get_owner_id),
    repo: TodoRepository = Depends(_get_repo),
) -> TodoOut:
    updated = repo.toggle(owner_id, todo_id, payload.completed)
    return TodoOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    description="Delete one of the caller's Todo items by ID. Any other id is a no-op.",
    responses={
        204: {"description": "Todo deleted (or already absent)"},
    },
)
def delete_todo(
    todo_id: str,
    owner_id: str = Depends(get_owner_id),
    repo: TodoRepository = Depends(_get_repo),
) -> None:
    """
    Delete a Todo. Always returns 204.
    """
    repo.delete(owner_id, todo_id)
    return None
