"""
boards.py — Board Endpoints (API Layer)

Routes:
    POST   /boards                     → create board (caller becomes owner + member)
    GET    /boards                     → boards the caller is a member of
    POST   /boards/{board_id}/members  → add a member (owner only)
    DELETE /boards/{board_id}          → delete board, its columns and tasks (owner only)
    POST   /boards/{board_id}/tasks    → create task (members only)
    GET    /boards/{board_id}/tasks    → list tasks (members only)

Board-scoped routes take the board from the `board_member` / `board_owner`
dependencies, which run the Membership Guard before the request body is
validated.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from app.api.deps import board_member, board_owner, get_current_user, get_hierarchy
from app.models.board import Board
from app.models.user import User
from app.services.hierarchy import HierarchyStore
from app.services.types import BoardCreate, BoardOut, MemberAdd, TaskCreate, TaskOut

router = APIRouter(
    prefix="/boards",
    tags=["boards"]
)


@router.post("", response_model=BoardOut, status_code=status.HTTP_201_CREATED)
def create_board(
    payload: BoardCreate,
    user: User = Depends(get_current_user),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    board = hierarchy.create_board(user.id, payload=payload)
    return BoardOut.from_model(board)


@router.get("", response_model=List[BoardOut])
def list_boards(
    user: User = Depends(get_current_user),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    return [BoardOut.from_model(board) for board in hierarchy.list_boards_for_user(user.id)]


@router.post("/{board_id}/members", response_model=BoardOut)
def add_member(
    payload: MemberAdd,
    board: Board = Depends(board_owner),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    return BoardOut.from_model(hierarchy.add_member(board.id, payload))


@router.delete("/{board_id}")
def delete_board(
    board: Board = Depends(board_owner),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    hierarchy.delete_board(board.id)
    return {"message": "Board deleted"}


@router.post("/{board_id}/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    board: Board = Depends(board_member),
    user: User = Depends(get_current_user),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    return TaskOut.from_model(hierarchy.create_task(board.id, user.id, payload))


@router.get("/{board_id}/tasks", response_model=List[TaskOut])
def list_tasks(
    board: Board = Depends(board_member),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    return [TaskOut.from_model(task) for task in hierarchy.list_tasks(board.id)]
