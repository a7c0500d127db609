"""
columns.py — Column Endpoints (API Layer)

Routes (members of the board only):
    POST /boards/{board_id}/columns → append a column (position = next free slot)
    GET  /boards/{board_id}/columns → columns ordered by position
"""

from typing import List

from fastapi import APIRouter, Depends, status

from app.api.deps import board_member, get_hierarchy
from app.models.board import Board
from app.services.hierarchy import HierarchyStore
from app.services.types import ColumnCreate, ColumnOut

router = APIRouter(
    prefix="/boards/{board_id}/columns",
    tags=["columns"]
)


@router.post("", response_model=ColumnOut, status_code=status.HTTP_201_CREATED)
def create_column(
    payload: ColumnCreate,
    board: Board = Depends(board_member),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    return ColumnOut.model_validate(hierarchy.create_column(board.id, payload.name))


@router.get("", response_model=List[ColumnOut])
def list_columns(
    board: Board = Depends(board_member),
    hierarchy: HierarchyStore = Depends(get_hierarchy),
):
    return [ColumnOut.model_validate(column) for column in hierarchy.list_columns(board.id)]
