"""Menu endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.core.security import SessionContext, require_staff
from app.db.session import get_db
from app.models.menu import MenuItem
from app.schemas.menu import MenuItemCreate, MenuItemRead, MenuItemUpdate
from app.services.errors import MenuItemNotFoundError, PersistenceError, ValidationError
from app.services.menu_service import create_menu_item, delete_menu_item, list_menu, update_menu_item

router: APIRouter = APIRouter()


def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"code": exc.code, "message": str(exc)})
    if isinstance(exc, MenuItemNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu item not found")
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("", response_model=list[MenuItemRead])
def get_menu(
    available_only: bool = Query(default=True),
    db: Session = Depends(get_db),
) -> list[MenuItem]:
    """Return menu items ordered by name."""
    return list_menu(db=db, available_only=available_only)


@router.post("", response_model=MenuItemRead, status_code=status.HTTP_201_CREATED)
def add_menu_item(
    payload: MenuItemCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
) -> MenuItem:
    """Create a menu item."""
    try:
        return create_menu_item(db=db, **payload.model_dump())
    except (ValidationError, PersistenceError) as exc:
        raise _to_http(exc) from exc


@router.patch("/{item_id}", response_model=MenuItemRead)
def edit_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
) -> MenuItem:
    """Update fields of a menu item, including availability."""
    try:
        return update_menu_item(db, item_id, **payload.model_dump(exclude_unset=True))
    except (ValidationError, PersistenceError) as exc:
        raise _to_http(exc) from exc


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_menu_item(
    item_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
) -> Response:
    """Delete a menu item permanently."""
    try:
        delete_menu_item(db, item_id)
    except PersistenceError as exc:
        raise _to_http(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
