# backend/modules/menu/routes/menu_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from core.auth import AuthenticatedAdmin
from core.deps import get_console_state, get_current_admin
from core.exceptions import NotFoundError
from core.state import (
    AdminConsoleState,
    MenuItemAdded,
    MenuItemRemoved,
    MenuItemUpdated,
    MenuLoaded,
)

from ..schemas.menu_schemas import MenuCategory, MenuItem, MenuItemCreate, MenuItemUpdate
from ..services.menu_service import MenuService

router = APIRouter(prefix="/menu", tags=["Menu Management"])


def get_menu_service(request: Request) -> MenuService:
    """Dependency to get menu service instance"""
    return request.app.state.menu_service


@router.get("/items", response_model=List[MenuItem])
async def get_menu_items(
    category: Optional[MenuCategory] = Query(None, description="Filter by category"),
    is_veg: Optional[bool] = Query(None, description="Filter by vegetarian flag"),
    menu_service: MenuService = Depends(get_menu_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """Get menu items with optional filtering"""
    if category is not None or is_veg is not None:
        return await menu_service.get_menu_items(category, is_veg)

    items = await state.track("menu", menu_service.get_menu_items())
    state.dispatch(MenuLoaded(items))
    return items


@router.post("/items", response_model=MenuItem, status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    item_data: MenuItemCreate,
    menu_service: MenuService = Depends(get_menu_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """Create a new menu item"""
    item = await state.track("menu", menu_service.create_menu_item(item_data), adding=True)
    state.dispatch(MenuItemAdded(item))
    return item


@router.get("/items/{item_id}", response_model=MenuItem)
async def get_menu_item_by_id(
    item_id: str,
    menu_service: MenuService = Depends(get_menu_service),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """Get a menu item by ID"""
    item = await menu_service.get_menu_item_by_id(item_id)
    if not item:
        raise NotFoundError("Menu item not found")
    return item


@router.patch("/items/{item_id}", response_model=MenuItem)
async def update_menu_item(
    item_id: str,
    item_data: MenuItemUpdate,
    menu_service: MenuService = Depends(get_menu_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """Update a menu item"""
    item = await state.track("menu", menu_service.update_menu_item(item_id, item_data))
    state.dispatch(
        MenuItemUpdated(item_id, item_data.model_dump(by_alias=True, exclude_unset=True, mode="json"))
    )
    return item


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(
    item_id: str,
    menu_service: MenuService = Depends(get_menu_service),
    state: AdminConsoleState = Depends(get_console_state),
    admin: AuthenticatedAdmin = Depends(get_current_admin),
):
    """Delete a menu item"""
    await state.track("menu", menu_service.delete_menu_item(item_id))
    state.dispatch(MenuItemRemoved(item_id))
