# backend/modules/menu/services/menu_service.py

import logging
from typing import Any, Dict, List, Optional

from core.config import Settings, settings as default_settings
from core.exceptions import NotFoundError, ValidationError
from core.stores import DocumentStore

from ..schemas.menu_schemas import MenuCategory, MenuItem, MenuItemCreate, MenuItemUpdate

logger = logging.getLogger(__name__)


class MenuService:
    """Service class for menu management operations"""

    def __init__(self, document_store: DocumentStore, config: Settings = default_settings):
        self.document_store = document_store
        self.collection = config.menu_collection

    async def get_menu_items(
        self,
        category: Optional[MenuCategory] = None,
        is_veg: Optional[bool] = None,
    ) -> List[MenuItem]:
        """Get menu items, optionally filtered by category and veg flag"""
        filters: Dict[str, Any] = {}
        if category is not None:
            filters["category"] = category.value
        if is_veg is not None:
            filters["isVeg"] = is_veg

        documents = await self.document_store.list(self.collection, filters or None)
        items = [MenuItem.model_validate(document) for document in documents]
        logger.info(f"Menu items fetched: {len(items)}")
        return items

    async def get_menu_item_by_id(self, item_id: str) -> Optional[MenuItem]:
        document = await self.document_store.get(self.collection, item_id)
        if document is None:
            return None
        return MenuItem.model_validate(document)

    async def create_menu_item(self, item_data: MenuItemCreate) -> MenuItem:
        """Create a new menu item with a store assigned id"""
        data = item_data.model_dump(by_alias=True, exclude_none=True, mode="json")
        item_id = await self.document_store.add(self.collection, data)
        logger.info(f"Menu item added with ID: {item_id}")
        return MenuItem.model_validate({**data, "id": item_id})

    async def update_menu_item(self, item_id: str, item_data: MenuItemUpdate) -> MenuItem:
        """Update a menu item"""
        changes = item_data.model_dump(by_alias=True, exclude_unset=True, mode="json")
        if changes.get("name") is not None and not changes["name"].strip():
            raise ValidationError("Menu item name cannot be blank")

        menu_item = await self.get_menu_item_by_id(item_id)
        if not menu_item:
            raise NotFoundError("Menu item not found")

        if changes:
            await self.document_store.update(self.collection, item_id, changes)
            logger.info(f"Menu item updated: {item_id}")

        current = menu_item.model_dump(by_alias=True, mode="json")
        return MenuItem.model_validate({**current, **changes})

    async def delete_menu_item(self, item_id: str) -> bool:
        """Delete a menu item"""
        menu_item = await self.get_menu_item_by_id(item_id)
        if not menu_item:
            raise NotFoundError("Menu item not found")

        await self.document_store.delete(self.collection, item_id)
        logger.info(f"Menu item deleted: {item_id}")
        return True
