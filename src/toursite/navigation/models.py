import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from toursite.core.base_models import TimestampedTable


class NavigationMenuBase(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    location: str = Field(unique=True, index=True, max_length=50)
    is_active: bool = True


class NavigationMenu(NavigationMenuBase, TimestampedTable, table=True):
    __tablename__ = "navigation_menu"

    items: list["NavigationItem"] = Relationship(
        back_populates="menu",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class NavigationItemBase(SQLModel):
    order: int = 0
    is_active: bool = True
    is_external: bool = False
    target: str = Field(default="_self", max_length=20)
    icon_type: str = Field(default="fontawesome", max_length=50)
    icon_name: str | None = Field(default=None, max_length=100)


class NavigationItem(NavigationItemBase, TimestampedTable, table=True):
    __tablename__ = "navigation_item"

    menu_id: uuid.UUID = Field(
        foreign_key="navigation_menu.id", nullable=False, ondelete="CASCADE", index=True
    )
    parent_id: uuid.UUID | None = Field(
        default=None, foreign_key="navigation_item.id", nullable=True, ondelete="CASCADE"
    )

    menu: NavigationMenu = Relationship(back_populates="items")
    translations: list["NavigationItemTranslation"] = Relationship(
        back_populates="item",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class NavigationItemTranslationBase(SQLModel):
    language: str = Field(max_length=10)
    title: str = Field(min_length=1, max_length=255)
    url: str = Field(default="#", max_length=500)


class NavigationItemTranslation(
    NavigationItemTranslationBase, TimestampedTable, table=True
):
    __tablename__ = "navigation_item_translation"
    __table_args__ = (
        UniqueConstraint("item_id", "language", name="uq_navigation_item_language"),
    )

    item_id: uuid.UUID = Field(
        foreign_key="navigation_item.id", nullable=False, ondelete="CASCADE", index=True
    )

    item: NavigationItem = Relationship(back_populates="translations")


class NavigationItemCreate(NavigationItemBase):
    parent_id: uuid.UUID | None = None
    translations: list[NavigationItemTranslationBase] = Field(min_length=1)


class NavigationItemUpdate(SQLModel):
    order: int | None = None
    is_active: bool | None = None
    is_external: bool | None = None
    target: str | None = None
    icon_type: str | None = None
    icon_name: str | None = None
    parent_id: uuid.UUID | None = None
    translations: list[NavigationItemTranslationBase] | None = None


class NavigationItemPublic(NavigationItemBase):
    id: uuid.UUID
    menu_id: uuid.UUID
    parent_id: uuid.UUID | None
    title: str
    url: str
    location: str
    translations: list[NavigationItemTranslationBase] = []
    children: list["NavigationItemPublic"] = []


class NavigationMenuPublic(NavigationMenuBase):
    id: uuid.UUID
    language: str
    items: list[NavigationItemPublic] = []


NavigationItemPublic.model_rebuild()
NavigationItem.model_rebuild()
