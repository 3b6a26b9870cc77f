"""Pydantic schemas for persisted store documents.

One list document per list and one config document per owner. Missing
fields take defaults instead of failing validation: a list without
``items`` has no items, a list without ``statusGroupId`` points at the
``default`` workflow and is resolved later through the fallback rules.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from listfully.engine.defaults import DEFAULT_GROUP_ID
from listfully.engine.models import (
    DEFAULT_STATUS_COLOR,
    Item,
    ShoppingList,
    Status,
    StatusGroup,
    StatusKind,
    UserSettings,
)

LEGACY_GROUP_NAME = "My Template"


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class StatusDocument(_Document):
    id: str = Field(..., min_length=1)
    name: str
    icon: str = StatusKind.SQUARE.value
    color: str = DEFAULT_STATUS_COLOR

    def to_model(self) -> Status:
        return Status(id=self.id, name=self.name, icon=StatusKind.resolve(self.icon), color=self.color)

    @classmethod
    def from_model(cls, status: Status) -> StatusDocument:
        return cls(id=status.id, name=status.name, icon=status.icon.value, color=status.color)


class StatusGroupDocument(_Document):
    id: str = Field(..., min_length=1)
    name: str
    statuses: list[StatusDocument] = Field(..., min_length=1)

    def to_model(self) -> StatusGroup:
        return StatusGroup(
            id=self.id,
            name=self.name,
            statuses=tuple(s.to_model() for s in self.statuses),
        )

    @classmethod
    def from_model(cls, group: StatusGroup) -> StatusGroupDocument:
        return cls(
            id=group.id,
            name=group.name,
            statuses=[StatusDocument.from_model(s) for s in group.statuses],
        )


class ItemDocument(_Document):
    id: str = Field(..., min_length=1)
    name: str
    quantity: int = Field(default=1, ge=1)
    status: str = ""

    def to_model(self) -> Item:
        return Item(id=self.id, name=self.name, quantity=self.quantity, status=self.status)

    @classmethod
    def from_model(cls, item: Item) -> ItemDocument:
        return cls(id=item.id, name=item.name, quantity=item.quantity, status=item.status)


class ListDocument(_Document):
    id: str = Field(..., min_length=1)
    owner_id: str = Field(default="", alias="ownerId")
    name: str = ""
    items: list[ItemDocument] = Field(default_factory=list)
    order_key: float = Field(default=0.0, alias="orderKey")
    status_group_id: str = Field(default=DEFAULT_GROUP_ID, alias="statusGroupId")

    @field_validator("items", mode="before")
    @classmethod
    def _none_items_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("status_group_id", mode="before")
    @classmethod
    def _blank_group_is_default(cls, value: Any) -> Any:
        return value or DEFAULT_GROUP_ID

    def to_model(self) -> ShoppingList:
        return ShoppingList(
            id=self.id,
            owner_id=self.owner_id,
            name=self.name,
            items=tuple(i.to_model() for i in self.items),
            order_key=self.order_key,
            status_group_id=self.status_group_id,
        )

    @classmethod
    def from_model(cls, shopping_list: ShoppingList) -> ListDocument:
        return cls(
            id=shopping_list.id,
            owner_id=shopping_list.owner_id,
            name=shopping_list.name,
            items=[ItemDocument.from_model(i) for i in shopping_list.items],
            order_key=shopping_list.order_key,
            status_group_id=shopping_list.status_group_id,
        )

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ConfigDocument(_Document):
    status_groups: list[StatusGroupDocument] = Field(default_factory=list, alias="statusGroups")

    def to_model(self) -> UserSettings:
        return UserSettings(status_groups=tuple(g.to_model() for g in self.status_groups))

    @classmethod
    def from_model(cls, settings: UserSettings) -> ConfigDocument:
        return cls(status_groups=[StatusGroupDocument.from_model(g) for g in settings.status_groups])

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def migrate_config_payload(payload: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    """Upgrade a legacy config holding a flat ``statuses`` array.

    Returns ``(payload, migrated)``. Legacy documents become a single
    workflow with id ``default``; current documents pass through untouched.
    """
    if "statusGroups" in payload or "statuses" not in payload:
        return payload, False
    migrated = {
        "statusGroups": [
            {
                "id": DEFAULT_GROUP_ID,
                "name": LEGACY_GROUP_NAME,
                "statuses": payload["statuses"],
            }
        ]
    }
    return migrated, True
