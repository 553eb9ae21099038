"""Pydantic models for the Configuration Manager AdminService device payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AdminServiceModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AdminServiceDevice(AdminServiceModel):
    resource_id: int = Field(alias="ResourceId")
    name: str | None = Field(default=None, alias="Name")
    client_active_status: int | None = Field(default=None, alias="ClientActiveStatus")
    is_obsolete: int | None = Field(default=None, alias="IsObsolete")
    last_online_time: str | None = Field(default=None, alias="LastOnlineTime")


class AdminServicePage(AdminServiceModel):
    """``Devices`` response; older builds return a bare array instead."""

    value: list[dict[str, object]] = Field(default_factory=list["dict[str, object]"])
