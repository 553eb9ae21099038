"""Minimal Pydantic models for the Microsoft Graph device endpoints."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field


class GraphBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GraphPage(GraphBaseModel):
    value: list[dict[str, object]] = Field(default_factory=list["dict[str, object]"])
    next_link: str | None = Field(default=None, alias="@odata.nextLink")


class GraphDevice(GraphBaseModel):
    """``/devices`` entry (Entra ID)."""

    id: str
    device_id: str | None = Field(default=None, alias="deviceId")
    display_name: str | None = Field(default=None, alias="displayName")
    operating_system: str | None = Field(default=None, alias="operatingSystem")
    operating_system_version: str | None = Field(default=None, alias="operatingSystemVersion")
    approximate_last_sign_in: datetime | None = Field(
        default=None, alias="approximateLastSignInDateTime"
    )


class GraphManagedDevice(GraphBaseModel):
    """``/deviceManagement/managedDevices`` entry (Intune)."""

    id: str
    azure_ad_device_id: str | None = Field(default=None, alias="azureADDeviceId")
    device_name: str | None = Field(default=None, alias="deviceName")
    operating_system: str | None = Field(default=None, alias="operatingSystem")
    os_version: str | None = Field(default=None, alias="osVersion")
    last_sync: datetime | None = Field(default=None, alias="lastSyncDateTime")


class TokenResponse(GraphBaseModel):
    access_token: str
    expires_in: int = 3599
    token_type: str = "Bearer"


class GraphErrorDetail(GraphBaseModel):
    code: str | None = None
    message: str | None = None


class GraphErrorResponse(GraphBaseModel):
    error: GraphErrorDetail


DEVICE_SELECT = (
    "id",
    "deviceId",
    "displayName",
    "operatingSystem",
    "operatingSystemVersion",
    "approximateLastSignInDateTime",
)

MANAGED_DEVICE_SELECT = (
    "id",
    "azureADDeviceId",
    "deviceName",
    "operatingSystem",
    "osVersion",
    "lastSyncDateTime",
)
