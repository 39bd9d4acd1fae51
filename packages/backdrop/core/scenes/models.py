"""Data models for scene background resolution."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class KnownSetting(str, Enum):
    """Settings with a built-in visual treatment (gradient, preseeded assets)."""

    NEUTRAL = "neutral"
    BATHROOM = "bathroom"
    TRAVEL = "travel"
    OUTDOOR = "outdoor"
    LIFESTYLE = "lifestyle"
    BEDROOM = "bedroom"
    VANITY = "vanity"
    GYM = "gym"
    OFFICE = "office"


_KNOWN_SETTING_VALUES = frozenset(s.value for s in KnownSetting)


def is_known_setting(setting: str) -> bool:
    """Check whether a setting string names a KnownSetting."""
    return setting in _KNOWN_SETTING_VALUES


class Product(BaseModel):
    """Product shown in front of a scene.

    Only used to flavour the default scene prompt.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str | None = None
    brand: str | None = None
    image_url: str | None = None


class ResolutionOptions(BaseModel):
    """Per-call inputs to BackgroundResolver.resolve().

    Attributes:
        image_url: Explicit image override, returned as-is (and cached)
        scene_asset_id: Registry asset to record a usage event against
        edit_mode: Edit a seed image instead of generating from scratch
        edit_prompt: Instruction used in edit mode
        creative_prompt: Free-text scene description from the upstream generator
        mood: Registry filter
        customer_context: Registry filter
        scene_type: Registry filter and registration scene type
        existing_background: Previously shown background, preserved verbatim
        managed_asset_id: Managed-asset (CMS) id to fetch
        managed_tag: Managed-asset tag to fetch by
    """

    model_config = ConfigDict(frozen=True)

    image_url: str | None = None
    scene_asset_id: str | None = None
    edit_mode: bool = False
    edit_prompt: str | None = None
    creative_prompt: str | None = None
    mood: str | None = None
    customer_context: str | None = None
    scene_type: str | None = None
    existing_background: str | None = None
    managed_asset_id: str | None = None
    managed_tag: str | None = None

    @property
    def prompt(self) -> str | None:
        """Effective raw prompt (creative prompt wins over edit prompt)."""
        return self.creative_prompt or self.edit_prompt or None


class PreseededAsset(BaseModel):
    """Bundled image for a known setting."""

    model_config = ConfigDict(frozen=True)

    setting: str
    variant: int = Field(ge=1)
    path: str
    tags: tuple[str, ...] = ()


class RegistryAsset(BaseModel):
    """Scene asset record held by the external registry."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    setting: str
    mood: str | None = None
    customer_context: str | None = None
    scene_type: str | None = None
    image_url: str | None = None
    prompt: str | None = None
    usage_count: int = 0
    is_edited: bool = False

    @property
    def is_real_image(self) -> bool:
        """True when image_url points at a fetchable image (not a placeholder)."""
        url = self.image_url or ""
        return url.startswith(("http://", "https://", "blob:"))


class RegistryCriteria(BaseModel):
    """Registry lookup filters."""

    model_config = ConfigDict(frozen=True)

    setting: str
    mood: str | None = None
    customer_context: str | None = None
    scene_type: str | None = None


class NewRegistryAsset(BaseModel):
    """Registration payload for a freshly generated scene."""

    model_config = ConfigDict(frozen=True)

    setting: str
    image_url: str
    prompt: str
    mood: str | None = None
    customer_context: str | None = None
    scene_type: str = "product"
    is_edited: bool = False


class ManagedAssetCriteria(BaseModel):
    """Managed-asset (CMS) lookup: by id first, else by tag."""

    model_config = ConfigDict(frozen=True)

    setting: str
    asset_id: str | None = None
    tag: str | None = None


class ManagedAsset(BaseModel):
    """Managed-asset upload result."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    url: str | None = None
    title: str = ""
    tags: tuple[str, ...] = ()


class JobStatus(str, Enum):
    """Async generation job status."""

    RUNNING = "running"
    CANCEL_PENDING = "cancel_pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED)


class GenerationJob(BaseModel):
    """Snapshot of an async generation job returned by a status poll."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    job_id: str
    status: JobStatus
    message: str | None = None
    error_code: str | None = None
    result: dict[str, Any] | None = None
