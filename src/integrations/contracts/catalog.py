from __future__ import annotations

from typing import Optional

from pydantic import Field

from .interfaces import ApiModel


class DeviceModel(ApiModel):
    """Device catalog entry, used to resolve device names for order summaries."""

    device_model_id: int
    device_name: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageURL")
    specifications: Optional[str] = None
    device_category_id: Optional[int] = None
    device_value: Optional[float] = None
    price_per_day: Optional[float] = None
    deposit_percent: Optional[float] = None
    active: bool = True

    @property
    def display_name(self) -> Optional[str]:
        name = (self.device_name or "").strip()
        return name or None
