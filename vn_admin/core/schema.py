"""Pydantic v2 models for provinces and administrative units.

Models accept both the remote source's field names (``tentinh``, ``matinh``,
``tenhc`` ...) and the Python field names, and always serialize with the
Python names.
"""

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

logger = logging.getLogger(__name__)


class Province(BaseModel):
    """Top-level administrative region."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str = Field(default="", alias="tentinh")
    code: int | None = Field(default=None, alias="mahc")
    updated_at: datetime | None = None

    @field_validator("code", mode="before")
    @classmethod
    def parse_code(cls, value: Any) -> int | None:
        """Keep numeric codes; absent or unparseable codes become None."""
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            # TODO: confirm with the source owner whether non-numeric codes should be kept as text
            logger.warning(f"Ignoring non-numeric province code {value!r}")
            return None


class AdminUnit(BaseModel):
    """Ward or commune level unit belonging to exactly one province."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    province_id: int = Field(alias="matinh")
    name: str = Field(default="", alias="tenhc")
    level: str = Field(default="", alias="loai")
    code: str = Field(default="", alias="ma")
    pre_merger_description: str | None = Field(default=None, alias="truocsapnhap")
    latitude: float = Field(default=0.0, alias="vido")
    longitude: float = Field(default=0.0, alias="kinhdo")
    updated_at: datetime | None = None

    @field_validator("code", mode="before")
    @classmethod
    def code_as_text(cls, value: Any) -> str:
        """Codes are identifiers, never numbers."""
        if value is None:
            return ""
        return str(value)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coordinate_or_zero(cls, value: Any) -> Any:
        """Unknown coordinates are stored as 0.0."""
        if value is None or value == "":
            return 0.0
        return value


ProvinceList = TypeAdapter(list[Province])
AdminUnitList = TypeAdapter(list[AdminUnit])
