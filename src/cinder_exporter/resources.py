"""リソースレコードのモデルと展開処理

Pydanticで、APIレスポンスのうちエクスポーターが読むフィールドだけを定義します。
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cinder_exporter.exceptions import ExtractionError

TENANT_ATTRIBUTE = "os-vol-tenant-attr:tenant_id"


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


class Volume(_Record):
    """ボリューム（基本属性 + テナント拡張属性）

    一覧APIの1レスポンスに両方の属性が含まれるため、1つのモデルにまとめます。
    """

    id: str
    name: str = ""
    status: str = ""
    bootable: str = ""
    size: int = 0
    volume_type: str = ""
    tenant_id: str = Field(default="", alias=TENANT_ATTRIBUTE)

    @field_validator("name", "status", "bootable", "volume_type", "tenant_id", mode="before")
    @classmethod
    def _empty_strings(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("bootable", mode="before")
    @classmethod
    def _bootable_as_text(cls, v: Any) -> Any:
        # マイクロバージョンによっては真偽値で返る
        if isinstance(v, bool):
            return "true" if v else "false"
        return v

    @field_validator("size", mode="before")
    @classmethod
    def _size_default(cls, v: Any) -> Any:
        return 0 if v is None else v


class Snapshot(_Record):
    """ボリュームスナップショット（件数のみ使用）"""

    id: str
    status: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _empty_strings(cls, v: Any) -> Any:
        return _none_to_empty(v)


class ServiceState(_Record):
    """Cinderバックエンドサービス（cinder-volume, cinder-scheduler など）"""

    binary: str = ""
    host: str = ""
    zone: str = ""
    status: str = ""
    state: str = ""

    @field_validator("binary", "host", "zone", "status", "state", mode="before")
    @classmethod
    def _empty_strings(cls, v: Any) -> Any:
        return _none_to_empty(v)


class Project(_Record):
    """Keystoneプロジェクト（テナント）"""

    id: str
    name: str = ""


class QuotaSet(_Record):
    """プロジェクトのクォータ上限"""

    gigabytes: int = 0


class QuotaUsageDetail(_Record):
    in_use: int = 0
    limit: int = 0
    reserved: int = 0


class QuotaUsage(_Record):
    """プロジェクトのクォータ使用量 (usage=True)"""

    gigabytes: QuotaUsageDetail = Field(default_factory=QuotaUsageDetail)


RecordT = TypeVar("RecordT", bound=_Record)


def _extract_list(pages: Iterable[dict[str, Any]], resource_key: str, model: type[RecordT]) -> list[RecordT]:
    records: list[RecordT] = []
    for page in pages:
        if resource_key not in page:
            raise ExtractionError(f"response page has no '{resource_key}' key")
        try:
            records.extend(model.model_validate(item) for item in page[resource_key])
        except ValidationError as e:
            raise ExtractionError(f"invalid {resource_key} record: {e}") from e
    return records


def _extract_one(body: dict[str, Any], resource_key: str, model: type[RecordT]) -> RecordT:
    if resource_key not in body:
        raise ExtractionError(f"response body has no '{resource_key}' key")
    try:
        return model.model_validate(body[resource_key])
    except ValidationError as e:
        raise ExtractionError(f"invalid {resource_key} record: {e}") from e


def extract_volumes(pages: Iterable[dict[str, Any]]) -> list[Volume]:
    return _extract_list(pages, "volumes", Volume)


def extract_snapshots(pages: Iterable[dict[str, Any]]) -> list[Snapshot]:
    return _extract_list(pages, "snapshots", Snapshot)


def extract_services(pages: Iterable[dict[str, Any]]) -> list[ServiceState]:
    return _extract_list(pages, "services", ServiceState)


def extract_projects(pages: Iterable[dict[str, Any]]) -> list[Project]:
    return _extract_list(pages, "projects", Project)


def extract_quota_set(body: dict[str, Any]) -> QuotaSet:
    return _extract_one(body, "quota_set", QuotaSet)


def extract_quota_usage(body: dict[str, Any]) -> QuotaUsage:
    return _extract_one(body, "quota_set", QuotaUsage)
