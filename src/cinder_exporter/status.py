"""ボリュームステータスの序数化

Cinderのライフサイクルステータス文字列を固定順序の語彙上の位置に変換します。
ダッシュボードは序数値を参照するため、語彙の順序を変えてはいけません。
"""

from __future__ import annotations

VOLUME_STATUSES: tuple[str, ...] = (
    "creating",
    "available",
    "reserved",
    "attaching",
    "detaching",
    "in-use",
    "maintenance",
    "deleting",
    "awaiting-transfer",
    "error",
    "error_deleting",
    "backing-up",
    "restoring-backup",
    "error_backing-up",
    "error_restoring",
    "error_extending",
    "downloading",
    "uploading",
    "retyping",
    "extending",
)

UNKNOWN_STATUS = -1

_STATUS_INDEX: dict[str, int] = {status: idx for idx, status in enumerate(VOLUME_STATUSES)}


def volume_status_ordinal(status: str) -> int:
    """ステータス文字列を序数に変換（大文字小文字を区別しない）

    Args:
        status: APIが返したステータス文字列

    Returns:
        語彙内の位置。未知のステータスは -1
    """
    return _STATUS_INDEX.get(status.lower(), UNKNOWN_STATUS)
