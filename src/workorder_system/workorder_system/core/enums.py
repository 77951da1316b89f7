from __future__ import annotations

from enum import Enum, IntEnum


class Role(str, Enum):
    """Loại tài khoản đăng nhập."""

    ADMIN = "admin"
    WORKER = "worker"


class WorkStatus(IntEnum):
    """Trạng thái công việc, giá trị số là giá trị lưu trong cột works.status.

    Thứ tự hiển thị KHÔNG theo giá trị số, xem works.sorting.status_priority.
    """

    REQUEST_PLANNED = 1
    REQUESTING = 2
    IN_PROGRESS = 3
    IN_DELIVERY = 4
    PICKUP_REQUESTING = 5
    WAITING_DROPOFF = 6
    COMPLETED = 7

    @property
    def label(self) -> str:
        return WORK_STATUS_LABELS[self]

    @classmethod
    def coerce(cls, value) -> "WorkStatus | int | None":
        """Map a stored value onto the enum, keeping unknown integers as-is."""

        if value is None:
            return None
        try:
            return cls(int(value))
        except ValueError:
            return int(value)


WORK_STATUS_LABELS = {
    WorkStatus.REQUEST_PLANNED: "Request planned",
    WorkStatus.REQUESTING: "Requesting",
    WorkStatus.IN_PROGRESS: "In progress",
    WorkStatus.IN_DELIVERY: "In delivery",
    WorkStatus.PICKUP_REQUESTING: "Pickup requesting",
    WorkStatus.WAITING_DROPOFF: "Waiting drop-off",
    WorkStatus.COMPLETED: "Completed",
}


def status_label(status) -> str:
    if isinstance(status, WorkStatus):
        return status.label
    return "Unknown"


class DeliveryMethod(str, Enum):
    """Cách giao hàng người thợ chọn khi hoàn tất công việc."""

    DROPOFF = "dropoff"
    MAIL = "mail"
    PICKUP = "pickup"


class AdminPermission(str, Enum):
    WORKS_VIEW = "works_view"
    WORKS_EDIT = "works_edit"
    WORKERS_VIEW = "workers_view"
    WORKERS_EDIT = "workers_edit"
    ACCOUNTS_VIEW = "accounts_view"
    ACCOUNTS_EDIT = "accounts_edit"
    VIDEOS_VIEW = "videos_view"
    VIDEOS_EDIT = "videos_edit"
