import random
from datetime import datetime

from src.workorder_system.workorder_system.core.enums import WorkStatus
from src.workorder_system.workorder_system.works.model import Work
from src.workorder_system.workorder_system.works.sorting import UNKNOWN_STATUS_PRIORITY, sort_works, status_priority


def _work(work_id, status, delivery=None):
    return Work(work_id=work_id, title=f"w{work_id}", status=status, quantity=1, unit_price=1, cost=1, delivery_date=delivery)


def test_groups_follow_priority_table_not_storage_value():
    statuses = [
        WorkStatus.COMPLETED,
        WorkStatus.REQUEST_PLANNED,
        WorkStatus.REQUESTING,
        WorkStatus.PICKUP_REQUESTING,
        WorkStatus.WAITING_DROPOFF,
        WorkStatus.IN_DELIVERY,
        WorkStatus.IN_PROGRESS,
        99,
    ]
    works = [_work(i, s) for i, s in enumerate(statuses)]
    random.Random(7).shuffle(works)

    ordered = [w.status for w in sort_works(works)]

    assert ordered == [
        WorkStatus.IN_PROGRESS,
        WorkStatus.IN_DELIVERY,
        WorkStatus.WAITING_DROPOFF,
        WorkStatus.PICKUP_REQUESTING,
        WorkStatus.REQUESTING,
        WorkStatus.REQUEST_PLANNED,
        WorkStatus.COMPLETED,
        99,
    ]


def test_unknown_status_goes_to_last_bucket():
    assert status_priority(None) == UNKNOWN_STATUS_PRIORITY
    assert status_priority(42) == UNKNOWN_STATUS_PRIORITY
    assert status_priority(WorkStatus.IN_PROGRESS) == 1


def test_within_group_dated_ascending_then_undated():
    works = [
        _work(1, WorkStatus.REQUESTING),
        _work(2, WorkStatus.REQUESTING, datetime(2025, 3, 10)),
        _work(3, WorkStatus.REQUESTING, datetime(2025, 3, 1)),
        _work(4, WorkStatus.REQUESTING),
    ]

    assert [w.work_id for w in sort_works(works)] == [3, 2, 1, 4]


def test_full_ties_keep_input_order():
    same_day = datetime(2025, 5, 5, 9, 0)
    works = [
        _work(10, WorkStatus.IN_DELIVERY, same_day),
        _work(11, WorkStatus.IN_DELIVERY, same_day),
        _work(12, WorkStatus.IN_DELIVERY),
        _work(13, WorkStatus.IN_DELIVERY),
    ]

    assert [w.work_id for w in sort_works(works)] == [10, 11, 12, 13]
    assert [w.work_id for w in sort_works(reversed(works))] == [11, 10, 13, 12]


def test_sort_does_not_mutate_input():
    works = [_work(1, WorkStatus.COMPLETED), _work(2, WorkStatus.IN_PROGRESS)]
    snapshot = list(works)

    result = sort_works(works)

    assert works == snapshot
    assert result is not works
    assert [w.work_id for w in result] == [2, 1]
