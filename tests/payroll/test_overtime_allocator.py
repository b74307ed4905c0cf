from decimal import Decimal

from src.staffing_billing.staffing_billing.attendance.model import AttendanceRecord
from src.staffing_billing.staffing_billing.payroll.overtime import OvertimeAllocator


def D(v) -> Decimal:
    return Decimal(str(v))


def test_threshold_is_working_days_minus_four():
    alloc = OvertimeAllocator()
    records = [AttendanceRecord("A", D(28), D(30)), AttendanceRecord("B", D(31), D(31))]

    assert alloc.working_days_in_month(records) == D(31)
    assert alloc.threshold_for(D(31)) == D(27)


def test_worked_example_splits_days():
    alloc = OvertimeAllocator()
    threshold = D(26)

    splits = [alloc.allocate(D(p), threshold) for p in (28, 31, 0)]

    assert [s.regular_days for s in splits] == [D(26), D(26), D(0)]
    assert [s.overtime_days for s in splits] == [D(2), D(5), D(0)]


def test_split_always_adds_up_to_present_days():
    alloc = OvertimeAllocator()
    for present in (0, 1, 12.5, 26, 27, 30.5, 40):
        for threshold in (-4, 0, 10, 26, 27):
            split = alloc.allocate(D(present), D(threshold))
            assert split.regular_days + split.overtime_days == D(present)
            assert split.regular_days >= 0
            assert split.overtime_days >= 0


def test_non_positive_threshold_makes_every_day_overtime():
    split = OvertimeAllocator().allocate(D(3), D(-4))

    assert split.regular_days == 0
    assert split.overtime_days == D(3)


def test_empty_batch_has_zero_working_days():
    assert OvertimeAllocator().working_days_in_month([]) == 0
