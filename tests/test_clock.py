# tests/test_clock.py
from datetime import date

from services.clock import add_note, due_date_for, month_bounds


class TestDueDate:

     def test_due_day_within_month(self):
          assert due_date_for(2026, 1, 15) == date(2026, 1, 15)

     def test_due_day_is_capped_at_28(self):
          assert due_date_for(2026, 2, 31) == date(2026, 2, 28)
          assert due_date_for(2028, 2, 30) == date(2028, 2, 28)


class TestMonthBounds:

     def test_december_rolls_into_next_year(self):
          assert month_bounds(2026, 12) == (date(2026, 12, 1), date(2027, 1, 1))


class TestAddNote:

     def test_appends_dated_line(self):
          notes = add_note(None, "Signed", date(2026, 1, 1))
          assert add_note(notes, "Renewed", date(2026, 12, 1)) == "[2026-01-01] Signed\n[2026-12-01] Renewed"
