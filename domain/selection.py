"""Date picker selection, decoupled from rendering"""
from pydantic import BaseModel
from datetime import date
from typing import Optional

from domain.dates import DateLike, days_between, normalize_date
from domain.entities import AvailabilityIndex, Villa
from domain.enums import DayStatus, SelectionState
from domain.rules import BookingRules


class DateSelection(BaseModel):
    """AWAITING_CHECK_IN -> AWAITING_CHECK_OUT -> READY

    A click in READY starts a new selection from that day.
    """

    state: SelectionState = SelectionState.AWAITING_CHECK_IN
    check_in: Optional[date] = None
    check_out: Optional[date] = None

    @staticmethod
    def resume(check_in: Optional[DateLike] = None, check_out: Optional[DateLike] = None) -> "DateSelection":
        """Rebuild a selection from the dates a client already holds"""
        if check_in is None:
            return DateSelection()
        if check_out is None:
            return DateSelection(
                state=SelectionState.AWAITING_CHECK_OUT,
                check_in=normalize_date(check_in)
            )
        return DateSelection(
            state=SelectionState.READY,
            check_in=normalize_date(check_in),
            check_out=normalize_date(check_out)
        )

    def select(
        self,
        day: DateLike,
        villa: Villa,
        index: AvailabilityIndex,
        rules: BookingRules,
        today: DateLike
    ) -> bool:
        """Apply a click; returns False when the day is not selectable"""
        d = normalize_date(day)

        if self.state == SelectionState.AWAITING_CHECK_OUT:
            if not rules.can_select_check_out(villa, index, self.check_in, d, today):
                return False
            self.check_out = d
            self.state = SelectionState.READY
            return True

        if not rules.can_select_check_in(index, d, today):
            return False
        self.check_in = d
        self.check_out = None
        self.state = SelectionState.AWAITING_CHECK_OUT
        return True

    def is_selectable(
        self,
        day: DateLike,
        villa: Villa,
        index: AvailabilityIndex,
        rules: BookingRules,
        today: DateLike
    ) -> bool:
        if self.state == SelectionState.AWAITING_CHECK_OUT:
            return rules.can_select_check_out(villa, index, self.check_in, day, today)
        return rules.can_select_check_in(index, day, today)

    def status_of(self, day: DateLike, index: AvailabilityIndex, today: DateLike) -> DayStatus:
        return index.day_status(day, today, self.check_in, self.check_out)

    def reset(self) -> None:
        self.state = SelectionState.AWAITING_CHECK_IN
        self.check_in = None
        self.check_out = None

    def nights(self) -> int:
        if self.check_in is None or self.check_out is None:
            return 0
        return days_between(self.check_in, self.check_out)
