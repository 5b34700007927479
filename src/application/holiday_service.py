"""
Holiday Service Module

Declares and withdraws holidays on behalf of a staff member.
"""

import time
from typing import Callable, List, Optional

from domain.entities import Holiday, HolidayType, StaffMember
from domain.exceptions import PermissionDeniedError
from domain.time_model import date_key, parse_date_key
from infrastructure.holiday_registry import HolidayRegistry
from infrastructure.logger import get_logger

logger = get_logger("HolidayService")


def _millis() -> int:
    return int(time.time() * 1000)


class HolidayService:
    """
    Role-gated holiday maintenance.

    Only privileged staff may add or remove holidays; anyone may list them.
    New holidays get a millisecond timestamp id.
    """

    def __init__(self, registry: HolidayRegistry, id_source: Callable[[], int] = _millis):
        self._registry = registry
        self._id_source = id_source

    def list_holidays(self) -> List[Holiday]:
        """All holidays, newest date first."""
        return sorted(self._registry.list(), key=lambda h: h.date_string, reverse=True)

    def add_holiday(
        self,
        actor: StaffMember,
        date_string: str,
        name: str,
        holiday_type: HolidayType = HolidayType.REGULAR,
        remarks: str = ""
    ) -> Holiday:
        """
        Declare a holiday.

        Raises:
            PermissionDeniedError: If actor is not privileged
            ValueError: If the date or name is missing or invalid
            PersistenceError: If the registry write fails
        """
        self._require_privileged(actor, "add holidays")
        if not name or not name.strip():
            raise ValueError("Holiday name is required")
        day = parse_date_key(date_string)

        holiday = Holiday(
            id=str(self._id_source()),
            date_string=date_key(day),
            name=name.strip(),
            type=holiday_type,
            remarks=(remarks or "").strip(),
        )
        existing = self._registry.find(holiday.date_string)
        if existing is not None:
            logger.warning(
                f"{holiday.date_string} already has holiday '{existing.name}' (id {existing.id})"
            )
        self._registry.add(holiday)
        logger.info(f"{actor.id} declared {holiday.date_string} {holiday.name}")
        return holiday

    def remove_holiday(self, actor: StaffMember, holiday_id: str) -> None:
        """
        Withdraw a holiday by id.

        Raises:
            PermissionDeniedError: If actor is not privileged
            PersistenceError: If the registry write fails
        """
        self._require_privileged(actor, "delete holidays")
        self._registry.remove(holiday_id)
        logger.info(f"{actor.id} removed holiday {holiday_id}")

    def holiday_on(self, day) -> Optional[Holiday]:
        return self._registry.find(date_key(parse_date_key(day)))

    @staticmethod
    def _require_privileged(actor: StaffMember, action: str) -> None:
        if not actor.role.is_privileged:
            logger.warning(f"{actor.id} ({actor.role.value}) tried to {action}")
            raise PermissionDeniedError(f"Only developers can {action}.")
