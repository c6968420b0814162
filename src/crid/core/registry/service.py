from __future__ import annotations

import threading
import time
from dataclasses import replace
from typing import Callable

import structlog

from ..enrollments import Enrollment, normalize_period, require_text
from ..errors import AlreadyEnrolled, CridError, EnrollmentNotFound, InvalidPeriod, NotAuthorized
from ..events import FactLog

logger = structlog.get_logger(__name__)

_Key = tuple[str, str]


class EnrollmentRegistry:
    """Per-student, per-period course enrollments guarded by a single administrator.

    Mutations always target `current_period`. Once the period moves on, the
    previous period's entries can still be read through `get_by_period` but no
    longer changed.

    Every public method runs under one lock, so a call either commits its whole
    effect or raises and leaves the state as it was. Facts are numbered under
    that lock and handed to listeners only after it is released.
    """

    def __init__(
        self,
        administrator: str,
        current_period: str,
        *,
        facts: FactLog | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        admin = str(administrator).strip() if isinstance(administrator, str) else ""
        if not admin:
            raise ValueError("administrator must be a non-empty string")
        period = normalize_period(current_period)
        if period is None:
            raise InvalidPeriod(current_period)

        self._lock = threading.RLock()
        self._administrator = admin
        self._current_period = period
        self._facts = facts if facts is not None else FactLog()
        self._clock = clock
        self._entries: dict[_Key, list[Enrollment]] = {}
        # course_code -> position in the matching `_entries` list.
        self._index: dict[_Key, dict[str, int]] = {}

    @property
    def administrator(self) -> str:
        return self._administrator

    @property
    def current_period(self) -> str:
        with self._lock:
            return self._current_period

    @property
    def facts(self) -> FactLog:
        return self._facts

    def _reject(self, err: CridError) -> CridError:
        logger.warning("registry operation rejected", **err.to_dict())
        return err

    def _require_admin_locked(self, caller: str, operation: str) -> None:
        if caller != self._administrator:
            raise self._reject(NotAuthorized(str(caller), operation))

    def _position_locked(self, key: _Key, course_code: str) -> int:
        pos = self._index.get(key, {}).get(course_code)
        if pos is None:
            raise self._reject(EnrollmentNotFound(key[0], course_code, key[1]))
        return pos

    def set_current_period(self, caller: str, new_period: str) -> str:
        with self._lock:
            self._require_admin_locked(caller, "set the current period")
            period = normalize_period(new_period)
            if period is None:
                raise self._reject(InvalidPeriod(new_period))

            old = self._current_period
            self._current_period = period
            fact = self._facts.record("period_changed", old_period=old, new_period=period, caller=caller)
            logger.info("current period changed", old_period=old, new_period=period, caller=caller)

        self._facts.publish(fact)
        return period

    def enroll(
        self,
        caller: str,
        student: str,
        course_name: str,
        course_code: str,
        instructor_name: str,
        status: str,
    ) -> Enrollment:
        with self._lock:
            self._require_admin_locked(caller, "enroll students")
            student = require_text(student, name="student")
            entry = Enrollment(
                course_name=require_text(course_name, name="course_name"),
                course_code=require_text(course_code, name="course_code"),
                instructor_name=require_text(instructor_name, name="instructor_name"),
                status=require_text(status, name="status"),
                enrolled_at=float(self._clock()),
            )

            key = (student, self._current_period)
            index = self._index.get(key, {})
            if course_code in index:
                raise self._reject(AlreadyEnrolled(student, course_code, self._current_period))

            entries = self._entries.setdefault(key, [])
            index = self._index.setdefault(key, {})
            entries.append(entry)
            index[course_code] = len(entries) - 1

            fact = self._facts.record(
                "enrolled",
                student=student,
                course_code=course_code,
                course_name=entry.course_name,
                instructor_name=entry.instructor_name,
            )
            logger.info("student enrolled", student=student, course_code=course_code, period=key[1])

        self._facts.publish(fact)
        return entry

    def change_status(self, caller: str, student: str, course_code: str, new_status: str) -> Enrollment:
        with self._lock:
            self._require_admin_locked(caller, "change enrollment status")
            new_status = require_text(new_status, name="new_status")
            key = (student, self._current_period)
            pos = self._position_locked(key, course_code)

            entries = self._entries[key]
            old_status = entries[pos].status
            updated = replace(entries[pos], status=new_status)
            entries[pos] = updated

            fact = self._facts.record(
                "status_changed",
                student=student,
                course_code=course_code,
                old_status=old_status,
                new_status=new_status,
            )
            logger.info(
                "enrollment status changed",
                student=student,
                course_code=course_code,
                old_status=old_status,
                new_status=new_status,
            )

        self._facts.publish(fact)
        return updated

    def remove(self, caller: str, student: str, course_code: str) -> Enrollment:
        """Remove one enrollment by moving the last entry into its slot.

        Order of the remaining entries is not preserved.
        """
        with self._lock:
            self._require_admin_locked(caller, "remove enrollments")
            key = (student, self._current_period)
            pos = self._position_locked(key, course_code)

            entries = self._entries[key]
            index = self._index[key]
            removed = entries[pos]
            last = entries[-1]
            entries[pos] = last
            index[last.course_code] = pos
            entries.pop()
            del index[course_code]

            fact = self._facts.record(
                "removed",
                student=student,
                course_code=course_code,
                period=key[1],
                caller=caller,
            )
            logger.info("enrollment removed", student=student, course_code=course_code, period=key[1], caller=caller)

        self._facts.publish(fact)
        return removed

    def get_by_period(self, student: str, period: str) -> list[Enrollment]:
        # Periods are stored stripped, so read them the same way.
        token = normalize_period(period)
        if token is None:
            return []
        with self._lock:
            return list(self._entries.get((student, token), ()))
