from __future__ import annotations

from typing import Any

from ...core.enrollments import Enrollment


def enrollment_to_dict(entry: Enrollment) -> dict[str, Any]:
    return {
        "courseName": entry.course_name,
        "courseCode": entry.course_code,
        "instructorName": entry.instructor_name,
        "status": entry.status,
        "enrolledAt": float(entry.enrolled_at),
    }


def enrollment_from_dict(data: dict[str, Any]) -> Enrollment:
    return Enrollment(
        course_name=str(data["courseName"]),
        course_code=str(data["courseCode"]),
        instructor_name=str(data["instructorName"]),
        status=str(data["status"]),
        enrolled_at=float(data["enrolledAt"]),
    )
