# File: backend/geoattend/services/eligibility_service.py
"""Who may submit attendance for a course."""
from typing import Optional
from geoattend.exceptions import LevelMismatch, NotEnrolled
from geoattend.models.attendance_session import AttendanceSession
from geoattend.models.enrollment import CourseStudent
from geoattend.models.student import Student

class EligibilityService:

    @staticmethod
    def is_enrolled(student_id: int, course_id: int) -> bool:
        return CourseStudent.query.filter_by(
            course_id=course_id, student_id=student_id
        ).first() is not None

    @staticmethod
    def check_enrollment(student: Student, session: AttendanceSession) -> None:
        """Raise ``NotEnrolled`` naming the course and lecturer to contact.

        Nothing about other students is included.
        """
        if EligibilityService.is_enrolled(student.id, session.course_id):
            return

        course = session.course
        lecturer = session.teacher.name if session.teacher else None
        raise NotEnrolled(
            details=[
                f"Course: {course.title} ({course.course_code})",
                f"Lecturer: {lecturer}",
                "Please contact your lecturer to be added to this course",
                "You can only submit attendance for courses you are enrolled in",
            ],
            course_info={
                'course_name': course.title,
                'course_code': course.course_code,
                'lecturer': lecturer,
                'session_code': session.session_code
            }
        )

    @staticmethod
    def check_level(student_level: Optional[int], course_level: Optional[int]) -> None:
        """Advisory: only compared when both levels are known."""
        if student_level is None or course_level is None:
            return
        if student_level != course_level:
            raise LevelMismatch(
                details=[
                    f"Your current level: {student_level}",
                    f"Course level: {course_level}",
                    "Please contact your lecturer if you believe this is incorrect",
                ],
                student_level=student_level,
                course_level=course_level
            )
