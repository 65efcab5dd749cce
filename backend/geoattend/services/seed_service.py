# File: backend/geoattend/services/seed_service.py
"""Database seeding service for demo data."""
from geoattend import db
from geoattend.models.course import Course
from geoattend.models.enrollment import CourseStudent
from geoattend.models.student import Student
from geoattend.models.teacher import Teacher, TeacherRole

class SeedService:
    """Service to seed database with demo data."""

    DEMO_TEACHER = ('Dr. Adaeze Okafor', 'lecturer@university.edu', 'teacher123')
    DEMO_COURSE = ('CS103', 'Introduction to Programming', 100)
    DEMO_STUDENTS = [
        ('CSC/2021/001', 'Tunde Bakare', 'tunde.bakare@student.university.edu'),
        ('CSC/2021/002', 'Ngozi Eze', 'ngozi.eze@student.university.edu'),
        ('CSC/2021/003', 'Ibrahim Musa', 'ibrahim.musa@student.university.edu'),
        ('CSC/2021/004', 'Chioma Nwosu', 'chioma.nwosu@student.university.edu'),
    ]

    @staticmethod
    def seed_all() -> dict:
        """Seed teacher, course and enrolled students; safe to re-run."""
        teacher = SeedService.seed_teacher()
        course = SeedService.seed_course(teacher)
        students = SeedService.seed_students(course, teacher)
        db.session.commit()
        return {'course_code': course.course_code, 'students': len(students)}

    @staticmethod
    def seed_teacher() -> Teacher:
        name, email, password = SeedService.DEMO_TEACHER
        teacher = Teacher.query.filter_by(email=email).first()
        if not teacher:
            teacher = Teacher(email=email, name=name, role=TeacherRole.TEACHER)
            teacher.set_password(password)
            db.session.add(teacher)
            db.session.flush()
        return teacher

    @staticmethod
    def seed_course(teacher: Teacher) -> Course:
        code, title, level = SeedService.DEMO_COURSE
        course = Course.query.filter_by(teacher_id=teacher.id, course_code=code).first()
        if not course:
            course = Course(teacher_id=teacher.id, course_code=code, title=title, level=level)
            db.session.add(course)
            db.session.flush()
        return course

    @staticmethod
    def seed_students(course: Course, teacher: Teacher) -> list:
        students = []
        for matric_no, name, email in SeedService.DEMO_STUDENTS:
            student = Student.find_by_matric(matric_no)
            if not student:
                student = Student(matric_no=matric_no, name=name, email=email, level=course.level)
                db.session.add(student)
                db.session.flush()

            enrolled = CourseStudent.query.filter_by(
                course_id=course.id, student_id=student.id
            ).first()
            if not enrolled:
                db.session.add(CourseStudent(
                    course_id=course.id, student_id=student.id, added_by=teacher.id
                ))
            students.append(student)
        return students
