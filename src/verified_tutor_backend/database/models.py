from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, ForeignKeyConstraint, Index, Integer, PrimaryKeyConstraint, String, Text, Time, UniqueConstraint, Uuid, func, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import uuid

from .db_enums import UserRole, LessonStatusEnum, ConfirmationStatusEnum


class Base(DeclarativeBase):
    pass


class Users(Base):
    __tablename__ = 'users'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='users_pkey'),
        UniqueConstraint('email', name='users_email_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(Enum(*UserRole.get_all_names(), name='user_role'))
    timezone: Mapped[str] = mapped_column(Text, default='UTC', server_default=text("'UTC'"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text('true'))
    first_name: Mapped[Optional[str]] = mapped_column(Text)
    last_name: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), server_default=func.now())

    # Subclass tables are always joined so that no column is lazy-loaded
    # outside of the async context.
    __mapper_args__ = {
        'polymorphic_on': 'role',
        'with_polymorphic': '*',
    }


class Tutors(Users):
    __tablename__ = 'tutors'
    __table_args__ = (
        ForeignKeyConstraint(['id'], ['users.id'], ondelete='CASCADE', name='tutors_id_fkey'),
        PrimaryKeyConstraint('id', name='tutors_pkey'),
        UniqueConstraint('public_slug', name='tutors_public_slug_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    display_name: Mapped[str] = mapped_column(Text)
    public_slug: Mapped[Optional[str]] = mapped_column(Text)

    students: Mapped[list['Students']] = relationship(
        'Students',
        back_populates='tutor',
        foreign_keys='[Students.tutor_id]'
    )
    lessons: Mapped[list['Lessons']] = relationship(
        'Lessons',
        back_populates='tutor',
        foreign_keys='[Lessons.tutor_id]'
    )
    testimonials: Mapped[list['Testimonials']] = relationship('Testimonials', back_populates='tutor')

    __mapper_args__ = {'polymorphic_identity': UserRole.TUTOR.value}


class Parents(Users):
    __tablename__ = 'parents'
    __table_args__ = (
        ForeignKeyConstraint(['id'], ['users.id'], ondelete='CASCADE', name='parents_id_fkey'),
        PrimaryKeyConstraint('id', name='parents_pkey')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)

    students: Mapped[list['Students']] = relationship(
        'Students',
        back_populates='parent',
        foreign_keys='[Students.parent_id]'
    )

    __mapper_args__ = {'polymorphic_identity': UserRole.PARENT.value}


class Students(Base):
    """
    Students are not users: they are records owned by a tutor and a parent.
    """
    __tablename__ = 'students'
    __table_args__ = (
        ForeignKeyConstraint(['tutor_id'], ['tutors.id'], ondelete='CASCADE', name='students_tutor_id_fkey'),
        ForeignKeyConstraint(['parent_id'], ['parents.id'], ondelete='CASCADE', name='students_parent_id_fkey'),
        PrimaryKeyConstraint('id', name='students_pkey'),
        Index('idx_students_tutor_id', 'tutor_id'),
        Index('idx_students_parent_id', 'parent_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    parent_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    name: Mapped[str] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text('true'))
    grade_level: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), server_default=func.now())

    tutor: Mapped['Tutors'] = relationship('Tutors', back_populates='students', foreign_keys='[Students.tutor_id]')
    parent: Mapped['Parents'] = relationship('Parents', back_populates='students', foreign_keys='[Students.parent_id]')
    lessons: Mapped[list['Lessons']] = relationship('Lessons', back_populates='student')


class Lessons(Base):
    __tablename__ = 'lessons'
    __table_args__ = (
        CheckConstraint('scheduled_end_at > scheduled_start_at', name='lessons_valid_time_range'),
        ForeignKeyConstraint(['tutor_id'], ['tutors.id'], ondelete='CASCADE', name='lessons_tutor_id_fkey'),
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='lessons_student_id_fkey'),
        PrimaryKeyConstraint('id', name='lessons_pkey'),
        Index('idx_lessons_tutor_start', 'tutor_id', 'scheduled_start_at'),
        Index('idx_lessons_student_id', 'student_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    scheduled_start_at: Mapped[datetime.datetime] = mapped_column(DateTime(True))
    scheduled_end_at: Mapped[datetime.datetime] = mapped_column(DateTime(True))
    status: Mapped[str] = mapped_column(
        Enum(*LessonStatusEnum.get_all_names(), name='lesson_status_enum'),
        default=LessonStatusEnum.SCHEDULED.value,
        server_default=text(f"'{LessonStatusEnum.SCHEDULED.value}'")
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), server_default=func.now())
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), server_default=func.now())

    tutor: Mapped['Tutors'] = relationship('Tutors', back_populates='lessons', foreign_keys='[Lessons.tutor_id]')
    student: Mapped['Students'] = relationship('Students', back_populates='lessons')
    confirmation: Mapped[Optional['LessonConfirmations']] = relationship(
        'LessonConfirmations',
        back_populates='lesson',
        uselist=False
    )


class LessonConfirmations(Base):
    __tablename__ = 'lesson_confirmations'
    __table_args__ = (
        CheckConstraint(
            "(parent_confirmed IS NULL AND final_status IN ('unconfirmed', 'no_show')) "
            "OR (parent_confirmed = true AND final_status = 'verified') "
            "OR (parent_confirmed = false AND final_status = 'disputed')",
            name='lesson_confirmations_verdict_matches_status'
        ),
        ForeignKeyConstraint(['lesson_id'], ['lessons.id'], ondelete='CASCADE', name='lesson_confirmations_lesson_id_fkey'),
        PrimaryKeyConstraint('id', name='lesson_confirmations_pkey'),
        UniqueConstraint('lesson_id', name='lesson_confirmations_lesson_id_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    lesson_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    tutor_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text('false'))
    tutor_confirmed_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True))
    parent_confirmed: Mapped[Optional[bool]] = mapped_column(Boolean)
    parent_confirmed_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True))
    final_status: Mapped[str] = mapped_column(
        Enum(*ConfirmationStatusEnum.get_all_names(), name='confirmation_status_enum'),
        default=ConfirmationStatusEnum.UNCONFIRMED.value,
        server_default=text(f"'{ConfirmationStatusEnum.UNCONFIRMED.value}'")
    )
    dispute_note: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), server_default=func.now())

    lesson: Mapped['Lessons'] = relationship('Lessons', back_populates='confirmation')


class Testimonials(Base):
    __tablename__ = 'testimonials'
    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='testimonials_rating_check'),
        ForeignKeyConstraint(['tutor_id'], ['tutors.id'], ondelete='CASCADE', name='testimonials_tutor_id_fkey'),
        ForeignKeyConstraint(['parent_id'], ['parents.id'], ondelete='SET NULL', name='testimonials_parent_id_fkey'),
        PrimaryKeyConstraint('id', name='testimonials_pkey'),
        Index('idx_testimonials_tutor_id', 'tutor_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    rating: Mapped[int] = mapped_column(Integer)
    content: Mapped[Optional[str]] = mapped_column(Text)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text('true'))
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), server_default=func.now())

    tutor: Mapped['Tutors'] = relationship('Tutors', back_populates='testimonials')


class AvailabilitySlots(Base):
    __tablename__ = 'availability_slots'
    __table_args__ = (
        CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='availability_slots_day_of_week_check'),
        CheckConstraint('end_time > start_time', name='availability_slots_valid_time_range'),
        ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE', name='availability_slots_owner_id_fkey'),
        PrimaryKeyConstraint('id', name='availability_slots_pkey'),
        Index('idx_availability_slots_owner_id', 'owner_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    day_of_week: Mapped[int] = mapped_column(Integer)
    start_time: Mapped[datetime.time] = mapped_column(Time)
    end_time: Mapped[datetime.time] = mapped_column(Time)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text('true'))
