from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, JSON, String, UniqueConstraint, Uuid, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime as dt
import uuid

class Base(DeclarativeBase):
    pass


class Groups(Base):
    __tablename__ = 'groups'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255))

    schedule_config: Mapped[Optional['GroupScheduleConfigs']] = relationship(
        'GroupScheduleConfigs', back_populates='group', uselist=False
    )
    schedule_slots: Mapped[list['ScheduleSlots']] = relationship('ScheduleSlots', back_populates='group')


class Users(Base):
    __tablename__ = 'users'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    timezone: Mapped[str] = mapped_column(String(64), default='UTC', server_default=text("'UTC'"))


class Families(Base):
    __tablename__ = 'families'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255))

    members: Mapped[list['FamilyMembers']] = relationship('FamilyMembers', back_populates='family', cascade='all, delete-orphan')


class FamilyMembers(Base):
    __tablename__ = 'family_members'

    family_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('families.id', ondelete='CASCADE'), primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True)

    family: Mapped['Families'] = relationship('Families', back_populates='members')


class Vehicles(Base):
    __tablename__ = 'vehicles'
    __table_args__ = (
        CheckConstraint('capacity > 0', name='vehicles_capacity_positive'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255))
    capacity: Mapped[int] = mapped_column(Integer)
    family_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey('families.id', ondelete='CASCADE'), index=True)


class Children(Base):
    __tablename__ = 'children'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255))
    family_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey('families.id', ondelete='CASCADE'), index=True)


class ScheduleSlots(Base):
    __tablename__ = 'schedule_slots'
    __table_args__ = (
        Index('schedule_slots_group_id_datetime_idx', 'group_id', 'datetime'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('groups.id', ondelete='CASCADE'))
    datetime: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True))

    group: Mapped['Groups'] = relationship('Groups', back_populates='schedule_slots')
    vehicle_assignments: Mapped[list['ScheduleSlotVehicles']] = relationship(
        'ScheduleSlotVehicles', back_populates='schedule_slot', cascade='all, delete-orphan'
    )
    child_assignments: Mapped[list['ScheduleSlotChildren']] = relationship(
        'ScheduleSlotChildren', back_populates='schedule_slot', cascade='all, delete-orphan'
    )


class ScheduleSlotVehicles(Base):
    __tablename__ = 'schedule_slot_vehicles'
    __table_args__ = (
        CheckConstraint('seat_override IS NULL OR (seat_override >= 0 AND seat_override <= 10)', name='seat_override_bounds'),
        UniqueConstraint('schedule_slot_id', 'vehicle_id', name='schedule_slot_vehicles_slot_vehicle_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    schedule_slot_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('schedule_slots.id', ondelete='CASCADE'), index=True)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('vehicles.id', ondelete='CASCADE'), index=True)
    driver_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey('users.id', ondelete='SET NULL'), index=True)
    seat_override: Mapped[Optional[int]] = mapped_column(Integer)

    schedule_slot: Mapped['ScheduleSlots'] = relationship('ScheduleSlots', back_populates='vehicle_assignments')
    vehicle: Mapped['Vehicles'] = relationship('Vehicles')
    driver: Mapped[Optional['Users']] = relationship('Users')


class ScheduleSlotChildren(Base):
    __tablename__ = 'schedule_slot_children'

    schedule_slot_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('schedule_slots.id', ondelete='CASCADE'), primary_key=True)
    child_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('children.id', ondelete='CASCADE'), primary_key=True)
    vehicle_assignment_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey('schedule_slot_vehicles.id', ondelete='SET NULL'))

    schedule_slot: Mapped['ScheduleSlots'] = relationship('ScheduleSlots', back_populates='child_assignments')
    child: Mapped['Children'] = relationship('Children')


class GroupScheduleConfigs(Base):
    __tablename__ = 'group_schedule_configs'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('groups.id', ondelete='CASCADE'), unique=True)
    # { "MONDAY": ["07:00", "07:30"], ... } with every time in UTC
    schedule_hours: Mapped[dict] = mapped_column(JSON().with_variant(JSONB(), 'postgresql'))

    group: Mapped['Groups'] = relationship('Groups', back_populates='schedule_config')
