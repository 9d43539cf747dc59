# src/therapy_center/api/schemas.py
"""
Request bodies.

JSON payloads use camelCase keys (the stored document shape); the models
expose snake_case attributes and dump back to camelCase for the services.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_fields(self) -> Dict[str, Any]:
        """Only the keys the client actually sent, camelCased."""
        return self.model_dump(by_alias=True, exclude_unset=True)


# =============================================================================
# KIDS & TEAM
# =============================================================================

class KidCreate(CamelModel):
    # Board configuration keys are accepted as-is
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str
    age: Optional[int] = None
    gender: Optional[str] = None
    image_name: Optional[str] = None


class KidUpdate(CamelModel):
    name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    image_name: Optional[str] = None


class PractitionerCreate(CamelModel):
    name: str
    mobile: Optional[str] = None
    email: Optional[str] = None
    type: Optional[str] = None


class PractitionerUpdate(CamelModel):
    name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    type: Optional[str] = None


class PractitionerLink(CamelModel):
    practitioner_id: str


class ParentCreate(CamelModel):
    name: str
    mobile: Optional[str] = None
    email: Optional[str] = None


class ParentUpdate(CamelModel):
    name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None


# =============================================================================
# GOALS
# =============================================================================

class GoalCreate(CamelModel):
    title: str
    category_id: str


class GoalUpdate(CamelModel):
    title: Optional[str] = None
    is_active: Optional[bool] = None


class LibraryItemCreate(CamelModel):
    title: str
    category_id: str


# =============================================================================
# SESSIONS & FORMS
# =============================================================================

class SessionCreate(CamelModel):
    therapist_id: Optional[str] = None
    scheduled_date: datetime
    type: str = "therapy"


class RecurringSessionsCreate(CamelModel):
    therapist_id: Optional[str] = None
    type: str = "therapy"
    start_date: datetime
    until: datetime


class GoalSnapshotIn(CamelModel):
    goal_id: str
    goal_title: Optional[str] = None
    category_id: Optional[str] = None


class FormIn(CamelModel):
    """Session report payload; every field is optional on update."""
    session_id: Optional[str] = None
    kid_id: Optional[str] = None
    practitioner_id: Optional[str] = None
    session_date: Optional[datetime] = None
    cooperation: Optional[float] = Field(None, ge=0, le=100)
    session_duration: Optional[float] = Field(None, ge=0)
    sitting_duration: Optional[float] = Field(None, ge=0)
    mood: Optional[str] = None
    concentration_level: Optional[str] = None
    new_reinforcers: Optional[str] = None
    words_produced: Optional[str] = None
    break_activities: Optional[str] = None
    end_of_session_activity: Optional[str] = None
    successes: Optional[str] = None
    difficulties: Optional[str] = None
    notes: Optional[str] = None
    goals_worked_on: Optional[List[GoalSnapshotIn]] = None
    additional_goals: Optional[List[str]] = None
    custom_fields: Optional[Dict[str, Any]] = None


class AttendeeIn(CamelModel):
    id: str
    name: str
    type: str


class MeetingFormIn(CamelModel):
    session_id: Optional[str] = None
    kid_id: Optional[str] = None
    session_date: Optional[datetime] = None
    attendees: Optional[List[AttendeeIn]] = None
    general_notes: Optional[str] = None
    behavior_notes: Optional[str] = None
    adl: Optional[str] = None
    gross_motor_programs: Optional[str] = None
    programs_outside_room: Optional[str] = None
    learning_programs_in_room: Optional[str] = None
    tasks: Optional[str] = None


class FormLinkCreate(CamelModel):
    kid_id: str
    session_id: Optional[str] = None


# =============================================================================
# NOTIFICATIONS, BOARD REQUESTS, ADMINS
# =============================================================================

class NotificationCreate(CamelModel):
    kid_id: Optional[str] = None
    message: str
    recipient_type: str
    recipient_id: str
    recipient_name: Optional[str] = ""


class RecipientAction(CamelModel):
    recipient_id: Optional[str] = None


class BoardRequestComplete(CamelModel):
    board_id: str


class AdminCreate(CamelModel):
    name: str
    key: str
    mobile: Optional[str] = None
    email: Optional[str] = None


class KeyChange(CamelModel):
    new_key: str
