# src/therapy_center/core/models.py
"""
Domain models for the therapy center.

Pure data classes for the stored entities. Attributes are snake_case;
to_doc()/from_doc() convert to and from the persisted camelCase document
shape. Dates are normalized to aware UTC datetimes on construction.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from ..utils.dates import to_date, to_optional_date


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _dump(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, DocumentModel):
        return value.to_doc()
    if isinstance(value, list):
        return [_dump(v) for v in value]
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    return value


class DocumentModel:
    """Mixin for dataclasses persisted as camelCase documents."""

    # Fields normalized with to_date; required dates fall back to "now" when unparsable
    DATE_FIELDS: ClassVar[Tuple[str, ...]] = ()
    OPTIONAL_DATE_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def __post_init__(self):
        for name in self.DATE_FIELDS:
            setattr(self, name, to_date(getattr(self, name)))
        for name in self.OPTIONAL_DATE_FIELDS:
            setattr(self, name, to_optional_date(getattr(self, name)))

    def to_doc(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        doc: Dict[str, Any] = dict(getattr(self, "extra", None) or {})
        for f in fields(self):
            if f.name == "extra":
                continue
            doc[to_camel(f.name)] = _dump(getattr(self, f.name))
        return doc

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]):
        """Build from a stored document; unknown keys land in `extra` when the model keeps them."""
        names = {to_camel(f.name): f.name for f in fields(cls) if f.name != "extra"}
        keeps_extra = any(f.name == "extra" for f in fields(cls))
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in doc.items():
            if key in names:
                kwargs[names[key]] = value
            elif keeps_extra:
                extra[key] = value
        if keeps_extra:
            kwargs["extra"] = extra
        return cls(**kwargs)


# =============================================================================
# ENUMS & CONSTANTS
# =============================================================================

class SessionStatus(str, Enum):
    """Session lifecycle states."""
    SCHEDULED = "scheduled"
    PENDING_FORM = "pending_form"
    COMPLETED = "completed"
    MISSED = "missed"


class SessionType(str, Enum):
    """Kind of encounter; selects which form collection holds the report."""
    THERAPY = "therapy"
    MEETING = "meeting"


class RecipientType(str, Enum):
    PRACTITIONER = "practitioner"
    PARENT = "parent"


class PractitionerType(str, Enum):
    THERAPIST = "מטפלת"
    BEHAVIOR_ANALYST = "מנתחת התנהגות"
    PARENT_GUIDE = "מדריכת הורים"


class LinkRole(str, Enum):
    THERAPIST = "therapist"
    ADMIN = "admin"


class BoardRequestStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class TemplateSectionType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    PERCENTAGE = "percentage"


@dataclass
class GoalCategory(DocumentModel):
    """One of the fixed goal categories."""
    id: str
    name: str
    name_he: str
    order: int
    color: str


GOAL_CATEGORIES: List[GoalCategory] = [
    GoalCategory("motor-gross", "Gross Motor", "מוטוריקה גסה", 1, "#4CAF50"),
    GoalCategory("motor-fine", "Fine Motor", "מוטוריקה עדינה", 2, "#2196F3"),
    GoalCategory("language", "Language/Communication", "שפה/תקשורת", 3, "#FF9800"),
    GoalCategory("play-social", "Play/Social", "משחק/חברה", 4, "#E91E63"),
    GoalCategory("cognitive", "Cognitive", "קוגנטיבי", 5, "#9C27B0"),
    GoalCategory("adl", "ADL", "ADL", 6, "#00BCD4"),
    GoalCategory("general", "General", "כללי", 7, "#607D8B"),
]

GOAL_CATEGORY_IDS = frozenset(c.id for c in GOAL_CATEGORIES)


# =============================================================================
# KIDS & TEAM
# =============================================================================

@dataclass
class FormTemplateSection(DocumentModel):
    """One field of a kid's session report template."""
    id: str = ""
    label: str = ""
    type: str = TemplateSectionType.TEXT.value
    order: int = 0
    is_default: bool = False


DEFAULT_FORM_TEMPLATE: List[FormTemplateSection] = [
    FormTemplateSection("cooperation", "שיתוף פעולה", "percentage", 1, True),
    FormTemplateSection("sessionDuration", "משך הטיפול (דקות)", "number", 2, True),
    FormTemplateSection("sittingDuration", "משך ישיבה (דקות)", "number", 3, True),
    FormTemplateSection("mood", "מצב רוח", "text", 4, True),
    FormTemplateSection("concentrationLevel", "רמת ריכוז / עייפות", "text", 5, True),
    FormTemplateSection("newReinforcers", "מחזקים (חדשים)", "text", 6, True),
    FormTemplateSection("wordsProduced", "מילים שהפיק", "text", 7, True),
    FormTemplateSection("breakActivities", "פעילות בהפסקות", "text", 8, True),
    FormTemplateSection("endOfSessionActivity", "פעילות סוף שיעור", "text", 9, True),
    FormTemplateSection("successes", "הצלחות", "text", 10, True),
    FormTemplateSection("difficulties", "קשיים", "text", 11, True),
    FormTemplateSection("notes", "הערות", "text", 12, True),
]


@dataclass
class Kid(DocumentModel):
    """Therapy recipient; aggregation root for goals, sessions and reports."""
    id: str = ""
    name: str = ""
    age: Optional[int] = None
    gender: str = ""
    admin_id: Optional[str] = None
    image_name: Optional[str] = None
    form_template: Optional[List[FormTemplateSection]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Board configuration (tasks, rewards, theme...) passed through untouched
    extra: Dict[str, Any] = field(default_factory=dict)

    OPTIONAL_DATE_FIELDS = ("created_at", "updated_at")

    def __post_init__(self):
        super().__post_init__()
        if self.form_template is not None:
            self.form_template = [
                s if isinstance(s, FormTemplateSection) else FormTemplateSection.from_doc(s)
                for s in self.form_template
            ]


@dataclass
class Practitioner(DocumentModel):
    id: str = ""
    name: str = ""
    mobile: Optional[str] = None
    email: Optional[str] = None
    type: str = PractitionerType.THERAPIST.value
    is_super_admin: bool = False
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    OPTIONAL_DATE_FIELDS = ("created_at",)


@dataclass
class KidPractitioner(DocumentModel):
    """Many-to-many link between a kid and a practitioner."""
    id: str = ""
    kid_id: str = ""
    practitioner_id: str = ""
    role: str = LinkRole.THERAPIST.value
    added_at: Optional[datetime] = None
    added_by: Optional[str] = None

    OPTIONAL_DATE_FIELDS = ("added_at",)


@dataclass
class Parent(DocumentModel):
    id: str = ""
    kid_id: str = ""
    name: str = ""
    mobile: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    OPTIONAL_DATE_FIELDS = ("created_at",)


# =============================================================================
# SESSIONS & FORMS
# =============================================================================

@dataclass
class Session(DocumentModel):
    """A scheduled or completed therapy/meeting encounter."""
    id: str = ""
    kid_id: str = ""
    therapist_id: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    type: SessionType = SessionType.THERAPY
    status: SessionStatus = SessionStatus.SCHEDULED
    form_id: Optional[str] = None
    created_at: Optional[datetime] = None

    DATE_FIELDS = ("scheduled_date",)
    OPTIONAL_DATE_FIELDS = ("created_at",)

    def __post_init__(self):
        super().__post_init__()
        # Sessions written before meeting forms existed carry no type
        self.type = SessionType(self.type or SessionType.THERAPY)
        self.status = SessionStatus(self.status)

    @property
    def is_open(self) -> bool:
        """Still waiting for a report."""
        return self.status in (SessionStatus.SCHEDULED, SessionStatus.PENDING_FORM)


@dataclass
class GoalSnapshot(DocumentModel):
    """Frozen copy of a goal as it was when a report was written."""
    goal_id: str = ""
    goal_title: str = ""
    category_id: str = ""


@dataclass
class SessionForm(DocumentModel):
    """Session report written by a practitioner."""
    id: str = ""
    session_id: str = ""
    kid_id: str = ""
    practitioner_id: Optional[str] = None
    session_date: Optional[datetime] = None
    cooperation: Optional[float] = None
    session_duration: Optional[float] = None
    sitting_duration: Optional[float] = None
    mood: str = ""
    concentration_level: str = ""
    new_reinforcers: str = ""
    words_produced: str = ""
    break_activities: str = ""
    end_of_session_activity: str = ""
    successes: str = ""
    difficulties: str = ""
    notes: str = ""
    goals_worked_on: List[GoalSnapshot] = field(default_factory=list)
    additional_goals: List[str] = field(default_factory=list)
    custom_fields: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    DATE_FIELDS = ("session_date",)
    OPTIONAL_DATE_FIELDS = ("created_at", "updated_at")

    def __post_init__(self):
        super().__post_init__()
        self.goals_worked_on = [
            g if isinstance(g, GoalSnapshot) else GoalSnapshot.from_doc(g)
            for g in self.goals_worked_on or []
        ]
        self.additional_goals = list(self.additional_goals or [])
        self.custom_fields = dict(self.custom_fields or {})


@dataclass
class Attendee(DocumentModel):
    id: str = ""
    name: str = ""
    type: str = RecipientType.PARENT.value


@dataclass
class MeetingForm(DocumentModel):
    """Report of a multidisciplinary team meeting."""
    id: str = ""
    session_id: str = ""
    kid_id: str = ""
    session_date: Optional[datetime] = None
    attendees: List[Attendee] = field(default_factory=list)
    general_notes: str = ""
    behavior_notes: str = ""
    adl: str = ""
    gross_motor_programs: str = ""
    programs_outside_room: str = ""
    learning_programs_in_room: str = ""
    tasks: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    DATE_FIELDS = ("session_date",)
    OPTIONAL_DATE_FIELDS = ("created_at", "updated_at")

    def __post_init__(self):
        super().__post_init__()
        self.attendees = [
            a if isinstance(a, Attendee) else Attendee.from_doc(a)
            for a in self.attendees or []
        ]


@dataclass
class FormToken(DocumentModel):
    """One-time token behind a shareable form link. The token is the document id."""
    id: str = ""
    kid_id: str = ""
    session_id: Optional[str] = None
    used: bool = False
    created_at: Optional[datetime] = None

    OPTIONAL_DATE_FIELDS = ("created_at",)


# =============================================================================
# GOALS
# =============================================================================

@dataclass
class Goal(DocumentModel):
    id: str = ""
    kid_id: str = ""
    category_id: str = ""
    title: str = ""
    is_active: bool = True
    created_at: Optional[datetime] = None
    deactivated_at: Optional[datetime] = None

    OPTIONAL_DATE_FIELDS = ("created_at", "deactivated_at")

    @property
    def library_key(self) -> Tuple[str, str]:
        return (self.title, self.category_id)


@dataclass
class GoalLibraryItem(DocumentModel):
    """Cross-kid catalog entry; usage_count ranks autocomplete suggestions."""
    id: str = ""
    title: str = ""
    category_id: str = ""
    usage_count: int = 0

    @property
    def library_key(self) -> Tuple[str, str]:
        return (self.title, self.category_id)


# =============================================================================
# NOTIFICATIONS, BOARD REQUESTS, ADMIN KEYS
# =============================================================================

@dataclass
class Notification(DocumentModel):
    """
    Message from an admin to a practitioner or parent.

    `dismissed` hides it from the recipient and `dismissed_by_admin` hides it
    from the sender; neither removes the row.
    """
    id: str = ""
    kid_id: Optional[str] = None
    admin_id: str = ""
    message: str = ""
    recipient_type: str = RecipientType.PRACTITIONER.value
    recipient_id: str = ""
    recipient_name: str = ""
    read: bool = False
    read_at: Optional[datetime] = None
    dismissed: bool = False
    dismissed_by_admin: bool = False
    created_at: Optional[datetime] = None

    OPTIONAL_DATE_FIELDS = ("read_at", "created_at")


@dataclass
class BoardRequest(DocumentModel):
    """Parent-submitted request for a kid's reward board."""
    id: str = ""
    child_name: str = ""
    parent_name: str = ""
    email: str = ""
    phone: str = ""
    age: Optional[int] = None
    gender: str = ""
    child_description: str = ""
    tasks: List[Any] = field(default_factory=list)
    behavior_goals: List[Any] = field(default_factory=list)
    rewards: List[Any] = field(default_factory=list)
    additional_notes: str = ""
    status: str = BoardRequestStatus.PENDING.value
    created_board_id: Optional[str] = None
    submitted_at: Optional[datetime] = None
    # Board styling options (coinStyle, colorSchema, showDino...) passed through
    extra: Dict[str, Any] = field(default_factory=dict)

    OPTIONAL_DATE_FIELDS = ("submitted_at",)


@dataclass
class AdminKey(DocumentModel):
    """Shared-secret access key of a center admin."""
    id: str = ""
    key: str = ""
    admin_id: str = ""
    name: str = ""
    is_super_admin: bool = False
    active: bool = True
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    OPTIONAL_DATE_FIELDS = ("created_at",)
