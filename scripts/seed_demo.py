#!/usr/bin/env python3
# scripts/seed_demo.py
"""
Seed a demo center: one admin, four practitioners, two kids with parents,
goals, a few weeks of sessions and their reports, and notifications.

People and kids use fixed demo3-* ids, so re-running first removes the
previous demo data and then writes it again.

Run:
    python scripts/seed_demo.py                 # store from config
    python scripts/seed_demo.py --store sqlite
    python scripts/seed_demo.py --cleanup       # only remove demo data
"""

import argparse
import logging
from datetime import datetime, timedelta

from therapy_center.config import get_config
from therapy_center.core.container import Container
from therapy_center.core.models import (
    Kid,
    KidPractitioner,
    LinkRole,
    Parent,
    Practitioner,
    PractitionerType,
    RecipientType,
    SessionStatus,
    SessionType,
)
from therapy_center.repositories import (
    AdminKeyRepository,
    KidPractitionerRepository,
    KidRepository,
    ParentRepository,
    PractitionerRepository,
)
from therapy_center.utils.dates import utc_now
from therapy_center.utils.log import configure_logging

logger = logging.getLogger("seed_demo")

# ==================== DETERMINISTIC IDs ====================
ADMIN_KEY = "demo3"
ADMIN_NAME = "מרכז טיפולי לדוגמה"
NOA_ID = "demo3-noa"
ORI_ID = "demo3-ori"
KID_IDS = (NOA_ID, ORI_ID)

PRACTITIONERS = [
    ("demo3-pract-sara", "שרה כהן", PractitionerType.THERAPIST, "050-1234567", "sara.k@example.com"),
    ("demo3-pract-ronit", "רונית לוי", PractitionerType.BEHAVIOR_ANALYST, "052-9876543", "ronit.l@example.com"),
    ("demo3-pract-dana", "דנה אברהם", PractitionerType.THERAPIST, "054-5551234", "dana.a@example.com"),
    ("demo3-pract-yael", "יעל מזרחי", PractitionerType.PARENT_GUIDE, "053-7778888", "yael.m@example.com"),
]
SARA_ID, RONIT_ID, DANA_ID, YAEL_ID = (p[0] for p in PRACTITIONERS)

PARENTS = [
    ("demo3-parent-noa-1", NOA_ID, "אבי דוד", "050-1112222"),
    ("demo3-parent-noa-2", NOA_ID, "מיכל דוד", "050-3334444"),
    ("demo3-parent-ori-1", ORI_ID, "יוסי לוי", "052-5556666"),
    ("demo3-parent-ori-2", ORI_ID, "רחל לוי", "052-7778888"),
]

TEAMS = {
    NOA_ID: [SARA_ID, RONIT_ID, YAEL_ID],
    ORI_ID: [DANA_ID, RONIT_ID, YAEL_ID],
}

GOALS = {
    NOA_ID: [
        ("להגיד משפטים של 3 מילים ומעלה", "language"),
        ("לשחק משחק תורות עם ילד אחר", "play-social"),
        ("לצבוע בתוך הקווים", "motor-fine"),
        ("להתלבש באופן עצמאי", "adl"),
    ],
    ORI_ID: [
        ("לבצע הוראה בת 3 שלבים", "cognitive"),
        ("לשבת על כיסא 10 דקות רצוף", "motor-gross"),
        ("לארגן תיק בית ספר באופן עצמאי", "adl"),
        ("להמתין לתור בלי להתפרץ", "general"),
    ],
}


def find_demo_admin_id(c: Container):
    record = AdminKeyRepository(c.store()).find_by_key(ADMIN_KEY)
    return record.admin_id if record else None


# ==================== CLEANUP ====================

def cleanup(c: Container) -> None:
    logger.info("Cleaning up previous demo data...")
    store = c.store()
    kids = KidRepository(store)

    for kid_id in KID_IDS:
        if kids.exists(kid_id):
            c.kid_service().delete_kid(kid_id)

    practitioner_refs = [PractitionerRepository(store).ref(p[0]) for p in PRACTITIONERS]
    store.delete_all(practitioner_refs)

    admin_id = find_demo_admin_id(c)
    if admin_id:
        c.notification_service().delete_all_sent(admin_id)
        c.admin_service().delete_admin(admin_id, caller_id=None)
    logger.info("Cleanup done")


# ==================== SEED ====================

def seed(c: Container) -> None:
    store = c.store()
    now = utc_now()
    monday = (now - timedelta(days=now.weekday())).replace(hour=10, minute=0, second=0, microsecond=0)

    c.goal_service().initialize_categories()

    logger.info("1. Admin key")
    admin = c.admin_service().create_admin_key(ADMIN_NAME, ADMIN_KEY, created_by=None)
    admin_id = admin.admin_id

    logger.info("2. Practitioners")
    practitioners = PractitionerRepository(store)
    for pid, name, ptype, mobile, email in PRACTITIONERS:
        practitioners.save(Practitioner(
            id=pid, name=name, type=ptype.value, mobile=mobile, email=email,
            created_at=now, created_by=admin_id,
        ))

    logger.info("3. Kids, parents and care teams")
    kids = KidRepository(store)
    kids.save(Kid(
        id=NOA_ID, name="נועה", age=5, gender="girl", admin_id=admin_id, created_at=now,
        extra={"colorSchema": "pink", "coinStyle": "points", "dailyReward": 1, "showDino": True},
    ))
    kids.save(Kid(
        id=ORI_ID, name="אורי", age=8, gender="boy", admin_id=admin_id, created_at=now,
        extra={"colorSchema": "blue", "coinStyle": "coins", "dailyReward": 2, "showDino": False},
    ))

    parents = ParentRepository(store)
    for parent_id, kid_id, name, mobile in PARENTS:
        parents.save(Parent(id=parent_id, kid_id=kid_id, name=name, mobile=mobile, created_at=now))

    links = KidPractitionerRepository(store)
    for kid_id, team in TEAMS.items():
        for index, practitioner_id in enumerate(team, start=1):
            role = LinkRole.THERAPIST if practitioner_id in (SARA_ID, DANA_ID) else LinkRole.ADMIN
            links.save(KidPractitioner(
                id=f"{kid_id}-kp-{index}", kid_id=kid_id, practitioner_id=practitioner_id,
                role=role.value, added_at=now, added_by=admin_id,
            ))

    logger.info("4. Goals")
    goals = {
        kid_id: [c.goal_service().add_goal_to_kid(kid_id, title, category) for title, category in items]
        for kid_id, items in GOALS.items()
    }

    logger.info("5. Sessions and reports")
    _seed_sessions(c, NOA_ID, SARA_ID, goals[NOA_ID], monday)
    _seed_sessions(c, ORI_ID, DANA_ID, goals[ORI_ID], monday + timedelta(days=1))

    logger.info("6. Notifications")
    notifications = c.notification_service()
    notifications.send(admin_id, NOA_ID, "נא למלא סיכום לטיפול של יום ראשון", RecipientType.PRACTITIONER, SARA_ID, "שרה כהן")
    notifications.send(admin_id, ORI_ID, "ישיבת צוות נקבעה לשבוע הבא", RecipientType.PRACTITIONER, YAEL_ID, "יעל מזרחי")
    notifications.send(admin_id, NOA_ID, "נועה התקדמה מאוד השבוע!", RecipientType.PARENT, "demo3-parent-noa-2", "מיכל דוד")

    logger.info("Demo data seeded")


def _seed_sessions(c: Container, kid_id: str, therapist_id: str, goals, anchor: datetime) -> None:
    """Three past weeks (two reported, one missed), this week and four upcoming left open, one meeting."""
    sessions = c.session_service()
    forms = c.form_service()

    weekly = sessions.schedule_recurring(
        kid_id, therapist_id, SessionType.THERAPY,
        anchor - timedelta(weeks=3), anchor + timedelta(weeks=4),
    )
    past = [s for s in weekly if s.scheduled_date < anchor - timedelta(days=6)]

    for week, session in enumerate(past[:2]):
        forms.submit_form({
            "sessionId": session.id,
            "kidId": kid_id,
            "practitionerId": therapist_id,
            "cooperation": 70 + 10 * week,
            "sessionDuration": 45,
            "sittingDuration": 15 + 5 * week,
            "mood": "שמחה ורגועה",
            "successes": "עבדה יפה על המטרות",
            "goalsWorkedOn": [
                {"goalId": g.id, "goalTitle": g.title, "categoryId": g.category_id}
                for g in goals[week:week + 2]
            ],
        })
    if len(past) > 2:
        sessions.update_session(past[2].id, {"status": SessionStatus.MISSED.value})

    meeting = sessions.schedule(kid_id, None, anchor - timedelta(days=2), SessionType.MEETING)
    forms.submit_meeting_form({
        "sessionId": meeting.id,
        "kidId": kid_id,
        "attendees": [
            {"id": RONIT_ID, "name": "רונית לוי", "type": RecipientType.PRACTITIONER.value},
            {"id": therapist_id, "name": "מטפלת", "type": RecipientType.PRACTITIONER.value},
        ],
        "generalNotes": "סיכום התקדמות חודשי",
        "tasks": "לעדכן את לוח המשימות בבית",
    })


def main():
    parser = argparse.ArgumentParser(
        description="Seed the therapy center demo data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--cleanup", action="store_true", help="Only remove demo data")
    parser.add_argument("--store", choices=["memory", "sqlite", "supabase"], help="Override STORE_TYPE")
    args = parser.parse_args()

    config = get_config()
    if args.store:
        config = config.model_copy(update={"store_type": args.store})
    configure_logging(config.log_level)

    c = Container(config=config)
    cleanup(c)
    if not args.cleanup:
        seed(c)


if __name__ == "__main__":
    main()
