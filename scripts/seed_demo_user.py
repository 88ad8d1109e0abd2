"""Seed a verified demo user with a few sample events."""

from datetime import timedelta

from app import create_app
from models import db
from models.event import Event
from models.user import User
from utils.timeutils import utcnow

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "DemoPass123"
DEMO_NAME = "Demo User"

SAMPLE_EVENTS = [
    ("Team Meeting", "John, Jane, Bob", "Discuss project timeline and deliverables", 1),
    ("Design Review", "Sarah, Mike", "Walk through the new calendar screens", 3),
    ("Retro", "Whole team", "What went well, what to improve", 7),
]


def main() -> None:
    app = create_app()
    with app.app_context():
        user = User.query.filter_by(email=DEMO_EMAIL).first()
        if user is None:
            user = User(email=DEMO_EMAIL, name=DEMO_NAME)
            db.session.add(user)
            action = "created"
        else:
            action = "updated"
        user.set_password(DEMO_PASSWORD)
        user.mark_email_verified()
        db.session.flush()

        if user.events.count() == 0:
            start = utcnow().replace(hour=10, minute=0, second=0, microsecond=0)
            for title, members, messages, days_ahead in SAMPLE_EVENTS:
                db.session.add(
                    Event(
                        user_id=user.id,
                        title=title,
                        members=members,
                        messages=messages,
                        datetime=start + timedelta(days=days_ahead),
                    )
                )
        db.session.commit()
        print(f"Demo user {action}: {DEMO_EMAIL} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
