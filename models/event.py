"""Event model."""

import uuid

from utils.timeutils import isoformat_utc, utcnow

from . import db


class Event(db.Model):
    """A scheduled event owned by a single user."""

    __tablename__ = "events"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(200), nullable=False)
    members = db.Column(db.Text, nullable=False)
    messages = db.Column(db.Text, nullable=False)
    datetime = db.Column(db.DateTime, nullable=False, index=True)
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    owner = db.relationship("User", back_populates="events")

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def to_dict(self) -> dict:
        """Serialize the event to a dictionary."""

        return {
            "id": self.id,
            "title": self.title,
            "members": self.members,
            "messages": self.messages,
            "datetime": isoformat_utc(self.datetime),
            "user_id": self.user_id,
            "created_at": isoformat_utc(self.created_at),
            "updated_at": isoformat_utc(self.updated_at),
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Event {self.title!r} at {self.datetime}>"
