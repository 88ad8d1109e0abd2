"""User model definition."""

import secrets
import uuid
from datetime import datetime, timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from utils.timeutils import utcnow

from . import db


class User(db.Model):
    """An account that owns events once its email address is verified."""

    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    is_email_verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    verification_token = db.Column(db.String(64), unique=True, nullable=True)
    verification_token_exp = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    events = db.relationship(
        "Event",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    def issue_verification_token(self, ttl: timedelta) -> str:
        """Generate a fresh single-use verification token valid for ``ttl``."""

        self.verification_token = secrets.token_hex(32)
        self.verification_token_exp = utcnow() + ttl
        return self.verification_token

    def verification_expired(self, now: Optional[datetime] = None) -> bool:
        if self.verification_token_exp is None:
            return False
        return self.verification_token_exp < (now or utcnow())

    def mark_email_verified(self) -> None:
        """Activate the account and consume the verification token."""

        self.is_email_verified = True
        self.verification_token = None
        self.verification_token_exp = None

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name}

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
