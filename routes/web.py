"""Server-rendered pages built on the auth and events services."""

from __future__ import annotations

from functools import wraps
from urllib.parse import urlparse

from flask import (
    Blueprint,
    flash,
    g,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.exceptions import HTTPException

from models import db
from models.user import User
from services import auth as auth_service
from services import events as event_service
from utils.calendar_view import build_month, parse_day, parse_month
from utils.timeutils import utcnow

web_bp = Blueprint("web", __name__)

SESSION_TOKEN_KEY = "access_token"
SESSION_USER_KEY = "user"


def _store_session(user: User) -> None:
    """Keep the access token and public user profile in the signed session."""

    payload = auth_service.session_payload(user)
    session[SESSION_TOKEN_KEY] = payload["access_token"]
    session[SESSION_USER_KEY] = payload["user"]


def _session_user() -> User | None:
    token = session.get(SESSION_TOKEN_KEY)
    if not token:
        return None
    try:
        claims = decode_token(token)
    except (JWTExtendedException, PyJWTError):
        session.clear()
        flash("Your session has expired. Please log in again.", "error")
        return None
    user = db.session.get(User, claims["sub"])
    if user is None:
        session.clear()
    return user


def _safe_next(target: str | None) -> str:
    if target and not urlparse(target).netloc and target.startswith("/"):
        return target
    return url_for("web.index")


def login_required(view):
    """Redirect anonymous visitors to the login page."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        user = _session_user()
        if user is None:
            return redirect(url_for("web.login", next=request.full_path.rstrip("?")))
        g.user = user
        return view(*args, **kwargs)

    return wrapper


def _flash_error(error: HTTPException) -> None:
    errors = getattr(error, "errors", None)
    if errors:
        for item in errors:
            flash(item["message"], "error")
    else:
        flash(error.description, "error")


def _event_form_payload(form) -> dict:
    """Combine the calendar date and the time input into one ISO datetime."""

    payload = {
        "title": form.get("title", ""),
        "members": form.get("members", ""),
        "messages": form.get("messages", ""),
    }
    day = form.get("date", "").strip()
    time = form.get("time", "").strip()
    payload["datetime"] = f"{day}T{time}" if day and time else ""
    return payload


def _calendar_context(user: User):
    today = utcnow().date()
    selected = max(parse_day(request.args.get("date")) or today, today)
    view = parse_month(request.args.get("month"), selected)
    events = event_service.list_events(user.id)
    month = build_month(
        view,
        today=today,
        selected=selected,
        min_date=today,
        event_dates=(event.datetime.date() for event in events),
    )
    return {"events": events, "month": month, "selected_date": selected}


@web_bp.route("/", methods=["GET"])
@login_required
def index():
    return render_template("index.html", user=g.user, **_calendar_context(g.user))


@web_bp.route("/add", methods=["GET"])
@login_required
def add():
    return render_template("add.html", user=g.user, **_calendar_context(g.user))


@web_bp.route("/events", methods=["POST"])
@login_required
def create_event():
    next_url = _safe_next(request.form.get("next"))
    day = parse_day(request.form.get("date", "").strip())
    if day is not None and day < utcnow().date():
        flash("Please pick today or a later date.", "error")
        return redirect(next_url)
    try:
        event_service.create_event(g.user.id, _event_form_payload(request.form))
    except HTTPException as error:
        _flash_error(error)
        return redirect(next_url)
    flash("Event created.", "success")
    return redirect(url_for("web.index"))


@web_bp.route("/events/<event_id>/delete", methods=["POST"])
@login_required
def delete_event(event_id: str):
    try:
        event_service.delete_event(event_id, g.user.id)
    except HTTPException as error:
        _flash_error(error)
    else:
        flash("Event deleted.", "success")
    return redirect(url_for("web.index"))


@web_bp.route("/register", methods=["GET", "POST"])
def register():
    if request.method == "POST":
        form = {
            "name": request.form.get("name", ""),
            "email": request.form.get("email", ""),
            "password": request.form.get("password", ""),
        }
        try:
            auth_service.register_user(form)
        except HTTPException as error:
            _flash_error(error)
            return render_template("register.html", form=form), error.code
        return render_template("register.html", registered_email=form["email"].strip())
    return render_template("register.html", form={})


@web_bp.route("/login", methods=["GET", "POST"])
def login():
    next_url = _safe_next(request.values.get("next"))
    if request.method == "POST":
        form = {
            "email": request.form.get("email", ""),
            "password": request.form.get("password", ""),
        }
        try:
            user = auth_service.authenticate(form)
        except HTTPException as error:
            _flash_error(error)
            return (
                render_template("login.html", email=form["email"], next_url=next_url),
                error.code,
            )
        _store_session(user)
        return redirect(next_url)

    if _session_user() is not None:
        return redirect(next_url)
    return render_template("login.html", email="", next_url=next_url)


@web_bp.route("/verify-email", methods=["GET"])
def verify_email():
    token = request.args.get("token", "").strip()
    if not token:
        return render_template(
            "verify_email.html", status="error", message="Missing verification token"
        ), 400

    try:
        user = auth_service.verify_email({"token": token})
    except HTTPException as error:
        return render_template(
            "verify_email.html", status="error", message=error.description
        ), error.code

    _store_session(user)
    return render_template(
        "verify_email.html",
        status="success",
        message="Email verified successfully! Redirecting...",
    )


@web_bp.route("/profile", methods=["GET"])
@login_required
def profile():
    return render_template("profile.html", user=g.user)


@web_bp.route("/logout", methods=["POST"])
def logout():
    session.clear()
    flash("You have been logged out.", "success")
    return redirect(url_for("web.login"))
