"""Enrollment status emails.

Delivery is best-effort: callers go through ``notify_safely`` so a mail
failure is logged and never undoes a committed transition.
"""
import logging
import smtplib
from email.message import EmailMessage

from ..errors import NotificationError
from ..models.enrollment import EnrollmentStatus

logger = logging.getLogger(__name__)

SIGNATURE = "Best regards,\nAIMS Portal Team"


def render_status_email(recipient_name, course_code, course_title, status, audience_role):
    """Return (subject, body) for a status change."""
    course = f"{course_code} - {course_title}"
    status = EnrollmentStatus(status)
    if status is EnrollmentStatus.PENDING_INSTRUCTOR_APPROVAL:
        subject = f"Enrollment Request Submitted - {course_code}"
        lines = [f"Your enrollment request for {course} has been submitted.",
                 "Status: Pending Instructor Approval",
                 "You will be notified once the instructor reviews your request."]
    elif status is EnrollmentStatus.PENDING_ADVISOR_APPROVAL and audience_role == "ADVISOR":
        subject = f"New Enrollment Request - {course_code}"
        lines = [f"A student assigned to you has requested enrollment in {course}.",
                 "The instructor has already approved this request.",
                 "Status: Pending Your Approval",
                 "Please review and approve/reject the request in your dashboard."]
    elif status is EnrollmentStatus.PENDING_ADVISOR_APPROVAL:
        subject = f"Instructor Approved - Awaiting Advisor Approval - {course_code}"
        lines = [f"Your enrollment request for {course} has been approved by the instructor.",
                 "Status: Pending Faculty Advisor Approval",
                 "You will be notified once your advisor reviews the request."]
    elif status is EnrollmentStatus.ENROLLED:
        subject = f"Enrollment Confirmed - {course_code}"
        lines = [f"Your enrollment in {course} has been confirmed.",
                 "Status: Enrolled",
                 "Your timetable has been updated."]
    elif status is EnrollmentStatus.REJECTED:
        subject = f"Enrollment Request Rejected - {course_code}"
        lines = [f"Your enrollment request for {course} has been rejected.",
                 "Please contact your instructor or advisor for more details."]
    else:
        subject = f"Course Dropped - {course_code}"
        lines = [f"You have successfully dropped {course}.",
                 "Your timetable has been updated."]
    body = "\n\n".join([f"Dear {recipient_name},"] + lines + [SIGNATURE])
    return subject, body


class EmailNotifier:
    def __init__(self, server="", port=587, username="", password="",
                 sender="", timeout=10, allowlist=None, enforce_allowlist=False):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.timeout = timeout
        self.allowlist = {a.lower() for a in (allowlist or [])}
        self.enforce_allowlist = enforce_allowlist

    @classmethod
    def from_config(cls, config):
        return cls(
            server=config.get("MAIL_SERVER", ""),
            port=config.get("MAIL_PORT", 587),
            username=config.get("MAIL_USERNAME", ""),
            password=config.get("MAIL_PASSWORD", ""),
            sender=config.get("MAIL_DEFAULT_SENDER", ""),
            timeout=config.get("MAIL_TIMEOUT", 10),
            allowlist=config.get("MAIL_ALLOWLIST", []),
            enforce_allowlist=config.get("ENFORCE_MAIL_ALLOWLIST", False),
        )

    def notify(self, recipient_email, recipient_name, course_code, course_title,
               new_status, audience_role="STUDENT"):
        subject, body = render_status_email(recipient_name, course_code, course_title,
                                            new_status, audience_role)
        self.send(recipient_email, subject, body)

    def send(self, to_email, subject, body):
        if not self.server:
            logger.info("Mail not configured, skipping '%s' to %s", subject, to_email)
            return False
        if self.enforce_allowlist and to_email.lower() not in self.allowlist:
            logger.info("Email blocked by allowlist: %s", to_email)
            return False

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to_email
        msg.set_content(body)
        try:
            with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as server:
                server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Email send failed: {exc}") from exc
        logger.info("Email sent: '%s' to %s", subject, to_email)
        return True


def notify_safely(notifier, recipient_email, recipient_name, course_code, course_title,
                  new_status, audience_role="STUDENT"):
    if notifier is None or not recipient_email:
        return
    status = getattr(new_status, "value", new_status)
    try:
        notifier.notify(recipient_email, recipient_name, course_code, course_title,
                        status, audience_role)
    except Exception:
        logger.exception("Notification of %s to %s failed", status, recipient_email)
