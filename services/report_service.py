import logging
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.exceptions import ReportError
from repositories.feedback import FeedbackRepository
from utils.mailer import Mailer

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def format_long_date(day: date) -> str:
    return f"{day.day} {day:%B %Y}"


class ReportService:
    """Resumo diário dos feedbacks enviado por e-mail."""

    def __init__(self,
                 feedback_repo: FeedbackRepository,
                 mailer: Mailer,
                 recipients: List[str],
                 timezone_name: str = "Asia/Kolkata",
                 club_name: str = "Benares Club",
                 schedule_label: str = "11:00 PM"):
        self._feedback_repo = feedback_repo
        self._mailer = mailer
        self._recipients = list(recipients)
        self._tz = ZoneInfo(timezone_name)
        self._club_name = club_name
        self._schedule_label = schedule_label
        self._jinja = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"])
        )

    @property
    def recipients(self) -> List[str]:
        if not self._recipients:
            raise ReportError("REPORT_RECIPIENTS environment variable is not set")
        return self._recipients

    def today(self) -> date:
        return datetime.now(self._tz).date()

    def day_window(self, day: date) -> Tuple[datetime, datetime]:
        """Início e fim do dia no fuso do clube, convertidos para UTC."""
        start = datetime.combine(day, time.min, tzinfo=self._tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=self._tz)
        return start.astimezone(timezone.utc), end.astimezone(timezone.utc)

    def _local_time(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(self._tz).strftime("%I:%M %p")

    def render(self, feedback_count: int, feedback_details: List[dict], day: date) -> str:
        template = self._jinja.get_template("daily_report.html")
        rows = [
            {
                "time": self._local_time(item["created_at"]),
                "name": item.get("name"),
                "membership_number": item.get("membership_number"),
                "category": item.get("category"),
                "suggestion": item.get("suggestion"),
            }
            for item in feedback_details
        ]
        return template.render(
            club_name=self._club_name,
            formatted_date=format_long_date(day),
            feedback_count=feedback_count,
            feedbacks=rows,
            schedule_label=self._schedule_label,
            timezone_name=str(self._tz),
        )

    async def send_daily_report(self, day: Optional[date] = None) -> dict:
        day = day or self.today()
        recipients = self.recipients
        start, end = self.day_window(day)

        logger.info("Generating feedback report for %s (UTC %s -> %s)", day, start, end)
        feedback_count = await self._feedback_repo.count_between(start, end)
        feedback_details = await self._feedback_repo.list_between(start, end)

        html = self.render(feedback_count, feedback_details, day)
        subject = f"Daily Feedback Report - {format_long_date(day)} ({feedback_count} feedbacks)"
        message_id = await self._mailer.send(recipients, subject, html)

        logger.info("Report summary: %s feedbacks on %s", feedback_count, day)
        return {
            "success": True,
            "message_id": message_id,
            "feedback_count": feedback_count,
            "date": day.isoformat(),
        }

    async def send_error_notification(self, error: BaseException) -> None:
        """Avisa o primeiro destinatário que o relatório falhou. Nunca lança."""
        try:
            admin_email = self.recipients[0]
            now = datetime.now(self._tz).strftime("%d %B %Y %I:%M %p")
            html = (
                "<h2>Daily Report Generation Failed</h2>"
                f"<p><strong>Time:</strong> {now}</p>"
                f"<p><strong>Error:</strong> {error}</p>"
            )
            await self._mailer.send([admin_email], "Daily Report Generation Failed", html)
        except Exception:
            logger.exception("Failed to send report error notification")

    async def run_scheduled(self) -> None:
        """Job agendado: falhas são logadas e notificadas, nunca propagadas."""
        try:
            await self.send_daily_report()
        except Exception as e:
            logger.exception("Failed to send daily report")
            await self.send_error_notification(e)
