"""Calendar event repository implementation using PostgreSQL."""
from app.models.planning import CalendarEvent
from app.repositories.base import AccountScopedRepository


class CalendarEventRepository(AccountScopedRepository[CalendarEvent]):
    model = CalendarEvent

    def _default_order(self):
        return (CalendarEvent.start_date.asc(), CalendarEvent.id.asc())
