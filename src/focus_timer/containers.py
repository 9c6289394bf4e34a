"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from focus_timer.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from focus_timer.adapters.supabase_stats_repository import SupabaseStatsRepository
from focus_timer.adapters.supabase_task_repository import SupabaseTaskRepository
from focus_timer.config import Settings
from focus_timer.services.sessions import SessionService
from focus_timer.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    stats_service: StatsService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_service = SessionService(
        session_repository=SupabaseSessionRepository(supabase_client),
        task_repository=SupabaseTaskRepository(supabase_client),
        default_project=resolved_settings.default_project,
        max_page_size=resolved_settings.max_page_size,
    )
    stats_service = StatsService(
        repository=SupabaseStatsRepository(supabase_client),
        default_timezone=resolved_settings.stats_timezone,
    )
    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        stats_service=stats_service,
    )
