"""
Voting schedule evaluation.

Derives the election state from the stored configuration and the current
time. Nothing here touches the store; callers load the configuration and
re-evaluate on every request so countdowns stay fresh.
"""

from datetime import datetime, timezone
from typing import Optional

from models.cosmos_documents import ElectionConfigDocument
from schemas.election import Countdown, ScheduleStatus, VotingStatus

NOT_SCHEDULED_MESSAGE = "Voting schedule has not been set."
DISABLED_MESSAGE = "Voting is currently disabled by the administrator."


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a schedule boundary for user-facing messages."""
    return as_utc(value).strftime("%Y-%m-%d %H:%M UTC")


def _remaining_ms(target: datetime, now: datetime) -> int:
    return int((target - now).total_seconds() * 1000)


def countdown(target: Optional[datetime], now: datetime) -> Countdown:
    """Split the time left until `target` into days/hours/minutes/seconds."""
    if target is None:
        return Countdown(expired=True)

    remaining = _remaining_ms(as_utc(target), as_utc(now))
    if remaining <= 0:
        return Countdown(expired=True)

    total_seconds = remaining // 1000
    return Countdown(
        expired=False,
        days=total_seconds // 86400,
        hours=(total_seconds % 86400) // 3600,
        minutes=(total_seconds % 3600) // 60,
        seconds=total_seconds % 60,
        total_ms=remaining,
    )


def format_duration(milliseconds: int) -> str:
    """Compact duration: '1d 2h 3m', '2h 3m 4s', '3m 4s' or '4s'."""
    seconds = max(milliseconds, 0) // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h {minutes % 60}m"
    if hours > 0:
        return f"{hours}h {minutes % 60}m {seconds % 60}s"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def evaluate_schedule(
    config: Optional[ElectionConfigDocument],
    now: Optional[datetime] = None,
) -> VotingStatus:
    """
    Derive the voting status.

    Rules, in order:
    1. No configuration -> not_scheduled
    2. is_active is false -> disabled (even inside the window)
    3. Missing start or end -> not_scheduled
    4. now < start -> not_started, counting down to start
    5. now > end -> ended
    6. otherwise -> active, counting down to end
    """
    now = as_utc(now) or datetime.now(timezone.utc)

    if config is None:
        return VotingStatus(status=ScheduleStatus.NOT_SCHEDULED, message=NOT_SCHEDULED_MESSAGE)

    if not config.is_active:
        return VotingStatus(status=ScheduleStatus.DISABLED, message=DISABLED_MESSAGE)

    start = as_utc(config.voting_start)
    end = as_utc(config.voting_end)

    if start is None or end is None:
        return VotingStatus(status=ScheduleStatus.NOT_SCHEDULED, message=NOT_SCHEDULED_MESSAGE)

    if now < start:
        return VotingStatus(
            status=ScheduleStatus.NOT_STARTED,
            message=f"Voting will begin at {format_timestamp(start)}",
            target_time=start,
            time_remaining_ms=_remaining_ms(start, now),
            countdown=countdown(start, now),
        )

    if now > end:
        return VotingStatus(
            status=ScheduleStatus.ENDED,
            message=f"Voting ended at {format_timestamp(end)}",
            target_time=end,
        )

    return VotingStatus(
        status=ScheduleStatus.ACTIVE,
        message=f"Voting is active until {format_timestamp(end)}",
        target_time=end,
        time_remaining_ms=_remaining_ms(end, now),
        countdown=countdown(end, now),
    )


def is_voting_active(
    config: Optional[ElectionConfigDocument],
    now: Optional[datetime] = None,
) -> bool:
    """True while the election is enabled and start <= now <= end."""
    return evaluate_schedule(config, now).is_active
