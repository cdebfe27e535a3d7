"""Completion statistics, streaks and badges.

Everything here is a pure function of the tasks and completion records handed
in. Fetching them (and scoping them to the requesting user) is the caller's
job, see ``store.TrackingStore``.

Tasks only need ``id`` and ``exclude_days``; completions only need
``task_id``, ``date`` and ``status``. Model instances work as they are.
"""
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.utils.dateparse import parse_date, parse_datetime

STATUS_COMPLETED = 'completed'
STATUS_MISSED = 'missed'

WEEK_DAYS = 7

# (id, name, description, metric, threshold), evaluated in this order
BADGE_RULES = (
    ('streak_3', '3-Day Streak', 'Completed tasks 3 days in a row', 'currentStreak', 3),
    ('streak_7', 'Week Warrior', 'Completed tasks 7 days in a row', 'currentStreak', 7),
    ('streak_30', 'Monthly Master', 'Completed tasks 30 days in a row', 'currentStreak', 30),
    ('first_win', 'First Win', 'Completed your first task', 'totalCompleted', 1),
    ('completed_10', 'Getting Started', 'Completed 10 tasks', 'totalCompleted', 10),
    ('completed_50', 'Consistent Achiever', 'Completed 50 tasks', 'totalCompleted', 50),
    ('completed_100', 'Century Club', 'Completed 100 tasks', 'totalCompleted', 100),
)


class ReportingError(Exception):
    """Raised when a statistics request cannot be computed."""


def parse_day(value) -> date:
    """Return the calendar date of a ``YYYY-MM-DD`` or ISO datetime string."""
    if isinstance(value, date):
        return value
    text = str(value or '').strip()
    try:
        parsed = parse_date(text)
        if parsed is None:
            moment = parse_datetime(text)
            parsed = moment.date() if moment is not None else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ReportingError(f'Invalid date: {value!r}')
    return parsed


def weekday_index(day: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return day.isoweekday() % 7


def days_in_month(year: int, month: int) -> int:
    if not 1 <= month <= 12:
        raise ReportingError(f'Invalid month: {month}')
    if month == 12:
        return 31
    try:
        # day 0 of the next month
        first_of_next = date(year, month + 1, 1)
    except ValueError as exc:
        raise ReportingError(f'Invalid year: {year}') from exc
    return (first_of_next - timedelta(days=1)).day


def shift(day: date, offset: int) -> date:
    try:
        return day + timedelta(days=offset)
    except OverflowError as exc:
        raise ReportingError(f'Date out of range: {day.isoformat()} + {offset} days') from exc


def due_on_weekday(tasks, index: int) -> list:
    return [task for task in tasks if index not in (task.exclude_days or [])]


def resolve_due(tasks, day: date) -> list:
    """Tasks due on ``day``: those not excluding its weekday.

    ``is_recurring`` is not consulted.
    """
    return due_on_weekday(tasks, weekday_index(day))


def completion_rate(completed: int, total: int):
    if total == 0:
        return 0
    # half-up on the exact fraction, so 1/16 reports 6.3
    rate = Decimal(completed * 100) / Decimal(total)
    return float(rate.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def _summarize(total: int, completed: int, missed: int) -> dict:
    return {
        'total': total,
        'completed': completed,
        'missed': missed,
        'pending': total - completed - missed,
        'completionRate': completion_rate(completed, total),
    }


def aggregate(due_tasks, completions) -> dict:
    """Counts and completion rate for one day.

    Only completions referencing one of ``due_tasks`` are counted.
    """
    due_ids = {task.id for task in due_tasks}
    completed = missed = 0
    for record in completions:
        if record.task_id not in due_ids:
            continue
        if record.status == STATUS_COMPLETED:
            completed += 1
        elif record.status == STATUS_MISSED:
            missed += 1
    return _summarize(len(due_ids), completed, missed)


def aggregate_range(tasks, completions, start: date, days: int) -> dict:
    """Daily statistics for ``days`` consecutive dates from ``start``.

    The summary rate is recomputed from the summed counts.
    """
    by_date = {}
    for record in completions:
        by_date.setdefault(record.date, []).append(record)

    daily = []
    total = completed = missed = 0
    for offset in range(days):
        current = shift(start, offset)
        stats = aggregate(resolve_due(tasks, current), by_date.get(current, ()))
        daily.append({
            'date': current.isoformat(),
            'dayOfWeek': weekday_index(current),
            **stats,
        })
        total += stats['total']
        completed += stats['completed']
        missed += stats['missed']

    return {'days': daily, 'summary': _summarize(total, completed, missed)}


def aggregate_week(tasks, completions, start: date) -> dict:
    return aggregate_range(tasks, completions, start, WEEK_DAYS)


def month_bounds(year: int, month: int):
    """First and last calendar date of a month."""
    last_day = days_in_month(year, month)
    try:
        return date(year, month, 1), date(year, month, last_day)
    except ValueError as exc:
        raise ReportingError(f'Invalid year: {year}') from exc


def aggregate_month(tasks, completions, year: int, month: int) -> dict:
    first, last = month_bounds(year, month)
    result = aggregate_range(tasks, completions, first, last.day)
    for day_number, entry in enumerate(result['days'], start=1):
        entry['day'] = day_number
    return result


def current_streak(completions, today: date) -> int:
    """Consecutive days with at least one completed record.

    The streak only counts while its most recent day is today or yesterday.
    Records dated after ``today`` are ignored.
    """
    dates = sorted(
        {record.date for record in completions
         if record.status == STATUS_COMPLETED and record.date <= today},
        reverse=True,
    )
    if not dates or (today - dates[0]).days not in (0, 1):
        return 0

    streak = 1
    for newer, older in zip(dates, dates[1:]):
        if (newer - older).days != 1:
            break
        streak += 1
    return streak


def earned_badges(metrics: dict) -> list:
    return [
        {'id': badge_id, 'name': name, 'description': description}
        for badge_id, name, description, metric, threshold in BADGE_RULES
        if metrics[metric] >= threshold
    ]


def compute_streak_and_badges(completions, today: date) -> dict:
    """Streak, totals and badges over all of a user's completion records."""
    completions = list(completions)
    metrics = {
        'currentStreak': current_streak(completions, today),
        'totalCompleted': sum(1 for r in completions if r.status == STATUS_COMPLETED),
        'totalMissed': sum(1 for r in completions if r.status == STATUS_MISSED),
    }
    metrics['badges'] = earned_badges(metrics)
    return metrics
