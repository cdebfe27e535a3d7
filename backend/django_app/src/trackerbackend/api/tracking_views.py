import logging
from functools import wraps

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from trackerbackend.api import reporting
from trackerbackend.api.decorators import login_required_json
from trackerbackend.api.serializers import CompletionSerializer, MarkSerializer, TaskSerializer
from trackerbackend.api.store import TrackingStore
from trackerbackend.api.views import invalid, json_body

logger = logging.getLogger(__name__)


def reporting_errors(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except reporting.ReportingError as exc:
            logger.info('Statistics request failed: %s', exc)
            return JsonResponse({"error": str(exc)}, status=400)
    return wrapper


@csrf_exempt
@require_http_methods(["POST"])
@login_required_json
def mark(request):
    serializer = MarkSerializer(data=json_body(request))
    if not serializer.is_valid():
        return invalid(serializer)
    data = serializer.validated_data
    store = TrackingStore(request.user)
    task = store.get_task(data['timetable_id'])
    if task is None:
        return JsonResponse({"error": "Entry not found"}, status=404)
    record = store.upsert_completion(task, data['completion_date'], data['status'], data.get('notes'))
    return JsonResponse(CompletionSerializer(record).data, status=201)


@require_http_methods(["GET"])
@login_required_json
@reporting_errors
def daily(request, date: str):
    day = reporting.parse_day(date)
    store = TrackingStore(request.user)
    due = reporting.resolve_due(store.tasks(), day)
    completions = store.completions_on(day)
    return JsonResponse({
        "date": date,
        **reporting.aggregate(due, completions),
        "tasks": TaskSerializer(due, many=True).data,
        "completions": CompletionSerializer(completions, many=True).data,
    })


@require_http_methods(["GET"])
@login_required_json
@reporting_errors
def weekly(request, start_date: str):
    start = reporting.parse_day(start_date)
    store = TrackingStore(request.user)
    completions = store.completions_between(start, reporting.shift(start, reporting.WEEK_DAYS - 1))
    return JsonResponse({
        "startDate": start_date,
        **reporting.aggregate_week(store.tasks(), completions, start),
    })


@require_http_methods(["GET"])
@login_required_json
@reporting_errors
def monthly(request, year: int, month: int):
    first, last = reporting.month_bounds(year, month)
    store = TrackingStore(request.user)
    completions = store.completions_between(first, last)
    return JsonResponse({
        "year": year,
        "month": month,
        **reporting.aggregate_month(store.tasks(), completions, year, month),
    })


@require_http_methods(["GET"])
@login_required_json
def history(request, task_id: str):
    store = TrackingStore(request.user)
    task = store.get_task(task_id)
    if task is None:
        return JsonResponse({"error": "Entry not found"}, status=404)
    return JsonResponse(CompletionSerializer(store.history(task), many=True).data, safe=False)


@require_http_methods(["GET"])
@login_required_json
def stats(request):
    completions = TrackingStore(request.user).all_completions()
    return JsonResponse(reporting.compute_streak_and_badges(completions, timezone.localdate()))
