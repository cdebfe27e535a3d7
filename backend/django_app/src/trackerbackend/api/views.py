import json
import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import User, update_last_login
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from trackerbackend.api.decorators import login_required_json, subscription_required
from trackerbackend.api.models import AudioLink, Subscription, Target
from trackerbackend.api.reporting import WEEK_DAYS, due_on_weekday, resolve_due
from trackerbackend.api.serializers import (
    AudioLinkSerializer,
    LoginSerializer,
    SignupSerializer,
    TargetSerializer,
    TaskSerializer,
    first_error,
)
from trackerbackend.api.store import TrackingStore
from trackerbackend.api.tokens import issue_token

logger = logging.getLogger(__name__)

SERVICE_NAME = 'timetable-tracker-backend'


def json_body(request):
    try:
        body = json.loads(request.body or b"{}")
    except ValueError:
        body = {}
    return body if isinstance(body, dict) else {}


def invalid(serializer):
    return JsonResponse({"error": first_error(serializer.errors), "details": serializer.errors}, status=400)


@require_http_methods(["GET"])
def healthz(request):
    return JsonResponse({"ok": True})


@require_http_methods(["GET"])
def ping(request):
    return JsonResponse({"ok": True, "service": SERVICE_NAME})


@require_http_methods(["GET"])
def health(request):
    return JsonResponse({"status": "ok", "message": "Timetable Tracker API is running"})


# Auth

def _user_json(user):
    return {"id": user.id, "name": user.first_name, "email": user.email}


@csrf_exempt
@require_http_methods(["POST"])
def register(request):
    serializer = SignupSerializer(data=json_body(request))
    if not serializer.is_valid():
        return invalid(serializer)
    data = serializer.validated_data
    email = data['email']
    if User.objects.filter(username=email).exists():
        return JsonResponse({"error": "Email already registered"}, status=409)
    user = User.objects.create_user(username=email, email=email, password=data['password'], first_name=data['name'])
    Subscription.objects.create(user=user)
    logger.info('Registered user %s', user.pk)
    return JsonResponse({"user": _user_json(user), "token": issue_token(user)}, status=201)


@csrf_exempt
@require_http_methods(["POST"])
def login_view(request):
    serializer = LoginSerializer(data=json_body(request))
    if not serializer.is_valid():
        return JsonResponse({"error": "Invalid login credentials"}, status=401)
    data = serializer.validated_data
    user = authenticate(request, username=data['email'], password=data['password'])
    if user is None:
        return JsonResponse({"error": "Invalid login credentials"}, status=401)
    update_last_login(None, user)
    return JsonResponse({"user": _user_json(user), "token": issue_token(user)})


@require_http_methods(["GET"])
def me(request):
    if request.user.is_authenticated:
        return JsonResponse({"user": _user_json(request.user)})
    return JsonResponse({"user": None})


# Timetable

@csrf_exempt
@require_http_methods(["GET", "POST"])
@subscription_required
def timetable(request):
    store = TrackingStore(request.user)
    if request.method == 'GET':
        return JsonResponse(TaskSerializer(store.tasks(), many=True).data, safe=False)
    serializer = TaskSerializer(data=json_body(request))
    if not serializer.is_valid():
        return invalid(serializer)
    task = serializer.save(user=request.user)
    return JsonResponse(TaskSerializer(task).data, status=201)


@require_http_methods(["GET"])
@subscription_required
def timetable_today(request):
    due = resolve_due(TrackingStore(request.user).tasks(), timezone.localdate())
    return JsonResponse(TaskSerializer(due, many=True).data, safe=False)


@require_http_methods(["GET"])
@subscription_required
def timetable_week(request):
    tasks = TrackingStore(request.user).tasks()
    week = {
        str(index): TaskSerializer(due_on_weekday(tasks, index), many=True).data
        for index in range(WEEK_DAYS)
    }
    return JsonResponse(week)


@csrf_exempt
@require_http_methods(["PUT", "DELETE"])
@subscription_required
def timetable_detail(request, task_id: str):
    task = TrackingStore(request.user).get_task(task_id)
    if task is None:
        return JsonResponse({"error": "Entry not found"}, status=404)
    if request.method == 'DELETE':
        task.delete()
        return JsonResponse({"message": "Entry deleted successfully"})
    serializer = TaskSerializer(task, data=json_body(request), partial=True)
    if not serializer.is_valid():
        return invalid(serializer)
    serializer.save()
    return JsonResponse(serializer.data)


# Targets

@csrf_exempt
@require_http_methods(["GET", "POST"])
@login_required_json
def targets(request):
    if request.method == 'GET':
        items = Target.objects.filter(user=request.user).order_by('deadline')
        return JsonResponse(TargetSerializer(items, many=True).data, safe=False)
    serializer = TargetSerializer(data=json_body(request))
    if not serializer.is_valid():
        return invalid(serializer)
    target = serializer.save(user=request.user)
    return JsonResponse(TargetSerializer(target).data, status=201)


@csrf_exempt
@require_http_methods(["PATCH"])
@login_required_json
def target_toggle(request, target_id: int):
    target = Target.objects.filter(user=request.user, pk=target_id).first()
    if target is None:
        return JsonResponse({"error": "Target not found"}, status=404)
    target.is_completed = not target.is_completed
    target.save(update_fields=['is_completed'])
    return JsonResponse(TargetSerializer(target).data)


@csrf_exempt
@require_http_methods(["DELETE"])
@login_required_json
def target_detail(request, target_id: int):
    deleted, _ = Target.objects.filter(user=request.user, pk=target_id).delete()
    if not deleted:
        return JsonResponse({"error": "Target not found"}, status=404)
    return JsonResponse({"message": "Target deleted"})


# Audio links

@csrf_exempt
@require_http_methods(["GET", "POST"])
@subscription_required
def audio(request):
    if request.method == 'GET':
        items = AudioLink.objects.filter(user=request.user).order_by('-added_at')
        return JsonResponse(AudioLinkSerializer(items, many=True).data, safe=False)
    serializer = AudioLinkSerializer(data=json_body(request))
    if not serializer.is_valid():
        return invalid(serializer)
    link = serializer.save(user=request.user)
    return JsonResponse(AudioLinkSerializer(link).data, status=201)


@csrf_exempt
@require_http_methods(["PATCH"])
@subscription_required
def audio_detail(request, audio_id: int):
    # links are permanent, only the title can change
    link = AudioLink.objects.filter(user=request.user, pk=audio_id).first()
    if link is None:
        return JsonResponse({"error": "Audio not found"}, status=404)
    serializer = AudioLinkSerializer(link, data={"title": json_body(request).get('title')}, partial=True)
    if not serializer.is_valid():
        return invalid(serializer)
    serializer.save()
    return JsonResponse(serializer.data)
