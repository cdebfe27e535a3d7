from django.core.validators import RegexValidator
from rest_framework import serializers

from trackerbackend.api.models import AudioLink, Completion, Target, Task
from trackerbackend.api.reporting import ReportingError, parse_day

MIN_PASSWORD_LENGTH = 6

time_of_day = RegexValidator(r'^([01]\d|2[0-3]):[0-5]\d$', 'Time must be HH:MM.')


def first_error(errors):
    """Flatten a serializer error dict to one readable message."""
    for field, messages in errors.items():
        if isinstance(messages, dict):
            return f'{field}: {first_error(messages)}'
        message = messages[0] if isinstance(messages, list) and messages else messages
        if field == 'non_field_errors':
            return str(message)
        return f'{field}: {message}'
    return 'Invalid input'


class TaskSerializer(serializers.ModelSerializer):
    start_time = serializers.CharField(max_length=5, validators=[time_of_day])
    end_time = serializers.CharField(max_length=5, validators=[time_of_day])
    exclude_days = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6),
        required=False,
    )

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'description', 'start_time', 'end_time',
            'is_recurring', 'exclude_days', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_exclude_days(self, value):
        return sorted(set(value))


class CompletionSerializer(serializers.ModelSerializer):
    timetable_id = serializers.CharField(source='task_id', read_only=True)
    completion_date = serializers.DateField(source='date', read_only=True)

    class Meta:
        model = Completion
        fields = ['id', 'timetable_id', 'completion_date', 'status', 'notes', 'created_at', 'updated_at']


class MarkSerializer(serializers.Serializer):
    timetable_id = serializers.CharField()
    completion_date = serializers.CharField()
    status = serializers.ChoiceField(choices=Completion.STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')

    def validate_completion_date(self, value):
        try:
            return parse_day(value)
        except ReportingError as exc:
            raise serializers.ValidationError(str(exc)) from exc


class TargetSerializer(serializers.ModelSerializer):
    isCompleted = serializers.BooleanField(source='is_completed', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Target
        fields = ['id', 'title', 'description', 'deadline', 'isCompleted', 'createdAt']
        read_only_fields = ['id']


class AudioLinkSerializer(serializers.ModelSerializer):
    originalLink = serializers.CharField(source='original_link')
    fileId = serializers.CharField(source='file_id', max_length=255)
    addedAt = serializers.DateTimeField(source='added_at', read_only=True)

    class Meta:
        model = AudioLink
        fields = ['id', 'title', 'originalLink', 'fileId', 'addedAt']
        read_only_fields = ['id']


class SignupSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, write_only=True, trim_whitespace=False)

    def validate_email(self, value):
        return value.strip().lower()


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)

    def validate_email(self, value):
        return value.strip().lower()
