from django.contrib import admin

from trackerbackend.api.models import AudioLink, Completion, Subscription, Target, Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'user', 'start_time', 'end_time', 'is_recurring')
    search_fields = ('title', 'user__email')


@admin.register(Completion)
class CompletionAdmin(admin.ModelAdmin):
    list_display = ('task', 'date', 'status')
    list_filter = ('status',)
    date_hierarchy = 'date'


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ('user', 'status', 'trial_ends_at', 'subscription_ends_at')
    list_filter = ('status',)


admin.site.register(Target)
admin.site.register(AudioLink)
