from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import EmailMessage, Notification


@admin.register(Notification)
class NotificationAdmin(ModelAdmin):
    list_display = ('title', 'recipient', 'kind', 'is_read', 'created_at')
    list_filter = ('kind', 'is_read')
    search_fields = ('title', 'recipient__email')


@admin.register(EmailMessage)
class EmailMessageAdmin(ModelAdmin):
    list_display = ('recipient_email', 'subject', 'message_type', 'status', 'created_at', 'sent_at')
    list_filter = ('status', 'message_type')
    search_fields = ('recipient_email', 'subject')
    readonly_fields = ('sent_at', 'error_message')
