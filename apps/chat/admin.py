"""
Admin configuration for the Chat app.
"""
from django.contrib import admin

from apps.chat.models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['group', 'user', 'message_type', 'content', 'created_at']
    list_filter = ['message_type', 'created_at']
    search_fields = ['content', 'user__email', 'group__name']
