"""
Admin configuration for the Invitations app.
"""
from django.contrib import admin

from apps.invitations.models import Invitation


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ['invited_email', 'group', 'invited_by', 'status', 'expires_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['invited_email', 'group__name', 'invited_by__email']
    readonly_fields = ['responded_at', 'created_at', 'updated_at']
