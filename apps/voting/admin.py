"""
Admin configuration for the Voting app.
"""
from django.contrib import admin

from apps.voting.models import Vote


@admin.register(Vote)
class VoteAdmin(admin.ModelAdmin):
    list_display = ['hotel_name', 'group', 'user', 'is_upvote', 'weight', 'created_at']
    list_filter = ['is_upvote', 'weight', 'created_at']
    search_fields = ['hotel_name', 'hotel_id', 'user__email', 'group__name']
    readonly_fields = ['hotel_data', 'created_at', 'updated_at']
