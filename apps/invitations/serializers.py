"""
Serializers for the Invitations app.
"""
from rest_framework import serializers

from apps.groups.models import Group
from apps.invitations.models import Invitation
from apps.users.serializers import UserSerializer


class InvitationGroupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Group
        fields = ['id', 'name', 'description', 'check_in_date', 'check_out_date', 'status']
        read_only_fields = fields


class InvitationSerializer(serializers.ModelSerializer):
    group_id = serializers.UUIDField(read_only=True)
    group = InvitationGroupSerializer(read_only=True)
    invited_by = UserSerializer(read_only=True)
    invited_user_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Invitation
        fields = [
            'id', 'group_id', 'group', 'invited_by', 'invited_email', 'invited_user_id',
            'status', 'message', 'expires_at', 'responded_at', 'created_at',
        ]
        read_only_fields = fields


class InvitationCreateSerializer(serializers.Serializer):
    invited_email = serializers.EmailField(
        error_messages={'invalid': 'Invalid email address.'},
    )
    message = serializers.CharField(max_length=1000, required=False, allow_blank=True)
