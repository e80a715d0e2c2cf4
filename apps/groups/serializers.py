"""
Serializers for the Groups app.
"""
from django.db import transaction
from rest_framework import serializers

from apps.groups.models import Group, GroupMember
from apps.users.serializers import UserSerializer


class GroupMemberSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True)
    group_id = serializers.UUIDField(read_only=True)
    user = UserSerializer(read_only=True)

    class Meta:
        model = GroupMember
        fields = ['id', 'user_id', 'group_id', 'role', 'joined_at', 'user']
        read_only_fields = fields


class GroupSerializer(serializers.ModelSerializer):
    created_by = serializers.UUIDField(source='created_by_id', read_only=True)
    member_count = serializers.SerializerMethodField()
    user_role = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id', 'name', 'description', 'check_in_date', 'check_out_date',
            'max_members', 'status', 'selected_hotel_id', 'selected_hotel_data',
            'created_by', 'member_count', 'user_role', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        # Uses the prefetched members when the view provides them
        return len(obj.members.all())

    def get_user_role(self, obj):
        request = self.context.get('request')
        if request is None:
            return None
        for member in obj.members.all():
            if member.user_id == request.user.id:
                return member.role
        return None


class GroupDetailSerializer(GroupSerializer):
    members = GroupMemberSerializer(many=True, read_only=True)

    class Meta(GroupSerializer.Meta):
        fields = GroupSerializer.Meta.fields + ['members']
        read_only_fields = fields


def _validate_dates(check_in, check_out):
    if check_in and check_out and check_out <= check_in:
        raise serializers.ValidationError(
            {'check_out_date': 'Check-out date must be after check-in date.'}
        )


class GroupCreateSerializer(serializers.ModelSerializer):
    invite_emails = serializers.ListField(
        child=serializers.EmailField(),
        required=False,
        write_only=True,
        max_length=50,
    )

    class Meta:
        model = Group
        fields = ['name', 'description', 'check_in_date', 'check_out_date', 'max_members', 'invite_emails']
        extra_kwargs = {'max_members': {'min_value': 2, 'max_value': 50}}

    def validate(self, attrs):
        _validate_dates(attrs.get('check_in_date'), attrs.get('check_out_date'))
        return attrs

    def create(self, validated_data):
        user = self.context['request'].user
        self.invite_emails = validated_data.pop('invite_emails', [])
        validated_data['created_by'] = user
        with transaction.atomic():
            group = Group.objects.create(**validated_data)
            GroupMember.objects.create(group=group, user=user, role=GroupMember.Role.OWNER)
        return group


class GroupUpdateSerializer(serializers.ModelSerializer):
    """
    Partial update of trip details. ``status`` is validated here but applied
    by the view through the voting lifecycle.
    """
    status = serializers.ChoiceField(choices=Group.Status.choices, required=False)

    class Meta:
        model = Group
        fields = ['name', 'description', 'check_in_date', 'check_out_date', 'max_members', 'status']
        extra_kwargs = {'max_members': {'min_value': 2, 'max_value': 50}}

    def validate(self, attrs):
        instance = self.instance
        _validate_dates(
            attrs.get('check_in_date', instance.check_in_date),
            attrs.get('check_out_date', instance.check_out_date),
        )
        max_members = attrs.get('max_members')
        if max_members is not None and max_members < instance.member_count:
            raise serializers.ValidationError(
                {'max_members': 'Cannot be lower than the current number of members.'}
            )
        return attrs

    def update(self, instance, validated_data):
        validated_data.pop('status', None)
        return super().update(instance, validated_data)
