"""
Serializers for the Voting app.
"""
from rest_framework import serializers

from apps.voting.models import Vote


class VoterSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    email = serializers.EmailField(read_only=True)
    full_name = serializers.CharField(read_only=True)
    avatar_url = serializers.SerializerMethodField()

    def get_avatar_url(self, obj):
        return obj.avatar_url.strip() or None


class VoteSerializer(serializers.ModelSerializer):
    group_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)
    user = VoterSerializer(read_only=True)

    class Meta:
        model = Vote
        fields = [
            'id', 'group_id', 'user_id', 'hotel_id', 'hotel_name', 'hotel_data',
            'is_upvote', 'weight', 'created_at', 'updated_at', 'user',
        ]
        read_only_fields = fields


class CastVoteSerializer(serializers.Serializer):
    hotel_id = serializers.CharField(max_length=64)
    hotel_name = serializers.CharField(max_length=255)
    hotel_data = serializers.JSONField(required=False, allow_null=True, default=None)
    is_upvote = serializers.BooleanField()
    weight = serializers.ChoiceField(choices=Vote.Weight.values)

    def validate_hotel_id(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('hotel_id must not be blank.')
        return value


class UpdateVoteSerializer(serializers.Serializer):
    is_upvote = serializers.BooleanField()
    weight = serializers.ChoiceField(choices=Vote.Weight.values, required=False)


class CloseVotingSerializer(serializers.Serializer):
    selected_hotel_id = serializers.CharField(
        max_length=64,
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text='Hotel to select manually. Omit to pick the tally leader.',
    )
