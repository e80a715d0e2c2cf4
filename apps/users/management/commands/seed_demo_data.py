"""
Management command to seed demo data for the Ski Trip Planner.

Creates users, a ski group with members, a pending invitation, a few chat
messages and a spread of weighted hotel votes so the results endpoint has
something to rank.

Usage:
    python manage.py seed_demo_data
    python manage.py seed_demo_data --reset  # wipe existing demo data first
"""
from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.chat.models import Message
from apps.groups.models import Group, GroupMember
from apps.invitations.models import Invitation
from apps.voting.models import Vote
from apps.voting.services.lifecycle import build_results

User = get_user_model()

DEMO_PASSWORD = 'SkiTrip2025Demo'

DEMO_USERS = [
    {'email': 'maya@skitrip.app',  'name': 'Maya Keller',   'is_staff': True},
    {'email': 'jonas@skitrip.app', 'name': 'Jonas Berg',    'is_staff': False},
    {'email': 'lea@skitrip.app',   'name': 'Lea Moreau',    'is_staff': False},
    {'email': 'tom@skitrip.app',   'name': 'Tom Okafor',    'is_staff': False},
]

DEMO_GROUP_NAME = 'Verbier Powder Week'

DEMO_HOTELS = {
    'lp19a2f': {'name': 'Chalet Montagne', 'city': 'Verbier', 'stars': 4},
    'lp3c77e': {'name': 'Hotel Alpina', 'city': 'Verbier', 'stars': 3},
    'lp5b010': {'name': 'W Verbier', 'city': 'Verbier', 'stars': 5},
}

# (user email, hotel id, is_upvote, weight)
DEMO_VOTES = [
    ('maya@skitrip.app',  'lp19a2f', True,  '3'),
    ('maya@skitrip.app',  'lp5b010', False, '1'),
    ('jonas@skitrip.app', 'lp19a2f', True,  '1'),
    ('jonas@skitrip.app', 'lp3c77e', True,  '2'),
    ('lea@skitrip.app',   'lp3c77e', True,  '2'),
    ('lea@skitrip.app',   'lp5b010', True,  '3'),
    ('tom@skitrip.app',   'lp19a2f', False, '2'),
]


class Command(BaseCommand):
    help = 'Seed a demo ski group with members, chat and hotel votes'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Delete all existing demo data before seeding',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['reset']:
            self._reset()

        users = self._seed_users()
        group = self._seed_group(users)
        self._seed_chat(group, users)
        self._seed_votes(group, users)

        results = build_results(group, users['maya@skitrip.app'])
        self.stdout.write(self.style.SUCCESS('\nDemo data seeded successfully!\n'))
        self.stdout.write(f'Group:   {group.name} ({group.id})')
        self.stdout.write(f'Votes:   {results["total_votes"]} from {results["total_voters"]} voters')
        self.stdout.write('Ranking:')
        for position, hotel in enumerate(results['hotels'], start=1):
            self.stdout.write(f'  {position}. {hotel["hotel_name"]:<16} weighted={hotel["weighted_score"]:>3}  net={hotel["net_score"]:>2}')
        self.stdout.write('\nDemo login credentials:')
        for u in DEMO_USERS:
            self.stdout.write(f'  {u["email"]} / {DEMO_PASSWORD}')

    # -----------------------------------------------------------------------

    def _reset(self):
        self.stdout.write('Resetting demo data...')
        emails = [u['email'] for u in DEMO_USERS]
        demo_users = User.objects.filter(email__in=emails)
        Group.objects.filter(created_by__in=demo_users).delete()
        demo_users.delete()
        self.stdout.write('  Reset complete.')

    def _seed_users(self):
        self.stdout.write('\nSeeding users...')
        users = {}
        for data in DEMO_USERS:
            user = User.objects.filter(email=data['email']).first()
            created = user is None
            if created:
                user = User.objects.create_user(
                    email=data['email'],
                    password=DEMO_PASSWORD,
                    full_name=data['name'],
                    is_staff=data['is_staff'],
                    is_superuser=data['is_staff'],
                )
            users[data['email']] = user
            self.stdout.write(f'  {"created" if created else "exists"}: {data["email"]}')
        return users

    def _seed_group(self, users):
        self.stdout.write('\nSeeding group...')
        owner = users['maya@skitrip.app']
        check_in = date.today() + timedelta(days=60)
        group, _ = Group.objects.get_or_create(
            name=DEMO_GROUP_NAME,
            created_by=owner,
            defaults={
                'description': 'Fresh tracks, fondue and the Mont Fort cable car.',
                'check_in_date': check_in,
                'check_out_date': check_in + timedelta(days=7),
                'max_members': 6,
                'status': Group.Status.VOTING,
            },
        )
        GroupMember.objects.get_or_create(group=group, user=owner, defaults={'role': GroupMember.Role.OWNER})
        GroupMember.objects.get_or_create(
            group=group, user=users['jonas@skitrip.app'], defaults={'role': GroupMember.Role.ADMIN},
        )
        for email in ('lea@skitrip.app', 'tom@skitrip.app'):
            GroupMember.objects.get_or_create(group=group, user=users[email], defaults={'role': GroupMember.Role.MEMBER})

        Invitation.objects.get_or_create(
            group=group,
            invited_email='sam@skitrip.app',
            status=Invitation.Status.PENDING,
            defaults={'invited_by': owner, 'message': 'Room for one more!'},
        )
        self.stdout.write(f'  created/updated group: {group.name}')
        return group

    def _seed_chat(self, group, users):
        if group.messages.exists():
            return
        self.stdout.write('\nSeeding chat...')
        Message.objects.create(
            group=group,
            user=users['lea@skitrip.app'],
            content='Lea Moreau joined the group!',
            message_type=Message.MessageType.SYSTEM,
        )
        Message.objects.create(
            group=group,
            user=users['jonas@skitrip.app'],
            content='Hotel Alpina is right by the Medran lift.',
            message_type=Message.MessageType.HOTEL_SHARE,
            metadata={'hotel_id': 'lp3c77e'},
        )

    def _seed_votes(self, group, users):
        self.stdout.write('\nSeeding votes...')
        for email, hotel_id, is_upvote, weight in DEMO_VOTES:
            hotel = DEMO_HOTELS[hotel_id]
            Vote.objects.update_or_create(
                group=group,
                user=users[email],
                hotel_id=hotel_id,
                defaults={
                    'hotel_name': hotel['name'],
                    'hotel_data': {'id': hotel_id, **hotel},
                    'is_upvote': is_upvote,
                    'weight': weight,
                },
            )
