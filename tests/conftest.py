from datetime import date, timedelta

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.groups.models import Group, GroupMember
from apps.users.models import User


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make_user(email, full_name='', password='s3cret-Passw0rd'):
        return User.objects.create_user(email=email, password=password, full_name=full_name)
    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user('owner@example.com', 'Olive Owner')


@pytest.fixture
def admin_user(make_user):
    return make_user('admin@example.com', 'Ada Admin')


@pytest.fixture
def member(make_user):
    return make_user('member@example.com', 'Milo Member')


@pytest.fixture
def outsider(make_user):
    return make_user('outsider@example.com', 'Otto Outsider')


@pytest.fixture
def group(owner, admin_user, member):
    check_in = date.today() + timedelta(days=30)
    group = Group.objects.create(
        name='Chamonix 2026',
        description='Big mountain week',
        check_in_date=check_in,
        check_out_date=check_in + timedelta(days=6),
        max_members=5,
        created_by=owner,
    )
    GroupMember.objects.create(group=group, user=owner, role=GroupMember.Role.OWNER)
    GroupMember.objects.create(group=group, user=admin_user, role=GroupMember.Role.ADMIN)
    GroupMember.objects.create(group=group, user=member, role=GroupMember.Role.MEMBER)
    return group


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _client_for(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _client_for
