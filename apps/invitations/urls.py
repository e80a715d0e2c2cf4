"""
URL configuration for the Invitations app.
"""
from django.urls import path

from apps.invitations.views import GroupInvitationViewSet, InvitationViewSet

app_name = 'invitations'

group_invitation_list = GroupInvitationViewSet.as_view({
    'get': 'list',
    'post': 'create',
})
invitation_detail = InvitationViewSet.as_view({'get': 'retrieve'})
invitation_accept = InvitationViewSet.as_view({'post': 'accept'})
invitation_reject = InvitationViewSet.as_view({'post': 'reject'})
invitation_mine = InvitationViewSet.as_view({'get': 'mine'})

urlpatterns = [
    path('groups/<uuid:group_pk>/invitations/', group_invitation_list, name='group-invitation-list'),
    path('invitations/mine/', invitation_mine, name='invitation-mine'),
    path('invitations/<uuid:pk>/', invitation_detail, name='invitation-detail'),
    path('invitations/<uuid:pk>/accept/', invitation_accept, name='invitation-accept'),
    path('invitations/<uuid:pk>/reject/', invitation_reject, name='invitation-reject'),
]
