"""
URL configuration for the Voting app.
"""
from django.urls import path

from apps.voting.views import GroupVoteViewSet, VoteViewSet

app_name = 'voting'

group_vote_list = GroupVoteViewSet.as_view({
    'get': 'list',
    'post': 'create',
})
group_vote_results = GroupVoteViewSet.as_view({
    'get': 'results',
})
group_vote_close = GroupVoteViewSet.as_view({
    'post': 'close',
})
vote_detail = VoteViewSet.as_view({
    'patch': 'partial_update',
    'delete': 'destroy',
})

urlpatterns = [
    path('groups/<uuid:group_pk>/votes/', group_vote_list, name='group-vote-list'),
    path('groups/<uuid:group_pk>/votes/results/', group_vote_results, name='group-vote-results'),
    path('groups/<uuid:group_pk>/votes/close/', group_vote_close, name='group-vote-close'),
    path('votes/<uuid:pk>/', vote_detail, name='vote-detail'),
]
