"""
URL configuration for the Chat app.
"""
from django.urls import path

from apps.chat.views import GroupMessageViewSet

app_name = 'chat'

group_message_list = GroupMessageViewSet.as_view({
    'get': 'list',
    'post': 'create',
})

urlpatterns = [
    path('groups/<uuid:group_pk>/chat/', group_message_list, name='group-message-list'),
]
