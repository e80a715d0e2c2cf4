"""
URL configuration for the Hotels app.
"""
from django.urls import include, path
from rest_framework.routers import SimpleRouter

from apps.hotels.views import HotelViewSet

app_name = 'hotels'

router = SimpleRouter()
router.register(r'', HotelViewSet, basename='hotel')

urlpatterns = [
    path('', include(router.urls)),
]
