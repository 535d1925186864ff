# scheduling/urls.py
from django.urls import path

from . import api_views, feeds, views

app_name = 'scheduling'
urlpatterns = [
    path('', views.homepage, name='homepage'),
    path('feed.ics', feeds.schedule_feed, name='schedule_feed'),

    path('api/instances/', api_views.InstanceListView.as_view(), name='api_instances'),
    path('api/calendar/', api_views.CalendarMonthView.as_view(), name='api_calendar'),
    path('api/publish/', views.publish_document, name='publish_document'),
]
