# club_project/urls.py
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(pattern_name='scheduling:homepage', permanent=False)),
    path('schedule/', include('scheduling.urls')),
]
