"""
URL configuration for the LifeSweeper project.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('sweeper.urls')),
]
