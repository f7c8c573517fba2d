"""
SceptView Network Monitor - Root URL Configuration

This module defines the root URL routing for the Django project:
    - /admin/ - Django admin interface
    - /api/health/ - Health check endpoint
    - /api/ - JSON API consumed by the browser client

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file

For URL routing reference:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import path, include
from .views import health


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/health/', health, name="health"),
    path("api/", include("apps.monitor.urls")),
]
