"""URL configuration.

The web front end is a separate collaborator; this project only
exposes the admin, where operators browse and remove shared files.
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path('admin/', admin.site.urls),
]
