"""
URL Configuration.

- /admin/    Django Admin
- /projects/ Projects JSON API
- /tickets/  Tickets JSON API
- /health/   Liveness check
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    path('admin/', admin.site.urls),

    path('projects/', include('src.adapters.django_app.projects.urls')),
    path('tickets/', include('src.adapters.django_app.tickets.urls')),

    path('health/', health, name='health'),
]
