"""
URL configuration for mentorship_backend project.

Everything the clients call lives under `api/` (see `core.urls`); the root
path answers a small liveness payload and `admin/` serves the Django admin.
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path

from core.schema import MentorshipSchemaView


def api_root(_request):
    return JsonResponse({
        'status': 'ok',
        'message': 'Mentorship backend is running',
        'schema': '/api/schema/',
    })


urlpatterns = [
    path('', api_root, name='api_root'),
    path('admin/', admin.site.urls),
    path('api/schema/', MentorshipSchemaView.as_view(), name='api-schema'),
    path('api/', include('core.urls')),
]
