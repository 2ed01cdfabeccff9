"""
URL patterns of the Projects domain (JSON API).

- POST   /projects/api/
- GET    /projects/api/<id>/statuses/
- POST   /projects/api/<id>/statuses/
- DELETE /projects/api/statuses/<id>/
- GET    /projects/api/<id>/workflow/
- PUT    /projects/api/<id>/workflow/
- POST   /projects/api/<id>/custom-fields/
"""

from django.urls import path
from . import api_views

app_name = 'projects'

urlpatterns = [
    path('api/', api_views.ProjectAPICreateView.as_view(), name='api_create'),

    # Before <pk> routes so "statuses" is not read as a project id
    path('api/statuses/<str:pk>/', api_views.StatusAPIDetailView.as_view(), name='api_status_detail'),

    path('api/<str:pk>/statuses/', api_views.ProjectStatusesAPIView.as_view(), name='api_statuses'),
    path('api/<str:pk>/workflow/', api_views.ProjectWorkflowAPIView.as_view(), name='api_workflow'),
    path('api/<str:pk>/custom-fields/', api_views.ProjectCustomFieldsAPIView.as_view(), name='api_custom_fields'),
]
