"""
URL patterns of the Tickets domain (JSON API).

- /tickets/api/                               list, create
- /tickets/api/dependencies/<id>/             remove dependency
- /tickets/api/<id>/                          get, update, delete
- /tickets/api/<id>/status/                   change status
- /tickets/api/<id>/assignees/                replace assignees
- /tickets/api/<id>/history/                  status history
- /tickets/api/<id>/allowed-statuses/         reachable statuses
- /tickets/api/<id>/dependencies/             list, add dependency
- /tickets/api/<id>/comments/                 list, add comment
"""

from django.urls import path

from . import api_views

app_name = 'tickets'

urlpatterns = [
    # Listing and creation
    path('api/', api_views.TicketAPIListView.as_view(), name='api_list'),

    # Dependency rows (before <pk> so it does not match as a ticket id)
    path(
        'api/dependencies/<str:pk>/',
        api_views.DependencyAPIDetailView.as_view(),
        name='api_dependency_detail',
    ),

    # Detail, update, delete
    path('api/<str:pk>/', api_views.TicketAPIDetailView.as_view(), name='api_detail'),

    # Actions
    path('api/<str:pk>/status/', api_views.TicketAPIStatusView.as_view(), name='api_status'),
    path('api/<str:pk>/assignees/', api_views.TicketAPIAssigneesView.as_view(), name='api_assignees'),
    path('api/<str:pk>/history/', api_views.TicketAPIHistoryView.as_view(), name='api_history'),
    path(
        'api/<str:pk>/allowed-statuses/',
        api_views.TicketAPIAllowedStatusesView.as_view(),
        name='api_allowed_statuses',
    ),
    path(
        'api/<str:pk>/dependencies/',
        api_views.TicketAPIDependenciesView.as_view(),
        name='api_dependencies',
    ),
    path('api/<str:pk>/comments/', api_views.TicketAPICommentsView.as_view(), name='api_comments'),
]
