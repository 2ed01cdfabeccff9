"""
JSON API views of the Tickets domain.

Endpoints:
- GET    /tickets/api/?project_id=<id>            - List tickets of a project
- POST   /tickets/api/                            - Create ticket
- GET    /tickets/api/<id>/                       - Get ticket
- PATCH  /tickets/api/<id>/                       - Partial update
- DELETE /tickets/api/<id>/                       - Delete ticket
- POST   /tickets/api/<id>/status/                - Change status
- POST   /tickets/api/<id>/assignees/             - Replace assignees
- GET    /tickets/api/<id>/history/               - Status history
- GET    /tickets/api/<id>/allowed-statuses/      - Reachable statuses
- GET    /tickets/api/<id>/dependencies/          - List dependencies
- POST   /tickets/api/<id>/dependencies/          - Add dependency
- DELETE /tickets/api/dependencies/<id>/          - Remove dependency
- GET    /tickets/api/<id>/comments/              - List comments
- POST   /tickets/api/<id>/comments/              - Add comment

Format:
- Input: JSON
- Output: JSON {success, data/error, meta}

Authentication:
- Session; the acting user falls back to the body for API clients
"""

import logging
from typing import Dict, Optional

from django.http import HttpRequest, JsonResponse

from src.core.tickets.dtos import (
    AddCommentInputDTO,
    AddDependencyInputDTO,
    AssignUsersInputDTO,
    ChangeStatusInputDTO,
    CreateTicketInputDTO,
    UpdateTicketInputDTO,
)
from src.core.shared.exceptions import ValidationError

from ..shared.api import BaseAPIView, get_actor_id, json_response

logger = logging.getLogger(__name__)


def _actor(request: HttpRequest, data: Optional[Dict] = None) -> Optional[str]:
    """Authenticated user first, then "actor_id" from the body."""
    actor_id = get_actor_id(request)
    if actor_id is None and data:
        actor_id = data.get('actor_id') or None
    return actor_id


def _id_list(data: Dict, name: str) -> tuple:
    value = data.get(name)
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{name} must be a list.", field=name)
    return tuple(value)


def _positive_int(value, default: int, name: str) -> int:
    if value in (None, ''):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer.", field=name)


class TicketAPIListView(BaseAPIView):
    """
    GET  /tickets/api/ - List tickets of a project
    POST /tickets/api/ - Create ticket
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Query params:
        - project_id: required
        - page: Page (default: 1)
        - per_page: Items per page (default: 20, max: 100)
        """
        try:
            project_id = request.GET.get('project_id')
            if not project_id:
                raise ValidationError("project_id is required.", field="project_id")

            result = self.get_service('list_project_tickets_service').execute(
                project_id,
                page=_positive_int(request.GET.get('page'), 1, 'page'),
                per_page=_positive_int(request.GET.get('per_page'), 20, 'per_page'),
            )

            payload = result.to_dict()
            items = payload.pop('items')
            return json_response(success=True, data=items, meta=payload)

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "project_id": "string (required)",
            "name": "string (required)",
            "description": "string",
            "issue_type": "Bug|Task|Story|Epic",
            "ticket_status_id": "string (defaults to the first status)",
            "parent_id": "string",
            "priority_id" / "epic_id" / "sprint_id": "string",
            "start_date" / "due_date": "YYYY-MM-DD",
            "assignee_ids": ["user id"],
            "custom_fields": {"<field id or key>": value}
        }
        """
        try:
            data = self.parse_body(request)

            custom_fields = data.get('custom_fields') or {}
            if not isinstance(custom_fields, dict):
                raise ValidationError("custom_fields must be an object.", field="custom_fields")

            output = self.get_service('create_ticket_service').execute(CreateTicketInputDTO(
                project_id=data.get('project_id', ''),
                name=data.get('name', ''),
                created_by=get_actor_id(request) or data.get('created_by'),
                description=data.get('description', ''),
                ticket_status_id=data.get('ticket_status_id'),
                priority_id=data.get('priority_id'),
                epic_id=data.get('epic_id'),
                sprint_id=data.get('sprint_id'),
                parent_id=data.get('parent_id'),
                issue_type=data.get('issue_type', 'Task'),
                start_date=data.get('start_date'),
                due_date=data.get('due_date'),
                assignee_ids=_id_list(data, 'assignee_ids'),
                custom_fields=custom_fields,
            ))

            logger.info(f"API: Ticket created: {output.uuid}")
            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class TicketAPIDetailView(BaseAPIView):
    """
    GET    /tickets/api/<id>/ - Get ticket
    PATCH  /tickets/api/<id>/ - Partial update
    DELETE /tickets/api/<id>/ - Delete ticket
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('get_ticket_service').execute(pk)
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON: any subset of the ticket fields, plus
        "assignee_ids" (replaces the set) and "status_note"
        (stored on the history row when the status changes).
        """
        try:
            data = self.parse_body(request)
            actor_id = _actor(request, data)
            data.pop('actor_id', None)
            status_note = data.pop('status_note', None)

            assignee_ids = None
            if 'assignee_ids' in data:
                assignee_ids = _id_list(data, 'assignee_ids')
                del data['assignee_ids']

            output = self.get_service('update_ticket_service').execute(UpdateTicketInputDTO(
                ticket_id=pk,
                data=data,
                actor_id=actor_id,
                assignee_ids=assignee_ids,
                status_note=status_note,
            ))
            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            self.get_service('delete_ticket_service').execute(pk, actor_id=get_actor_id(request))
            logger.info(f"API: Ticket deleted: {pk}")
            return json_response(success=True, data={'id': pk})
        except Exception as e:
            return self.handle_exception(e)


class TicketAPIStatusView(BaseAPIView):
    """POST /tickets/api/<id>/status/ - Move the ticket through the workflow."""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "ticket_status_id": "string (required)",
            "note": "string"
        }
        """
        try:
            data = self.parse_body(request)
            output = self.get_service('change_ticket_status_service').execute(ChangeStatusInputDTO(
                ticket_id=pk,
                ticket_status_id=data.get('ticket_status_id', ''),
                actor_id=_actor(request, data),
                note=data.get('note'),
            ))
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class TicketAPIAssigneesView(BaseAPIView):
    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "user_ids": ["user id", ...]
        }
        """
        try:
            data = self.parse_body(request)
            output = self.get_service('assign_users_service').execute(AssignUsersInputDTO(
                ticket_id=pk,
                user_ids=_id_list(data, 'user_ids'),
                actor_id=_actor(request, data),
            ))
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class TicketAPIHistoryView(BaseAPIView):
    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            entries = self.get_service('get_ticket_history_service').execute(pk)
            return json_response(success=True, data=[e.to_dict() for e in entries])
        except Exception as e:
            return self.handle_exception(e)


class TicketAPIAllowedStatusesView(BaseAPIView):
    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            statuses = self.get_service('list_allowed_statuses_service').execute(pk)
            return json_response(success=True, data=[s.to_dict() for s in statuses])
        except Exception as e:
            return self.handle_exception(e)


class TicketAPIDependenciesView(BaseAPIView):
    """
    GET  /tickets/api/<id>/dependencies/ - Rows where the ticket is on either side
    POST /tickets/api/<id>/dependencies/ - Add dependency
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            dependencies = self.get_service('list_ticket_dependencies_service').execute(pk)
            return json_response(success=True, data=[d.to_dict() for d in dependencies])
        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "depends_on_ticket_id": "string (required)",
            "type": "blocks|relates"
        }
        """
        try:
            data = self.parse_body(request)
            output = self.get_service('add_dependency_service').execute(AddDependencyInputDTO(
                ticket_id=pk,
                depends_on_ticket_id=data.get('depends_on_ticket_id', ''),
                type=data.get('type', 'blocks'),
                actor_id=_actor(request, data),
            ))
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)


class DependencyAPIDetailView(BaseAPIView):
    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            self.get_service('remove_dependency_service').execute(pk, actor_id=get_actor_id(request))
            return json_response(success=True, data={'id': pk})
        except Exception as e:
            return self.handle_exception(e)


class TicketAPICommentsView(BaseAPIView):
    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            comments = self.get_service('list_ticket_comments_service').execute(pk)
            return json_response(success=True, data=[c.to_dict() for c in comments])
        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "body": "string (required)"
        }
        """
        try:
            data = self.parse_body(request)
            output = self.get_service('add_comment_service').execute(AddCommentInputDTO(
                ticket_id=pk,
                user_id=get_actor_id(request) or data.get('user_id'),
                body=data.get('body', ''),
            ))
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)
