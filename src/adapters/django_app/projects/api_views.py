"""
JSON API views of the Projects domain.

Endpoints:
- POST   /projects/api/                         - Create project
- GET    /projects/api/<id>/statuses/           - List statuses
- POST   /projects/api/<id>/statuses/           - Add status
- DELETE /projects/api/statuses/<id>/           - Remove status
- GET    /projects/api/<id>/workflow/           - Get workflow
- PUT    /projects/api/<id>/workflow/           - Create or replace workflow
- POST   /projects/api/<id>/custom-fields/      - Declare custom field
"""

import logging
from datetime import date
from typing import Any, Optional

from django.http import HttpRequest, JsonResponse
from django.utils.dateparse import parse_date

from src.core.projects.dtos import (
    AddStatusInputDTO,
    CreateCustomFieldInputDTO,
    CreateProjectInputDTO,
    SaveWorkflowInputDTO,
)
from src.core.shared.exceptions import ValidationError

from ..shared.api import BaseAPIView, get_actor_id, json_response

logger = logging.getLogger(__name__)


def _date_field(data: dict, name: str) -> Optional[date]:
    value = data.get(name)
    if not value:
        return None
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"Invalid date for {name}: {value!r}", field=name)
    return parsed


def _as_tuple(value: Any) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    raise ValidationError("Expected a list.", field="definition")


class ProjectAPICreateView(BaseAPIView):
    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "name": "string (required)",
            "ticket_prefix": "string (required, A-Z0-9, max 10)",
            "description": "string",
            "color": "#RRGGBB",
            "start_date": "YYYY-MM-DD",
            "end_date": "YYYY-MM-DD",
            "statuses": [{"name": "...", "color": "...", "is_completed": false}]
        }
        """
        try:
            data = self.parse_body(request)
            service = self.get_service('create_project_service')

            output = service.execute(CreateProjectInputDTO(
                name=data.get('name', ''),
                ticket_prefix=data.get('ticket_prefix', ''),
                description=data.get('description', ''),
                color=data.get('color'),
                start_date=_date_field(data, 'start_date'),
                end_date=_date_field(data, 'end_date'),
                status_presets=tuple(data.get('statuses') or ()),
                created_by=get_actor_id(request),
            ))

            logger.info(f"API: Project created: {output.id}")
            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class ProjectStatusesAPIView(BaseAPIView):
    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            statuses = self.get_service('list_project_statuses_service').execute(pk)
            return json_response(success=True, data=[s.to_dict() for s in statuses])
        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            output = self.get_service('add_status_service').execute(AddStatusInputDTO(
                project_id=pk,
                name=data.get('name', ''),
                color=data.get('color'),
                is_completed=bool(data.get('is_completed', False)),
                sort_order=data.get('sort_order'),
            ))
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)


class StatusAPIDetailView(BaseAPIView):
    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            self.get_service('remove_status_service').execute(pk)
            return json_response(success=True, data={'id': pk})
        except Exception as e:
            return self.handle_exception(e)


class ProjectWorkflowAPIView(BaseAPIView):
    """
    GET returns data=null when the project has no workflow (unrestricted).
    PUT replaces the whole definition.
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('get_workflow_service').execute(pk)
            return json_response(
                success=True,
                data=output.to_dict() if output else None,
                meta={'restricted': output is not None},
            )
        except Exception as e:
            return self.handle_exception(e)

    def put(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "initial_statuses": ["<status id>", ...],
            "transitions": {"<status id>": ["<status id>", ...]}
        }
        """
        try:
            data = self.parse_body(request)
            transitions = data.get('transitions') or {}
            if not isinstance(transitions, dict):
                raise ValidationError("transitions must be an object.", field="definition")

            output = self.get_service('save_workflow_service').execute(SaveWorkflowInputDTO(
                project_id=pk,
                initial_statuses=_as_tuple(data.get('initial_statuses')),
                transitions={str(k): _as_tuple(v) for k, v in transitions.items()},
                saved_by=get_actor_id(request),
            ))
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class ProjectCustomFieldsAPIView(BaseAPIView):
    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            output = self.get_service('create_custom_field_service').execute(
                CreateCustomFieldInputDTO(
                    project_id=pk,
                    key=data.get('key', ''),
                    label=data.get('label', ''),
                    field_type=data.get('type', 'text'),
                    options=tuple(data.get('options') or ()),
                    is_required=bool(data.get('is_required', False)),
                    sort_order=int(data.get('sort_order', 0)),
                    is_active=bool(data.get('is_active', True)),
                )
            )
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)
