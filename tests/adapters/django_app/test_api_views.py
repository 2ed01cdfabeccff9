"""
Tests of the JSON API (projects and tickets).

Requests go through the real URLconf, the DI container and the Django
repositories; events land in the in-memory publisher.

Coverage:
- Response envelope and error mapping (400/404/409/422/500)
- Project, status, workflow and custom field endpoints
- Ticket CRUD, status moves, assignees, history, dependencies, comments
"""

from unittest.mock import patch

import pytest
from django.urls import reverse


pytestmark = pytest.mark.django_db


def ticket_url(name, ticket_id):
    return reverse(f"tickets:{name}", kwargs={"pk": ticket_id})


@pytest.fixture
def linear_workflow(api_client, project, statuses):
    """To Do -> In Progress -> Done, tickets start in To Do."""
    todo, doing, done = (statuses[n].id for n in ("To Do", "In Progress", "Done"))
    response = api_client.put_json(
        reverse("projects:api_workflow", kwargs={"pk": project.id}),
        {"initial_statuses": [todo], "transitions": {todo: [doing], doing: [done]}},
    )
    assert response.status_code == 200
    return response.data["data"]


# =============================================================================
# Projects API
# =============================================================================

class TestProjectsAPI:
    def test_create_project(self, api_client, db):
        response = api_client.post_json(reverse("projects:api_create"), {
            "name": "Website",
            "ticket_prefix": "web",
            "start_date": "2026-01-01",
        })

        assert response.status_code == 201
        data = response.data["data"]
        assert response.data["success"] is True
        assert data["ticket_prefix"] == "WEB"
        assert data["start_date"] == "2026-01-01"
        assert [s["name"] for s in data["statuses"]] == ["To Do", "In Progress", "Done"]

    def test_duplicate_prefix_is_409(self, api_client, project):
        response = api_client.post_json(reverse("projects:api_create"), {
            "name": "Other", "ticket_prefix": "WEB",
        })

        assert response.status_code == 409
        assert response.data["success"] is False
        assert response.data["meta"]["rule"] == "unique_ticket_prefix"

    def test_invalid_prefix_is_400(self, api_client, db):
        response = api_client.post_json(reverse("projects:api_create"), {
            "name": "Website", "ticket_prefix": "WEB-1",
        })

        assert response.status_code == 400
        assert response.data["meta"]["field"] == "ticket_prefix"

    def test_invalid_json_is_400(self, api_client, db):
        response = api_client.post(
            reverse("projects:api_create"), data="{oops", content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_statuses_list_add_remove(self, api_client, project):
        url = reverse("projects:api_statuses", kwargs={"pk": project.id})

        created = api_client.post_json(url, {"name": "Blocked", "color": "#DC2626"})
        assert created.status_code == 201
        assert created.data["data"]["sort_order"] == 3

        listing = api_client.get_json(url)
        assert [s["name"] for s in listing.data["data"]][-1] == "Blocked"

        removed = api_client.delete_json(
            reverse("projects:api_status_detail", kwargs={"pk": created.data["data"]["id"]})
        )
        assert removed.status_code == 200
        assert len(api_client.get_json(url).data["data"]) == 3

    def test_status_in_use_cannot_be_removed(self, api_client, statuses, create_ticket):
        create_ticket()

        response = api_client.delete_json(
            reverse("projects:api_status_detail", kwargs={"pk": statuses["To Do"].id})
        )

        assert response.status_code == 409

    def test_unknown_project_is_404(self, api_client, db):
        response = api_client.get_json(reverse("projects:api_statuses", kwargs={"pk": "missing"}))

        assert response.status_code == 404
        assert response.data["meta"]["entity_type"] == "Project"

    def test_workflow_roundtrip(self, api_client, project, statuses, linear_workflow):
        response = api_client.get_json(reverse("projects:api_workflow", kwargs={"pk": project.id}))

        assert response.status_code == 200
        assert response.data["data"] == linear_workflow
        assert response.data["data"]["initial_statuses"] == [statuses["To Do"].id]

    def test_workflow_unset(self, api_client, project):
        response = api_client.get_json(reverse("projects:api_workflow", kwargs={"pk": project.id}))

        assert response.status_code == 200
        assert response.data.get("data") is None

    def test_workflow_with_unknown_status_is_400(self, api_client, project, statuses):
        response = api_client.put_json(
            reverse("projects:api_workflow", kwargs={"pk": project.id}),
            {"initial_statuses": ["not-a-status"], "transitions": {}},
        )

        assert response.status_code == 400
        assert response.data["meta"]["field"] == "definition"

    def test_create_custom_field(self, api_client, project):
        response = api_client.post_json(
            reverse("projects:api_custom_fields", kwargs={"pk": project.id}),
            {"key": "browser", "label": "Browser", "type": "select", "options": ["Chrome"]},
        )

        assert response.status_code == 201
        assert response.data["data"]["options"] == ["Chrome"]


# =============================================================================
# Tickets API
# =============================================================================

class TestTicketsAPI:
    def test_create_ticket(self, api_client, project, statuses, publisher):
        publisher.clear()

        response = api_client.post_json(reverse("tickets:api_list"), {
            "project_id": project.id,
            "name": "Checkout broken",
            "issue_type": "Bug",
            "created_by": "creator",
            "assignee_ids": ["alice"],
            "due_date": "2026-12-01",
        })

        assert response.status_code == 201
        data = response.data["data"]
        assert data["uuid"].startswith("WEB-")
        assert data["ticket_status_id"] == statuses["To Do"].id
        assert data["assignee_ids"] == ["alice"]
        assert data["due_date"] == "2026-12-01"
        assert [e.event_type for e in publisher.published_events] == ["TicketCreatedEvent"]

    def test_create_ticket_validation(self, api_client, project, statuses):
        response = api_client.post_json(reverse("tickets:api_list"), {
            "project_id": project.id, "name": "", "created_by": "creator",
        })

        assert response.status_code == 400
        assert response.data["meta"]["error"] == "VALIDATION_ERROR_NAME"

    def test_assignee_ids_must_be_a_list(self, api_client, project, statuses):
        response = api_client.post_json(reverse("tickets:api_list"), {
            "project_id": project.id, "name": "X", "created_by": "c", "assignee_ids": "alice",
        })

        assert response.status_code == 400

    def test_list_tickets(self, api_client, project, create_ticket):
        for i in range(3):
            create_ticket(name=f"Ticket {i}")

        response = api_client.get_json(
            reverse("tickets:api_list"), {"project_id": project.id, "per_page": 2}
        )

        assert response.status_code == 200
        assert len(response.data["data"]) == 2
        assert response.data["meta"]["total"] == 3
        assert response.data["meta"]["has_next"] is True

    def test_list_requires_project(self, api_client, db):
        response = api_client.get_json(reverse("tickets:api_list"))

        assert response.status_code == 400

    def test_get_and_missing_ticket(self, api_client, create_ticket):
        ticket = create_ticket()

        assert api_client.get_json(ticket_url("api_detail", ticket.id)).status_code == 200
        assert api_client.get_json(ticket_url("api_detail", "missing")).status_code == 404

    def test_patch_ticket(self, api_client, create_ticket, statuses):
        ticket = create_ticket()

        response = api_client.patch_json(ticket_url("api_detail", ticket.id), {
            "name": "Renamed",
            "ticket_status_id": statuses["In Progress"].id,
            "status_note": "Started",
            "assignee_ids": ["bob"],
            "actor_id": "bob",
        })

        assert response.status_code == 200
        data = response.data["data"]
        assert data["name"] == "Renamed"
        assert data["ticket_status_id"] == statuses["In Progress"].id
        assert data["assignee_ids"] == ["bob"]

        history = api_client.get_json(ticket_url("api_history", ticket.id)).data["data"]
        assert [h["note"] for h in history] == ["Ticket created", "Started"]
        assert history[1]["user_id"] == "bob"

    def test_patch_non_text_name_is_400(self, api_client, create_ticket):
        ticket = create_ticket(name="Original")

        response = api_client.patch_json(ticket_url("api_detail", ticket.id), {"name": 123})

        assert response.status_code == 400
        assert response.data["meta"]["field"] == "name"
        detail = api_client.get_json(ticket_url("api_detail", ticket.id)).data["data"]
        assert detail["name"] == "Original"

    def test_patch_cycle_is_409(self, api_client, create_ticket):
        parent = create_ticket(name="Parent")
        child = create_ticket(name="Child", parent_id=parent.id)

        response = api_client.patch_json(ticket_url("api_detail", parent.id), {
            "parent_id": child.id,
        })

        assert response.status_code == 409
        assert response.data["meta"]["error"] == "CIRCULAR_REFERENCE"

    def test_refused_transition_is_422(self, api_client, create_ticket, statuses,
                                       linear_workflow):
        ticket = create_ticket()

        response = api_client.post_json(ticket_url("api_status", ticket.id), {
            "ticket_status_id": statuses["Done"].id,
        })

        assert response.status_code == 422
        meta = response.data["meta"]
        assert meta["error"] == "INVALID_TRANSITION"
        assert meta["allowed_status_ids"] == [statuses["In Progress"].id]
        assert "To Do" in response.data["error"]

        detail = api_client.get_json(ticket_url("api_detail", ticket.id)).data["data"]
        assert detail["ticket_status_id"] == statuses["To Do"].id

    def test_allowed_status_move(self, api_client, create_ticket, statuses, linear_workflow,
                                 publisher):
        ticket = create_ticket(assignee_ids=("alice",))
        publisher.clear()

        response = api_client.post_json(ticket_url("api_status", ticket.id), {
            "ticket_status_id": statuses["In Progress"].id,
            "note": "On it",
            "actor_id": "alice",
        })

        assert response.status_code == 200
        events = publisher.get_events_by_type("TicketStatusChangedEvent")
        assert len(events) == 1
        assert events[0].recipient_ids == ["creator"]

    def test_allowed_statuses(self, api_client, create_ticket, statuses, linear_workflow):
        ticket = create_ticket()

        response = api_client.get_json(ticket_url("api_allowed_statuses", ticket.id))

        assert [s["name"] for s in response.data["data"]] == ["In Progress"]

    def test_assignees(self, api_client, create_ticket):
        ticket = create_ticket(assignee_ids=("alice",))

        response = api_client.post_json(ticket_url("api_assignees", ticket.id), {
            "user_ids": ["bob", "carol"],
        })

        assert response.status_code == 200
        assert response.data["data"]["assignee_ids"] == ["bob", "carol"]

    def test_dependencies_block_delete(self, api_client, create_ticket):
        blocked = create_ticket(name="Blocked")
        blocker = create_ticket(name="Blocker")

        added = api_client.post_json(ticket_url("api_dependencies", blocked.id), {
            "depends_on_ticket_id": blocker.id,
        })
        assert added.status_code == 201

        refused = api_client.delete_json(ticket_url("api_detail", blocker.id))
        assert refused.status_code == 409

        listing = api_client.get_json(ticket_url("api_dependencies", blocker.id))
        assert len(listing.data["data"]) == 1

        removed = api_client.delete_json(
            ticket_url("api_dependency_detail", added.data["data"]["id"])
        )
        assert removed.status_code == 200
        assert api_client.delete_json(ticket_url("api_detail", blocker.id)).status_code == 200

    def test_delete_parent_refused(self, api_client, create_ticket):
        parent = create_ticket(name="Parent")
        create_ticket(name="Child", parent_id=parent.id)

        response = api_client.delete_json(ticket_url("api_detail", parent.id))

        assert response.status_code == 409
        assert response.data["meta"]["rule"] == "no_children_on_delete"

    def test_comments(self, api_client, create_ticket, publisher):
        ticket = create_ticket(assignee_ids=("alice",))
        publisher.clear()

        created = api_client.post_json(ticket_url("api_comments", ticket.id), {
            "user_id": "dave", "body": "Reproduced on staging",
        })

        assert created.status_code == 201
        listing = api_client.get_json(ticket_url("api_comments", ticket.id))
        assert [c["body"] for c in listing.data["data"]] == ["Reproduced on staging"]
        event = publisher.get_events_by_type("TicketCommentAddedEvent")[0]
        assert event.recipient_ids == ["creator", "alice"]

    def test_unexpected_error_is_500(self, api_client, create_ticket):
        ticket = create_ticket()

        with patch(
            "src.core.tickets.use_cases.GetTicketService.execute",
            side_effect=RuntimeError("database exploded"),
        ):
            response = api_client.get_json(ticket_url("api_detail", ticket.id))

        assert response.status_code == 500
        assert response.data["error"] == "Internal server error"


@pytest.mark.integration
class TestTicketLifecycle:
    """A ticket walks the whole workflow through the API."""

    def test_full_lifecycle(self, api_client, project, statuses, linear_workflow):
        created = api_client.post_json(reverse("tickets:api_list"), {
            "project_id": project.id, "name": "Ship it", "created_by": "creator",
        }).data["data"]

        for name in ("In Progress", "Done"):
            response = api_client.post_json(ticket_url("api_status", created["id"]), {
                "ticket_status_id": statuses[name].id, "actor_id": "creator",
            })
            assert response.status_code == 200

        history = api_client.get_json(ticket_url("api_history", created["id"])).data["data"]
        assert [h["to_ticket_status_id"] for h in history] == [
            statuses["To Do"].id, statuses["In Progress"].id, statuses["Done"].id,
        ]
        assert api_client.get_json(
            ticket_url("api_allowed_statuses", created["id"])
        ).data["data"] == []
