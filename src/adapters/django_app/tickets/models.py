"""
Django Models of the Tickets domain.

These models are ADAPTERS: they persist the entities defined in
src/core/tickets/entities.py.

IMPORTANT:
- Models hold no business logic
- Business rules live in the Core entities, guard and engine
- Models are converted to/from entities by the Mappers

Tables:
- tickets: main ticket table
- ticket_assignees: users assigned to a ticket
- ticket_histories: append-only status audit trail
- ticket_dependencies: blocks/relates links between tickets
- ticket_custom_values: values of project custom fields
- ticket_comments: discussion on a ticket
"""

from django.db import models
from django.utils import timezone


class IssueTypeChoices(models.TextChoices):
    """Mirrors IssueType from the Core."""
    BUG = 'Bug', 'Bug'
    TASK = 'Task', 'Task'
    STORY = 'Story', 'Story'
    EPIC = 'Epic', 'Epic'


class DependencyTypeChoices(models.TextChoices):
    """Mirrors DependencyType from the Core."""
    BLOCKS = 'blocks', 'Blocks'
    RELATES = 'relates', 'Relates'


class TicketModel(models.Model):
    """
    Ticket persistence.

    Fields:
        id: UUID generated by the entity
        uuid: Human-readable code (PREFIX-XXXXXX)
        ticket_status: Current status; a status in use cannot be deleted
        parent: Parent ticket; a parent with children cannot be deleted
        priority_id / epic_id / sprint_id: References to collaborator
            modules, stored as plain ids
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="Ticket UUID"
    )

    uuid = models.CharField(
        max_length=32,
        unique=True,
        help_text="Human-readable ticket code"
    )

    project = models.ForeignKey(
        'projects.ProjectModel',
        on_delete=models.CASCADE,
        related_name='tickets',
    )

    ticket_status = models.ForeignKey(
        'projects.TicketStatusModel',
        on_delete=models.PROTECT,
        related_name='tickets',
    )

    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='children',
    )

    priority_id = models.CharField(max_length=36, null=True, blank=True)
    epic_id = models.CharField(max_length=36, null=True, blank=True)
    sprint_id = models.CharField(max_length=36, null=True, blank=True)

    issue_type = models.CharField(
        max_length=10,
        choices=IssueTypeChoices.choices,
        default=IssueTypeChoices.TASK,
    )

    name = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Ticket name"
    )

    description = models.TextField(blank=True, default='')

    start_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)

    created_by = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Creator user id"
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['project', 'created_at'], name='tickets_project_created_idx'),
            models.Index(fields=['project', 'ticket_status'], name='tickets_project_status_idx'),
        ]

    def __str__(self):
        return f"[{self.uuid}] {self.name}"

    def __repr__(self):
        return f"<TicketModel id={self.id[:8]} status={self.ticket_status_id}>"


class TicketAssigneeModel(models.Model):
    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='assignees',
    )
    user_id = models.CharField(max_length=100, db_index=True)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'ticket_assignees'
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(
                fields=['ticket', 'user_id'],
                name='unique_ticket_assignee',
            ),
        ]

    def __str__(self):
        return f"{self.user_id} on {self.ticket_id}"


class TicketHistoryModel(models.Model):
    """
    Append-only audit trail of status changes.

    Rows are written once and never updated; they disappear only with
    their ticket. Status ids are plain strings so removing a status never
    rewrites history.
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
    )

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='histories',
    )

    user_id = models.CharField(max_length=100, null=True, blank=True)

    from_ticket_status_id = models.CharField(
        max_length=36,
        null=True,
        blank=True,
        help_text="Previous status, null for the creation row"
    )

    to_ticket_status_id = models.CharField(max_length=36)

    note = models.TextField(null=True, blank=True)

    sequence = models.PositiveIntegerField(
        default=0,
        help_text="Insert order within the ticket"
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'ticket_histories'
        verbose_name = 'Ticket history'
        verbose_name_plural = 'Ticket histories'
        ordering = ['sequence']
        constraints = [
            models.UniqueConstraint(
                fields=['ticket', 'sequence'],
                name='unique_ticket_history_sequence',
            ),
        ]

    def __str__(self):
        return f"{self.ticket_id[:8]}: {self.from_ticket_status_id} -> {self.to_ticket_status_id}"


class TicketDependencyModel(models.Model):
    """
    (ticket, depends_on_ticket, type) is unique.

    A "blocks" row means depends_on_ticket blocks ticket.
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
    )

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='dependencies',
    )

    depends_on_ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='dependents',
    )

    type = models.CharField(
        max_length=10,
        choices=DependencyTypeChoices.choices,
        default=DependencyTypeChoices.BLOCKS,
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_dependencies'
        verbose_name = 'Ticket dependency'
        verbose_name_plural = 'Ticket dependencies'
        constraints = [
            models.UniqueConstraint(
                fields=['ticket', 'depends_on_ticket', 'type'],
                name='unique_ticket_dependency',
            ),
        ]

    def __str__(self):
        return f"{self.depends_on_ticket_id[:8]} {self.type} {self.ticket_id[:8]}"


class TicketCustomValueModel(models.Model):
    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='custom_values',
    )

    custom_field = models.ForeignKey(
        'projects.ProjectCustomFieldModel',
        on_delete=models.CASCADE,
        related_name='values',
    )

    value = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = 'ticket_custom_values'
        constraints = [
            models.UniqueConstraint(
                fields=['ticket', 'custom_field'],
                name='unique_ticket_custom_value',
            ),
        ]


class TicketCommentModel(models.Model):
    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
    )

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='comments',
    )

    user_id = models.CharField(max_length=100, db_index=True)
    body = models.TextField()

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_comments'
        ordering = ['created_at']

    def __str__(self):
        return f"Comment by {self.user_id} on {self.ticket_id[:8]}"
