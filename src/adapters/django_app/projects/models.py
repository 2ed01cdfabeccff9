"""
Django Models of the Projects domain.

These models are ADAPTERS: they persist the entities defined in
src/core/projects/entities.py.

IMPORTANT:
- Models hold no business logic
- Business rules live in the Core entities and use cases
- Models are converted to/from entities by the Mappers

Tables:
- projects: project with its ticket prefix
- ticket_statuses: board columns of a project
- project_workflows: allowed-transition graph (JSON), one per project
- project_custom_fields: custom attribute schema of a project
"""

from django.db import models
from django.utils import timezone


class CustomFieldTypeChoices(models.TextChoices):
    """Mirrors CustomFieldType from the Core."""
    TEXT = 'text', 'Text'
    NUMBER = 'number', 'Number'
    SELECT = 'select', 'Select'
    DATE = 'date', 'Date'


class ProjectModel(models.Model):
    """
    Project persistence.

    Fields:
        id: UUID generated by the entity
        ticket_prefix: Unique prefix of ticket codes (e.g. WEB)
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="Project UUID"
    )

    name = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Project name"
    )

    description = models.TextField(
        blank=True,
        default='',
        help_text="Free text description"
    )

    ticket_prefix = models.CharField(
        max_length=10,
        unique=True,
        help_text="Prefix of ticket codes"
    )

    color = models.CharField(
        max_length=7,
        null=True,
        blank=True,
        help_text="Hex color"
    )

    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'projects'
        verbose_name = 'Project'
        verbose_name_plural = 'Projects'
        ordering = ['name']

    def __str__(self):
        return f"[{self.ticket_prefix}] {self.name}"


class TicketStatusModel(models.Model):
    """A status column owned by one project. Deleted with the project."""

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="Status UUID"
    )

    project = models.ForeignKey(
        ProjectModel,
        on_delete=models.CASCADE,
        related_name='statuses',
        help_text="Owning project"
    )

    name = models.CharField(max_length=100)

    color = models.CharField(max_length=7, default='#2563EB')

    is_completed = models.BooleanField(
        default=False,
        help_text="Tickets in this status count as done"
    )

    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = 'ticket_statuses'
        verbose_name = 'Ticket status'
        verbose_name_plural = 'Ticket statuses'
        ordering = ['sort_order', 'name']
        constraints = [
            models.UniqueConstraint(
                fields=['project', 'name'],
                name='unique_status_name_per_project',
            ),
        ]

    def __str__(self):
        return self.name


class ProjectWorkflowModel(models.Model):
    """
    Workflow graph of a project.

    definition: {"initial_statuses": [...], "transitions": {"<id>": [...]}}
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
    )

    project = models.OneToOneField(
        ProjectModel,
        on_delete=models.CASCADE,
        related_name='workflow',
    )

    definition = models.JSONField(
        default=dict,
        help_text="Initial statuses and transition map"
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'project_workflows'
        verbose_name = 'Project workflow'
        verbose_name_plural = 'Project workflows'

    def __str__(self):
        return f"Workflow of {self.project_id}"


class ProjectCustomFieldModel(models.Model):
    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
    )

    project = models.ForeignKey(
        ProjectModel,
        on_delete=models.CASCADE,
        related_name='custom_fields',
    )

    key = models.CharField(max_length=50)
    label = models.CharField(max_length=255)

    type = models.CharField(
        max_length=20,
        choices=CustomFieldTypeChoices.choices,
        default=CustomFieldTypeChoices.TEXT,
    )

    options = models.JSONField(default=list, blank=True)
    is_required = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'project_custom_fields'
        verbose_name = 'Custom field'
        verbose_name_plural = 'Custom fields'
        ordering = ['sort_order', 'key']
        constraints = [
            models.UniqueConstraint(
                fields=['project', 'key'],
                name='unique_custom_field_key_per_project',
            ),
        ]

    def __str__(self):
        return f"{self.label} ({self.type})"
