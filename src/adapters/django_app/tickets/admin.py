"""
Django Admin of the Tickets domain.

History rows are read-only: the audit trail is written by the use cases
only.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    TicketAssigneeModel,
    TicketCommentModel,
    TicketDependencyModel,
    TicketHistoryModel,
    TicketModel,
)


class TicketAssigneeInline(admin.TabularInline):
    model = TicketAssigneeModel
    extra = 0
    fields = ['user_id', 'position']


class TicketHistoryInline(admin.TabularInline):
    model = TicketHistoryModel
    extra = 0
    can_delete = False
    fields = ['from_ticket_status_id', 'to_ticket_status_id', 'user_id', 'note', 'created_at']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(TicketModel)
class TicketAdmin(admin.ModelAdmin):
    list_display = [
        'uuid',
        'name',
        'project',
        'status_badge',
        'issue_type',
        'created_by',
        'due_date',
        'created_at',
    ]

    list_filter = [
        'project',
        'issue_type',
        'created_at',
    ]

    search_fields = [
        'id',
        'uuid',
        'name',
        'description',
        'created_by',
    ]

    readonly_fields = [
        'id',
        'uuid',
        'created_at',
        'updated_at',
    ]

    fieldsets = [
        ('Identification', {
            'fields': ['id', 'uuid', 'project', 'name', 'description', 'issue_type'],
        }),
        ('Workflow', {
            'fields': ['ticket_status', 'parent'],
        }),
        ('Planning', {
            'fields': ['priority_id', 'epic_id', 'sprint_id', 'start_date', 'due_date'],
        }),
        ('Timestamps', {
            'fields': ['created_by', 'created_at', 'updated_at'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [TicketAssigneeInline, TicketHistoryInline]
    list_select_related = ['project', 'ticket_status']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        """Status name on the status color."""
        status = obj.ticket_status
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            status.color or '#6c757d',
            status.name,
        )
    status_badge.short_description = 'Status'


@admin.register(TicketDependencyModel)
class TicketDependencyAdmin(admin.ModelAdmin):
    list_display = ['ticket', 'type', 'depends_on_ticket', 'created_at']
    list_filter = ['type']
    search_fields = ['ticket__uuid', 'depends_on_ticket__uuid']
    readonly_fields = ['id', 'created_at']


@admin.register(TicketCommentModel)
class TicketCommentAdmin(admin.ModelAdmin):
    list_display = ['ticket', 'user_id', 'short_body', 'created_at']
    search_fields = ['ticket__uuid', 'user_id', 'body']
    readonly_fields = ['id', 'created_at', 'updated_at']

    def short_body(self, obj):
        return obj.body[:60]
    short_body.short_description = 'Comment'
