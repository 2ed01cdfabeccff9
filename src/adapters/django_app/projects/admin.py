"""
Django Admin of the Projects domain.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    ProjectCustomFieldModel,
    ProjectModel,
    ProjectWorkflowModel,
    TicketStatusModel,
)


class TicketStatusInline(admin.TabularInline):
    model = TicketStatusModel
    extra = 0
    fields = ['name', 'color', 'is_completed', 'sort_order']
    ordering = ['sort_order']


class CustomFieldInline(admin.TabularInline):
    model = ProjectCustomFieldModel
    extra = 0
    fields = ['key', 'label', 'type', 'options', 'is_required', 'sort_order', 'is_active']


@admin.register(ProjectModel)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['ticket_prefix', 'name', 'color_badge', 'start_date', 'end_date', 'created_at']
    search_fields = ['name', 'ticket_prefix']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [TicketStatusInline, CustomFieldInline]
    ordering = ['name']

    def color_badge(self, obj):
        """Show the project color as a swatch."""
        if not obj.color:
            return '-'
        return format_html(
            '<span style="background-color: {}; padding: 3px 12px; '
            'border-radius: 3px;">&nbsp;</span>',
            obj.color,
        )
    color_badge.short_description = 'Color'


@admin.register(ProjectWorkflowModel)
class ProjectWorkflowAdmin(admin.ModelAdmin):
    list_display = ['project', 'updated_at']
    readonly_fields = ['id', 'created_at', 'updated_at']
    search_fields = ['project__name', 'project__ticket_prefix']
