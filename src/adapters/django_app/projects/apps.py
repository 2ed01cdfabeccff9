"""
Django App configuration of the Projects domain.
"""

from django.apps import AppConfig


class ProjectsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.projects'
    label = 'projects'
    verbose_name = 'Projects'
