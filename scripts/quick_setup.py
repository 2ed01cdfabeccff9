#!/usr/bin/env python
"""
Quick setup for local development.

This script:
1. Configures Django settings
2. Creates the SQLite database
3. Runs migrations
4. Creates a demo project with a workflow and tickets (optional)

Usage:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
"""

import os
import sys
import argparse

# Make "src" importable when run from a checkout
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configure Django for standalone use."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    # Force SQLite and in-process events for a quick local run
    os.environ['DATABASE_URL'] = 'sqlite:///db.sqlite3'
    os.environ.setdefault('EVENT_PUBLISHER_MODE', 'sync')

    import django
    django.setup()


def run_migrations():
    from django.core.management import call_command

    print("Running migrations...")
    call_command('migrate', verbosity=1)
    print("Migrations done.")


def create_sample_data():
    """Demo project WEB: To Do -> In Progress -> Review -> Done."""
    from src.config.container import get_container
    from src.core.projects.dtos import CreateProjectInputDTO, SaveWorkflowInputDTO
    from src.core.shared.exceptions import ConflictError
    from src.core.tickets.dtos import (
        AddDependencyInputDTO,
        ChangeStatusInputDTO,
        CreateTicketInputDTO,
    )

    container = get_container()

    print("Creating demo project...")
    try:
        project = container.create_project_service().execute(CreateProjectInputDTO(
            name='Website',
            ticket_prefix='WEB',
            description='Demo project',
            status_presets=(
                {'name': 'To Do', 'color': '#64748B'},
                {'name': 'In Progress', 'color': '#2563EB'},
                {'name': 'Review', 'color': '#D97706'},
                {'name': 'Done', 'color': '#16A34A', 'is_completed': True},
            ),
        ))
    except ConflictError:
        print("   Demo project already exists, skipping.")
        return

    todo, doing, review, done = (s.id for s in project.statuses)
    container.save_workflow_service().execute(SaveWorkflowInputDTO(
        project_id=project.id,
        initial_statuses=(todo,),
        transitions={
            todo: (doing,),
            doing: (review, todo),
            review: (done, doing),
        },
        saved_by='admin',
    ))

    sample_tickets = [
        {'name': 'Site is down', 'issue_type': 'Bug', 'assignee_ids': ('tech-001',)},
        {'name': 'Google login button does nothing', 'issue_type': 'Bug',
         'assignee_ids': ('tech-002',)},
        {'name': 'Dark mode', 'issue_type': 'Story'},
        {'name': 'Slow customer listing', 'issue_type': 'Task'},
    ]

    print("Creating demo tickets...")
    create = container.create_ticket_service()
    created = []
    for ticket_data in sample_tickets:
        ticket = create.execute(CreateTicketInputDTO(
            project_id=project.id,
            created_by='user-001',
            **ticket_data,
        ))
        created.append(ticket)
        print(f"   {ticket.uuid} {ticket.name[:50]}")

    change_status = container.change_ticket_status_service()
    change_status.execute(ChangeStatusInputDTO(
        ticket_id=created[0].id,
        ticket_status_id=doing,
        actor_id='tech-001',
        note='Investigating',
    ))

    container.add_dependency_service().execute(AddDependencyInputDTO(
        ticket_id=created[2].id,
        depends_on_ticket_id=created[1].id,
    ))

    print(f"{len(created)} tickets created.")


def check_connection():
    from django.db import connection

    print("Checking database connection...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("Connection OK.")
        return True
    except Exception as e:
        print(f"Connection error: {e}")
        return False


def show_info():
    from django.conf import settings

    print("\n" + "=" * 60)
    print("Setup info")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Event publisher: {settings.EVENT_PUBLISHER_MODE}")
    print(f"  Debug Mode: {settings.DEBUG}")
    print("=" * 60)
    print("\nNext steps:")
    print("   1. python -m django runserver --settings=src.config.settings")
    print("   2. Open: http://localhost:8000/admin/")
    print("   3. Open: http://localhost:8000/tickets/api/?project_id=<id>")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Quick setup for development')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Create a demo project with tickets'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Only check the database connection'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("Ticket Workflow - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if args.check_only:
        check_connection()
        return

    if not check_connection():
        print("\nMake sure the database is running.")
        return

    run_migrations()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
