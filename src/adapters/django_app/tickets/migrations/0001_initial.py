"""
Initial migration of the Tickets domain.

Creates the tables:
- tickets
- ticket_assignees
- ticket_histories
- ticket_dependencies
- ticket_custom_values
- ticket_comments
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
    ]

    operations = [
        # =================================================================
        # Table: tickets
        # =================================================================
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='Ticket UUID'
                )),
                ('uuid', models.CharField(
                    max_length=32,
                    unique=True,
                    help_text='Human-readable ticket code'
                )),
                ('priority_id', models.CharField(max_length=36, null=True, blank=True)),
                ('epic_id', models.CharField(max_length=36, null=True, blank=True)),
                ('sprint_id', models.CharField(max_length=36, null=True, blank=True)),
                ('issue_type', models.CharField(
                    max_length=10,
                    choices=[
                        ('Bug', 'Bug'),
                        ('Task', 'Task'),
                        ('Story', 'Story'),
                        ('Epic', 'Epic'),
                    ],
                    default='Task',
                )),
                ('name', models.CharField(
                    max_length=255,
                    db_index=True,
                    help_text='Ticket name'
                )),
                ('description', models.TextField(blank=True, default='')),
                ('start_date', models.DateField(null=True, blank=True)),
                ('due_date', models.DateField(null=True, blank=True)),
                ('created_by', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Creator user id'
                )),
                ('created_at', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True
                )),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('parent', models.ForeignKey(
                    null=True,
                    blank=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='children',
                    to='tickets.ticketmodel',
                )),
                ('project', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='tickets',
                    to='projects.projectmodel',
                )),
                ('ticket_status', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='tickets',
                    to='projects.ticketstatusmodel',
                )),
            ],
            options={
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'db_table': 'tickets',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['project', 'created_at'], name='tickets_project_created_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['project', 'ticket_status'], name='tickets_project_status_idx'),
        ),

        # =================================================================
        # Table: ticket_assignees
        # =================================================================
        migrations.CreateModel(
            name='TicketAssigneeModel',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID'
                )),
                ('user_id', models.CharField(max_length=100, db_index=True)),
                ('position', models.PositiveIntegerField(default=0)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='assignees',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_assignees',
                'ordering': ['position'],
            },
        ),
        migrations.AddConstraint(
            model_name='ticketassigneemodel',
            constraint=models.UniqueConstraint(
                fields=('ticket', 'user_id'),
                name='unique_ticket_assignee',
            ),
        ),

        # =================================================================
        # Table: ticket_histories
        # =================================================================
        migrations.CreateModel(
            name='TicketHistoryModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                )),
                ('user_id', models.CharField(max_length=100, null=True, blank=True)),
                ('from_ticket_status_id', models.CharField(
                    max_length=36,
                    null=True,
                    blank=True,
                    help_text='Previous status, null for the creation row'
                )),
                ('to_ticket_status_id', models.CharField(max_length=36)),
                ('note', models.TextField(null=True, blank=True)),
                ('sequence', models.PositiveIntegerField(
                    default=0,
                    help_text='Insert order within the ticket'
                )),
                ('created_at', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True
                )),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='histories',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'verbose_name': 'Ticket history',
                'verbose_name_plural': 'Ticket histories',
                'db_table': 'ticket_histories',
                'ordering': ['sequence'],
            },
        ),
        migrations.AddConstraint(
            model_name='tickethistorymodel',
            constraint=models.UniqueConstraint(
                fields=('ticket', 'sequence'),
                name='unique_ticket_history_sequence',
            ),
        ),

        # =================================================================
        # Table: ticket_dependencies
        # =================================================================
        migrations.CreateModel(
            name='TicketDependencyModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                )),
                ('type', models.CharField(
                    max_length=10,
                    choices=[('blocks', 'Blocks'), ('relates', 'Relates')],
                    default='blocks',
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('depends_on_ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='dependents',
                    to='tickets.ticketmodel',
                )),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='dependencies',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'verbose_name': 'Ticket dependency',
                'verbose_name_plural': 'Ticket dependencies',
                'db_table': 'ticket_dependencies',
            },
        ),
        migrations.AddConstraint(
            model_name='ticketdependencymodel',
            constraint=models.UniqueConstraint(
                fields=('ticket', 'depends_on_ticket', 'type'),
                name='unique_ticket_dependency',
            ),
        ),

        # =================================================================
        # Table: ticket_custom_values
        # =================================================================
        migrations.CreateModel(
            name='TicketCustomValueModel',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID'
                )),
                ('value', models.JSONField(null=True, blank=True)),
                ('custom_field', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='values',
                    to='projects.projectcustomfieldmodel',
                )),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='custom_values',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_custom_values',
            },
        ),
        migrations.AddConstraint(
            model_name='ticketcustomvaluemodel',
            constraint=models.UniqueConstraint(
                fields=('ticket', 'custom_field'),
                name='unique_ticket_custom_value',
            ),
        ),

        # =================================================================
        # Table: ticket_comments
        # =================================================================
        migrations.CreateModel(
            name='TicketCommentModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                )),
                ('user_id', models.CharField(max_length=100, db_index=True)),
                ('body', models.TextField()),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='comments',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_comments',
                'ordering': ['created_at'],
            },
        ),
    ]
