"""
Initial migration of the Projects domain.

Creates the tables:
- projects
- ticket_statuses
- project_workflows
- project_custom_fields
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Table: projects
        # =================================================================
        migrations.CreateModel(
            name='ProjectModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='Project UUID'
                )),
                ('name', models.CharField(
                    max_length=255,
                    db_index=True,
                    help_text='Project name'
                )),
                ('description', models.TextField(
                    blank=True,
                    default='',
                    help_text='Free text description'
                )),
                ('ticket_prefix', models.CharField(
                    max_length=10,
                    unique=True,
                    help_text='Prefix of ticket codes'
                )),
                ('color', models.CharField(
                    max_length=7,
                    null=True,
                    blank=True,
                    help_text='Hex color'
                )),
                ('start_date', models.DateField(null=True, blank=True)),
                ('end_date', models.DateField(null=True, blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Project',
                'verbose_name_plural': 'Projects',
                'db_table': 'projects',
                'ordering': ['name'],
            },
        ),

        # =================================================================
        # Table: ticket_statuses
        # =================================================================
        migrations.CreateModel(
            name='TicketStatusModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='Status UUID'
                )),
                ('name', models.CharField(max_length=100)),
                ('color', models.CharField(max_length=7, default='#2563EB')),
                ('is_completed', models.BooleanField(
                    default=False,
                    help_text='Tickets in this status count as done'
                )),
                ('sort_order', models.IntegerField(default=0)),
                ('project', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='statuses',
                    to='projects.projectmodel',
                    help_text='Owning project'
                )),
            ],
            options={
                'verbose_name': 'Ticket status',
                'verbose_name_plural': 'Ticket statuses',
                'db_table': 'ticket_statuses',
                'ordering': ['sort_order', 'name'],
            },
        ),
        migrations.AddConstraint(
            model_name='ticketstatusmodel',
            constraint=models.UniqueConstraint(
                fields=('project', 'name'),
                name='unique_status_name_per_project',
            ),
        ),

        # =================================================================
        # Table: project_workflows
        # =================================================================
        migrations.CreateModel(
            name='ProjectWorkflowModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                )),
                ('definition', models.JSONField(
                    default=dict,
                    help_text='Initial statuses and transition map'
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('project', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='workflow',
                    to='projects.projectmodel',
                )),
            ],
            options={
                'verbose_name': 'Project workflow',
                'verbose_name_plural': 'Project workflows',
                'db_table': 'project_workflows',
            },
        ),

        # =================================================================
        # Table: project_custom_fields
        # =================================================================
        migrations.CreateModel(
            name='ProjectCustomFieldModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                )),
                ('key', models.CharField(max_length=50)),
                ('label', models.CharField(max_length=255)),
                ('type', models.CharField(
                    max_length=20,
                    choices=[
                        ('text', 'Text'),
                        ('number', 'Number'),
                        ('select', 'Select'),
                        ('date', 'Date'),
                    ],
                    default='text',
                )),
                ('options', models.JSONField(default=list, blank=True)),
                ('is_required', models.BooleanField(default=False)),
                ('sort_order', models.IntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('project', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='custom_fields',
                    to='projects.projectmodel',
                )),
            ],
            options={
                'verbose_name': 'Custom field',
                'verbose_name_plural': 'Custom fields',
                'db_table': 'project_custom_fields',
                'ordering': ['sort_order', 'key'],
            },
        ),
        migrations.AddConstraint(
            model_name='projectcustomfieldmodel',
            constraint=models.UniqueConstraint(
                fields=('project', 'key'),
                name='unique_custom_field_key_per_project',
            ),
        ),
    ]
