"""
Celery configuration for asynchronous processing.

Celery is used to:
- Process Domain Events out of the request/response cycle
- Deliver per-user notifications

Architecture:
- Broker: RabbitMQ (messages between Django and workers)
- Backend: Redis (task results)
- Workers: processes running the tasks

Usage:
    celery -A src.config.celery worker -l INFO -Q default,events,notifications
"""

import os
from celery import Celery
from kombu import Queue, Exchange

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('tickets')

# Every CELERY_* Django setting (broker, backend, eager mode...)
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    enable_utc=True,

    task_acks_late=True,  # ACK after execution
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    worker_send_task_events=True,
    task_send_sent_event=True,
)

app.conf.task_default_queue = 'default'

app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('notifications', Exchange('notifications'), routing_key='notifications.#'),
)

# notify_user is matched first so it lands on the notifications queue
app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.notify_user': {'queue': 'notifications'},
    'src.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

app.autodiscover_tasks([
    'src.adapters.django_app.events',
], related_name='handlers')
