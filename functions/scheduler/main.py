"""Cloud Function: start or stop Cloud SQL instances from a Pub/Sub message.

Deploy with ``--entry-point process_pubsub`` on a Pub/Sub trigger. Messages
carry JSON such as::

    {"Instance": "db1,db2", "Project": "my-project", "Action": "stop"}
"""
import functions_framework

from cloudsql_scheduler.handler import handle_background_event, handle_cloud_event


@functions_framework.cloud_event
def process_pubsub(cloud_event):
    return handle_cloud_event(cloud_event)


def process_pubsub_background(event, context):
    return handle_background_event(event, context)
