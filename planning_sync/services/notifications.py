"""
Notifications — Slack webhook integration for sync runs.

Notification failure never blocks the pipeline.
"""
import logging
import requests

from planning_sync.config import SLACK_WEBHOOK_URL

logger = logging.getLogger('services.notifications')

MAX_LISTED_ERRORS = 5


def notify_sync_errors(client, run):
    """Post a summary of a sync run that recorded errors to Slack."""
    if not SLACK_WEBHOOK_URL or not run.errors:
        return

    try:
        name = getattr(client, 'company_name', '') or run.client_id
        blocks = [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"Planning sync finished with errors — {name}",
                }
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Found:* {run.found or 0}"},
                    {"type": "mrkdwn", "text": f"*New:* {run.created or 0}"},
                    {"type": "mrkdwn", "text": f"*Sent to CRM:* {run.sent or 0}"},
                    {"type": "mrkdwn", "text": f"*Errors:* {len(run.errors)}"},
                ]
            },
        ]

        listed = '\n'.join(f"• {err[:300]}" for err in run.errors[:MAX_LISTED_ERRORS])
        if len(run.errors) > MAX_LISTED_ERRORS:
            listed += f"\n…and {len(run.errors) - MAX_LISTED_ERRORS} more"
        blocks.append({
            "type": "section",
            "text": {"type": "mrkdwn", "text": listed},
        })

        requests.post(SLACK_WEBHOOK_URL, json={"blocks": blocks}, timeout=10)
        logger.info("Sync error notification sent for client %s", run.client_id)

    except Exception:
        logger.error("Failed to send notification for client %s", run.client_id, exc_info=True)
