"""Projects app: projects, statuses, workflows and custom fields."""
