"""
Tool definitions exposed to MCP clients.
Each tool has a name, a one-line description, and a JSON Schema input contract.
The router has exactly one handler for every name declared here.
"""

from mcp.types import Tool

# Incident lifecycle states accepted by incident.io
INCIDENT_STATUSES = ["triage", "investigating", "monitoring", "closed", "declined"]

DEFAULT_PAGE_SIZE = 25


def _page_size(what: str) -> dict:
    return {
        "type": "number",
        "description": f"Number of {what} to return per page",
        "default": DEFAULT_PAGE_SIZE,
    }


def _no_arguments() -> dict:
    return {"type": "object", "properties": {}}


TOOLS = [
    Tool(
        name="list_severities",
        description="List available severity levels in incident.io",
        inputSchema=_no_arguments(),
    ),
    Tool(
        name="list_incident_types",
        description="List available incident types in incident.io",
        inputSchema=_no_arguments(),
    ),
    Tool(
        name="list_incidents",
        description="List incidents from incident.io, optionally filtered by status and severity",
        inputSchema={
            "type": "object",
            "properties": {
                "page_size": _page_size("incidents"),
                "status": {
                    "type": "array",
                    "items": {"type": "string", "enum": INCIDENT_STATUSES},
                    "description": "Filter by incident status",
                },
                "severity": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Filter by severity",
                },
            },
        },
    ),
    Tool(
        name="create_incident",
        description="Create a new incident in incident.io",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Name of the incident",
                },
                "summary": {
                    "type": "string",
                    "description": "Summary of the incident",
                },
                "severity_id": {
                    "type": "string",
                    "description": "ID of the severity level (see list_severities)",
                },
                "incident_type_id": {
                    "type": "string",
                    "description": "ID of the incident type (see list_incident_types)",
                },
                "custom_field_entries": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "custom_field_id": {"type": "string"},
                            "values": {
                                "type": "array",
                                "items": {"type": "object"},
                            },
                        },
                    },
                    "description": "Custom field entries (see list_custom_fields)",
                },
            },
            "required": ["name", "severity_id", "incident_type_id"],
        },
    ),
    Tool(
        name="get_incident",
        description="Get details of a specific incident",
        inputSchema={
            "type": "object",
            "properties": {
                "incident_id": {
                    "type": "string",
                    "description": "ID of the incident to retrieve",
                },
            },
            "required": ["incident_id"],
        },
    ),
    Tool(
        name="update_incident",
        description="Update an existing incident. Only the fields provided are changed.",
        inputSchema={
            "type": "object",
            "properties": {
                "incident_id": {
                    "type": "string",
                    "description": "ID of the incident to update",
                },
                "name": {
                    "type": "string",
                    "description": "Updated name of the incident",
                },
                "summary": {
                    "type": "string",
                    "description": "Updated summary of the incident",
                },
                "status": {
                    "type": "string",
                    "enum": INCIDENT_STATUSES,
                    "description": "Updated status of the incident",
                },
                "severity_id": {
                    "type": "string",
                    "description": "Updated severity ID",
                },
            },
            "required": ["incident_id"],
        },
    ),
    Tool(
        name="update_incident_role",
        description="Assign or update a role (like Incident Lead) for an incident",
        inputSchema={
            "type": "object",
            "properties": {
                "incident_id": {
                    "type": "string",
                    "description": "ID of the incident",
                },
                "role_id": {
                    "type": "string",
                    "description": "ID of the role (see list_incident_roles)",
                },
                "user_id": {
                    "type": "string",
                    "description": "ID of the user to assign to the role (see list_users)",
                },
                "notify_incident_channel": {
                    "type": "boolean",
                    "description": "Announce the change in the incident channel",
                    "default": True,
                },
            },
            "required": ["incident_id", "role_id", "user_id"],
        },
    ),
    Tool(
        name="list_incident_roles",
        description="List available incident roles",
        inputSchema=_no_arguments(),
    ),
    Tool(
        name="list_users",
        description="List users in the organization",
        inputSchema={
            "type": "object",
            "properties": {
                "page_size": _page_size("users"),
            },
        },
    ),
    Tool(
        name="add_comment",
        description="Add a comment or timeline update to an incident",
        inputSchema={
            "type": "object",
            "properties": {
                "incident_id": {
                    "type": "string",
                    "description": "ID of the incident to add comment to",
                },
                "message": {
                    "type": "string",
                    "description": "The comment or update message",
                },
            },
            "required": ["incident_id", "message"],
        },
    ),
    Tool(
        name="list_incident_updates",
        description="List status updates posted on an incident",
        inputSchema={
            "type": "object",
            "properties": {
                "incident_id": {
                    "type": "string",
                    "description": "ID of the incident",
                },
            },
            "required": ["incident_id"],
        },
    ),
    Tool(
        name="list_follow_ups",
        description="List follow-ups, optionally for a single incident",
        inputSchema={
            "type": "object",
            "properties": {
                "incident_id": {
                    "type": "string",
                    "description": "Only return follow-ups for this incident",
                },
            },
        },
    ),
    Tool(
        name="get_follow_up",
        description="Get details of a specific follow-up",
        inputSchema={
            "type": "object",
            "properties": {
                "follow_up_id": {
                    "type": "string",
                    "description": "ID of the follow-up to retrieve",
                },
            },
            "required": ["follow_up_id"],
        },
    ),
    Tool(
        name="list_workflows",
        description="List workflows configured in incident.io",
        inputSchema=_no_arguments(),
    ),
    Tool(
        name="list_schedules",
        description="List on-call schedules",
        inputSchema={
            "type": "object",
            "properties": {
                "page_size": _page_size("schedules"),
            },
        },
    ),
    Tool(
        name="list_catalog_types",
        description="List catalog types (services, teams, etc.)",
        inputSchema=_no_arguments(),
    ),
    Tool(
        name="list_catalog_entries",
        description="List entries of a catalog type",
        inputSchema={
            "type": "object",
            "properties": {
                "catalog_type_id": {
                    "type": "string",
                    "description": "ID of the catalog type (see list_catalog_types)",
                },
                "page_size": _page_size("catalog entries"),
            },
            "required": ["catalog_type_id"],
        },
    ),
    Tool(
        name="list_custom_fields",
        description="List custom fields that can be set on incidents",
        inputSchema=_no_arguments(),
    ),
    Tool(
        name="list_incident_timestamps",
        description="List incident timestamp types (e.g. impact started, resolved at)",
        inputSchema=_no_arguments(),
    ),
]

TOOL_NAMES = [tool.name for tool in TOOLS]
