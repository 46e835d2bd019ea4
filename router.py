"""
Tool routing for the incident.io MCP server.

Every tool call is turned into a plan: an ordered list of attempts, each an
ApiRequest plus a predicate saying which failures move on to the next
attempt. Building a plan does no I/O, so validation errors never reach the
network and plans can be inspected directly.
"""

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import quote

from api_client import ApiRequest
from errors import IncidentIOAPIError, ToolValidationError, UnknownToolError

logger = logging.getLogger(__name__)

Arguments = Mapping[str, Any]
FallbackPredicate = Callable[[IncidentIOAPIError], bool]


def never(error: IncidentIOAPIError) -> bool:
    return False


def status_is(status_code: int) -> FallbackPredicate:
    """Fall back only when the failed attempt returned exactly this status."""

    def predicate(error: IncidentIOAPIError) -> bool:
        return error.status_code == status_code

    return predicate


@dataclass(frozen=True)
class Attempt:
    request: ApiRequest
    fallback_on: FallbackPredicate = never


Plan = List[Attempt]


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------

def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _require(arguments: Arguments, field: str, action: str = "", hint: str = "") -> Any:
    """Return a required argument or raise ToolValidationError naming it."""
    value = arguments.get(field)
    if _is_missing(value):
        message = f"{field} is required"
        if action:
            message += f" for {action}"
        if hint:
            message += f". {hint}"
        raise ToolValidationError(message)
    return value


def _pick(arguments: Arguments, fields: Iterable[str]) -> Dict[str, Any]:
    """Copy only the fields the caller actually supplied (sparse semantics)."""
    return {
        field: arguments[field]
        for field in fields
        if arguments.get(field) is not None
    }


def _query_value(value: Any) -> str:
    # JSON numbers may arrive as floats (25.0); the API wants "25"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _query(
    arguments: Arguments,
    scalars: Iterable[str] = (),
    arrays: Iterable[str] = (),
) -> Tuple[Tuple[str, str], ...]:
    """
    Build query parameters from optional arguments.

    Array arguments repeat as "name[]" in caller order; absent arguments are
    left out entirely.
    """
    params = []
    for field in scalars:
        value = arguments.get(field)
        if not _is_missing(value):
            params.append((field, _query_value(value)))
    for field in arrays:
        values = arguments.get(field)
        if values is None:
            continue
        if isinstance(values, str):
            values = [values]
        for value in values:
            params.append((f"{field}[]", _query_value(value)))
    return tuple(params)


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def generate_idempotency_key() -> str:
    """inc-<epoch millis>-<random suffix>, unique even within one millisecond."""
    return f"inc-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def _get(path: str, params: Tuple[Tuple[str, str], ...] = ()) -> Plan:
    return [Attempt(ApiRequest("GET", path, params=params))]


# ---------------------------------------------------------------------------
# Plan builders, one per tool
# ---------------------------------------------------------------------------

def plan_list_severities(arguments: Arguments) -> Plan:
    return _get("/v1/severities")


def plan_list_incident_types(arguments: Arguments) -> Plan:
    return _get("/v1/incident_types")


def plan_list_incidents(arguments: Arguments) -> Plan:
    params = _query(arguments, scalars=["page_size"], arrays=["status", "severity"])
    return _get("/v2/incidents", params)


def plan_create_incident(arguments: Arguments) -> Plan:
    action = "creating an incident"
    body = {
        "name": _require(arguments, "name", action),
        "mode": "standard",
        "severity_id": _require(
            arguments, "severity_id", action,
            hint="Use list_severities to see available options.",
        ),
        "incident_type_id": _require(
            arguments, "incident_type_id", action,
            hint="Use list_incident_types to see available options.",
        ),
        "visibility": "public",
        "idempotency_key": generate_idempotency_key(),
    }
    body.update(_pick(arguments, ["summary", "custom_field_entries"]))
    return [Attempt(ApiRequest("POST", "/v2/incidents", json=body))]


def plan_get_incident(arguments: Arguments) -> Plan:
    incident_id = _require(arguments, "incident_id")
    return _get(f"/v2/incidents/{_segment(incident_id)}")


def plan_update_incident(arguments: Arguments) -> Plan:
    incident_id = _require(arguments, "incident_id")
    body = _pick(arguments, ["name", "summary", "status", "severity_id"])
    path = f"/v2/incidents/{_segment(incident_id)}"
    return [Attempt(ApiRequest("PATCH", path, json=body))]


def plan_update_incident_role(arguments: Arguments) -> Plan:
    incident_id = _require(arguments, "incident_id")
    role_id = _require(arguments, "role_id", hint="Use list_incident_roles to see available options.")
    user_id = _require(arguments, "user_id", hint="Use list_users to find the user.")

    body = {
        "incident_role_assignments": [
            {
                "assignee": {"id": user_id},
                "incident_role_id": role_id,
            }
        ],
        # Only an explicit false keeps the channel quiet
        "notify_incident_channel": arguments.get("notify_incident_channel") is not False,
    }
    path = f"/v2/incidents/{_segment(incident_id)}/actions/edit"
    return [Attempt(ApiRequest("POST", path, json=body))]


def plan_list_incident_roles(arguments: Arguments) -> Plan:
    return _get("/v1/incident_roles")


def plan_list_users(arguments: Arguments) -> Plan:
    return _get("/v2/users", _query(arguments, scalars=["page_size"]))


def plan_add_comment(arguments: Arguments) -> Plan:
    incident_id = _segment(_require(arguments, "incident_id"))
    message = _require(arguments, "message")

    return [
        Attempt(
            ApiRequest("POST", f"/v2/incidents/{incident_id}/updates", json={"message": message}),
            fallback_on=status_is(404),
        ),
        Attempt(
            ApiRequest(
                "POST",
                f"/v1/incidents/{incident_id}/timeline_events",
                json={"event_type": "manual", "message": message},
            ),
        ),
    ]


def plan_list_incident_updates(arguments: Arguments) -> Plan:
    _require(arguments, "incident_id")
    return _get("/v2/incident_updates", _query(arguments, scalars=["incident_id"]))


def plan_list_follow_ups(arguments: Arguments) -> Plan:
    return _get("/v2/follow_ups", _query(arguments, scalars=["incident_id"]))


def plan_get_follow_up(arguments: Arguments) -> Plan:
    follow_up_id = _require(arguments, "follow_up_id")
    return _get(f"/v2/follow_ups/{_segment(follow_up_id)}")


def plan_list_workflows(arguments: Arguments) -> Plan:
    return _get("/v2/workflows")


def plan_list_schedules(arguments: Arguments) -> Plan:
    return _get("/v2/schedules", _query(arguments, scalars=["page_size"]))


def plan_list_catalog_types(arguments: Arguments) -> Plan:
    return _get("/v2/catalog_types")


def plan_list_catalog_entries(arguments: Arguments) -> Plan:
    _require(arguments, "catalog_type_id", hint="Use list_catalog_types to see available options.")
    return _get(
        "/v2/catalog_entries",
        _query(arguments, scalars=["catalog_type_id", "page_size"]),
    )


def plan_list_custom_fields(arguments: Arguments) -> Plan:
    return _get("/v2/custom_fields")


def plan_list_incident_timestamps(arguments: Arguments) -> Plan:
    return _get("/v2/incident_timestamps")


PLAN_BUILDERS: Dict[str, Callable[[Arguments], Plan]] = {
    "list_severities": plan_list_severities,
    "list_incident_types": plan_list_incident_types,
    "list_incidents": plan_list_incidents,
    "create_incident": plan_create_incident,
    "get_incident": plan_get_incident,
    "update_incident": plan_update_incident,
    "update_incident_role": plan_update_incident_role,
    "list_incident_roles": plan_list_incident_roles,
    "list_users": plan_list_users,
    "add_comment": plan_add_comment,
    "list_incident_updates": plan_list_incident_updates,
    "list_follow_ups": plan_list_follow_ups,
    "get_follow_up": plan_get_follow_up,
    "list_workflows": plan_list_workflows,
    "list_schedules": plan_list_schedules,
    "list_catalog_types": plan_list_catalog_types,
    "list_catalog_entries": plan_list_catalog_entries,
    "list_custom_fields": plan_list_custom_fields,
    "list_incident_timestamps": plan_list_incident_timestamps,
}


def build_plan(name: str, arguments: Optional[Arguments]) -> Plan:
    """
    Validate arguments and build the request plan for a tool.

    Raises:
        UnknownToolError: name has no handler
        ToolValidationError: a required argument is missing
    """
    builder = PLAN_BUILDERS.get(name)
    if builder is None:
        raise UnknownToolError(name)
    return builder(arguments or {})


async def execute_plan(client, plan: Plan) -> Any:
    """
    Run attempts in order until one succeeds.

    A failure moves on to the next attempt only if the failed attempt's
    predicate accepts it; otherwise (or on the last attempt) it propagates.
    """
    for index, attempt in enumerate(plan):
        try:
            return await client.request(attempt.request)
        except IncidentIOAPIError as e:
            is_last = index == len(plan) - 1
            if is_last or not attempt.fallback_on(e):
                raise
            next_request = plan[index + 1].request
            logger.warning(
                "%s %s failed (%s), falling back to %s %s",
                attempt.request.method, attempt.request.path, e.status_code,
                next_request.method, next_request.path,
            )
    raise ValueError("Empty request plan")


class ToolRouter:
    """Dispatches tool calls to the incident.io API through one shared client."""

    def __init__(self, client):
        self.client = client

    async def call(self, name: str, arguments: Optional[Arguments] = None) -> Any:
        plan = build_plan(name, arguments)
        return await execute_plan(self.client, plan)
