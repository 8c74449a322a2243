"""Report the current date and time."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from agent_loops.tools.base import BaseTool, ToolResult


class CurrentDateTimeTool(BaseTool):
    name = "current_datetime"
    description = "Get the current date and time, optionally in a given IANA timezone."

    def parameters_schema(self):
        return {
            "type": "object",
            "properties": {
                "timezone": {
                    "type": "string",
                    "description": "IANA timezone name (e.g., 'Europe/Berlin'). Defaults to UTC.",
                },
            },
        }

    async def execute(self, params):
        tz_name = params.get("timezone") or "UTC"
        try:
            tz = timezone.utc if tz_name == "UTC" else ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            return ToolResult.error(f"Unknown timezone: {tz_name}")
        now = datetime.now(tz)
        return {
            "timezone": tz_name,
            "iso": now.isoformat(),
            "weekday": now.strftime("%A"),
        }
