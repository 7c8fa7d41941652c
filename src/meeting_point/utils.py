"""
Utility functions for the meeting point service.
"""

import asyncio
import json
from collections.abc import Awaitable
from typing import Any


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """
    Run awaitables concurrently and return their results in argument order.

    If any of them fails (or the caller is cancelled), the remaining ones are
    cancelled and awaited before the exception propagates, so no work outlives
    the call.

    Args:
        *aws: Coroutines or futures to run

    Returns:
        Results, positionally matching the arguments
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def parse_string_or_array(value: Any) -> list:
    """
    Normalize a tool argument that may be a list, a single value, or a
    JSON-stringified array.

    Args:
        value: Raw argument

    Returns:
        List of items (empty for None or an empty string)
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError:
                return [value]
            if isinstance(parsed, list):
                return parsed
        return [value]
    return [value]


def format_distance(meters: float) -> str:
    """
    Format distance in human-readable format.

    Args:
        meters: Distance in meters

    Returns:
        Formatted string (e.g., "1.2 km" or "350 m")
    """
    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{int(meters)} m"


def format_duration(seconds: int) -> str:
    """
    Format duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., "1h 23m" or "45m")
    """
    if seconds >= 3600:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        return f"{hours}h {minutes}m"
    elif seconds >= 60:
        minutes = seconds // 60
        return f"{minutes}m"
    return f"{seconds}s"


def format_meeting_point_result(result: dict) -> str:
    """
    Format a meeting point result in log-style output.

    Args:
        result: MeetingPointResult as a dict (model_dump output)

    Returns:
        Human-readable summary, one leg per line
    """
    meeting = result["meeting_coordinate"]
    lines = [
        "=== MEETING POINT ===",
        f'Meeting point: "{result["meeting_address"]}" ({meeting["lat"]:.5f}, {meeting["lng"]:.5f})',
        "",
        "From each origin:",
    ]

    for leg, coords in zip(result["origin_legs"], result["origin_coordinates"]):
        metric = leg["metric"]
        coord_str = f"({coords['lat']:.4f}, {coords['lng']:.4f})"
        if metric["reachable"]:
            lines.append(
                f'- "{leg["address"]}" {coord_str} -> meeting point '
                f'{metric["distance_text"]} {metric["duration_text"]}'
            )
        else:
            lines.append(f'- "{leg["address"]}" {coord_str} -> meeting point ERROR: {metric["status"]}')

    destination = result["destination_leg"]
    lines.append("")
    lines.append(
        f'Then to "{destination["address"]}": '
        f'{destination["metric"]["distance_text"]} {destination["metric"]["duration_text"]}'
    )
    lines.append(f"Total group travel to meeting point: {format_duration(result['total_duration_seconds'])}")

    return "\n".join(lines)


def format_geocode_results(results: list[dict]) -> str:
    """
    Format geocoding results in log-style output.

    Each line shows: address -> (lat, lng)

    Args:
        results: List of geocoding results

    Returns:
        Log-style output with each geocoded address on a separate line
    """
    lines = []

    for result in results:
        address = result.get("address", "Unknown")

        if result.get("status") == "success":
            lines.append(f'- "{address}" -> ({result["lat"]:.4f}, {result["lng"]:.4f})')
        else:
            error = result.get("error", "Unknown error")
            lines.append(f'- "{address}" ERROR: {error}')

    return "\n".join(lines) if lines else "No addresses geocoded"
