"""
Meeting Point MCP Server

FastMCP server exposing the meeting point search.

Tools:
- find_meeting_point: Find the point minimizing total group travel before a shared destination
- geocode: Convert addresses to coordinates (forward geocoding)
"""

import asyncio
import logging
from typing import Literal

from fastmcp import FastMCP
from pydantic import ValidationError

from .config import Settings, setup_logging
from .errors import ConfigurationError, MeetingPointError, error_payload
from .models import MeetingPointRequest
from .service import MeetingPointService
from .utils import format_geocode_results, format_meeting_point_result, parse_string_or_array

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("meeting-point")

# Service is created on first use from environment settings
_service: MeetingPointService | None = None


def get_meeting_point_service() -> MeetingPointService:
    """
    Get or create the process-wide meeting point service.

    Raises ConfigurationError when the environment settings are missing or invalid.
    """
    global _service
    if _service is None:
        try:
            settings = Settings.from_env()
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        _service = MeetingPointService.from_settings(settings)
    return _service


def _error_response(exc: Exception, format: str | None) -> str | dict:
    payload = error_payload(exc)
    if format == "json":
        return payload
    return f"Error ({payload['kind']}): {payload['error']}"


@mcp.tool
async def find_meeting_point(
    origins: list[str] | str,
    destination: str,
    format: Literal["text", "json"] | None = None,
) -> str | dict:
    """
    Find the single meeting point that minimizes the group's total travel time.

    Every origin is geocoded, a candidate point is derived from the origins,
    and the candidate with the lowest summed travel duration from all origins
    is chosen. The result lists each origin's leg to the meeting point (in the
    order given) and the onward leg from the meeting point to the destination.

    Args:
        origins: Starting addresses, one per traveller (list or single string)
        destination: Shared final destination address
        format: Output format - "text" for human-readable (default), "json" for structured data

    Returns:
        Human-readable summary (default) or JSON structured data

    Example:
        find_meeting_point(
            origins=["Palo Alto, CA", "San Jose, CA"],
            destination="San Francisco International Airport"
        )
    """
    try:
        request = MeetingPointRequest(origins=parse_string_or_array(origins), destination=destination)
    except ValidationError as e:
        logger.info("Rejected meeting point request: %s", e)
        return _error_response(e, format)

    try:
        result = await get_meeting_point_service().find_meeting_point(request)
    except MeetingPointError as e:
        logger.warning("Meeting point search failed (%s): %s", e.kind, e)
        return _error_response(e, format)

    structured_data = result.model_dump()
    if format == "json":
        return structured_data
    return format_meeting_point_result(structured_data)


@mcp.tool
async def geocode(
    addresses: list[str] | str,
    format: Literal["text", "json"] | None = None,
) -> str | dict:
    """
    Convert addresses to coordinates (forward geocoding).

    Useful for checking that addresses resolve before a meeting point search.
    Addresses are geocoded in parallel; results are cached.

    Args:
        addresses: Single address string or list of addresses to geocode
        format: Output format - "text" for human-readable (default), "json" for structured data

    Returns:
        Human-readable log format (default) or JSON structured data

    Example:
        geocode(addresses=["Times Square, NYC", "Golden Gate Bridge, SF"])
    """
    try:
        geocoder = get_meeting_point_service().geocoder
    except MeetingPointError as e:
        logger.warning("Geocoding unavailable (%s): %s", e.kind, e)
        return _error_response(e, format)
    addresses = parse_string_or_array(addresses)

    geocoded = await asyncio.gather(
        *(geocoder.resolve(address) for address in addresses), return_exceptions=True
    )

    results = []
    for address, result in zip(addresses, geocoded):
        if isinstance(result, MeetingPointError):
            results.append({"address": address, "status": "error", "error": str(result), "kind": result.kind})
        elif isinstance(result, BaseException):
            raise result
        else:
            results.append({"address": address, "status": "success", "lat": result.lat, "lng": result.lng})

    successful = sum(1 for result in results if result["status"] == "success")
    structured_data = {
        "results": results,
        "summary": {
            "total_addresses": len(addresses),
            "successful": successful,
            "failed": len(results) - successful,
        },
    }

    if format == "json":
        return structured_data
    return format_geocode_results(results)


def main():
    """Entry point for the MCP server"""
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    global _service
    _service = MeetingPointService.from_settings(settings)
    logger.info("Starting meeting point MCP server (travel mode: %s)", settings.travel_mode)
    mcp.run()


if __name__ == "__main__":
    main()
