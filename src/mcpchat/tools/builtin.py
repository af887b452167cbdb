"""Built-in demonstration tools: calculator, mock weather, clock, text utilities."""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mcpchat.tools.registry import ToolDescriptor

# ---------------------------------------------------------------------------
# calculator
# ---------------------------------------------------------------------------


def calculate(args: dict[str, Any]) -> dict[str, Any]:
    operation = args["operation"]
    a, b = args["a"], args["b"]

    if operation == "add":
        return {"result": a + b, "calculation": f"{a} + {b} = {a + b}"}
    if operation == "subtract":
        return {"result": a - b, "calculation": f"{a} - {b} = {a - b}"}
    if operation == "multiply":
        return {"result": a * b, "calculation": f"{a} × {b} = {a * b}"}
    if operation == "divide":
        if b == 0:
            msg = "Division by zero is not allowed"
            raise ValueError(msg)
        return {"result": a / b, "calculation": f"{a} ÷ {b} = {a / b}"}
    msg = f"Unknown operation: {operation}"
    raise ValueError(msg)


calculator_tool = ToolDescriptor(
    name="calculator",
    description=(
        "Perform basic arithmetic operations like addition, subtraction, "
        "multiplication, and division"
    ),
    parameters={
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "enum": ["add", "subtract", "multiply", "divide"],
                "description": "The arithmetic operation to perform",
            },
            "a": {"type": "number", "description": "First number"},
            "b": {"type": "number", "description": "Second number"},
        },
        "required": ["operation", "a", "b"],
    },
    executor=calculate,
)

# ---------------------------------------------------------------------------
# get_weather (mock data)
# ---------------------------------------------------------------------------

_MOCK_WEATHER: dict[str, dict[str, Any]] = {
    "San Francisco": {"temp": 18, "condition": "Foggy", "humidity": 85},
    "New York": {"temp": 22, "condition": "Sunny", "humidity": 60},
    "London": {"temp": 15, "condition": "Rainy", "humidity": 90},
    "Tokyo": {"temp": 25, "condition": "Cloudy", "humidity": 70},
    "Sydney": {"temp": 20, "condition": "Sunny", "humidity": 55},
}


def get_weather(args: dict[str, Any]) -> dict[str, Any]:
    city: str = args["city"]
    country: str = args.get("country", "US")
    units: str = args.get("units", "celsius")

    key = next((k for k in _MOCK_WEATHER if city.lower() in k.lower()), None)
    if key is None:
        return {
            "city": city,
            "country": country,
            "error": "Weather data not available for this city",
            "available_cities": list(_MOCK_WEATHER),
        }

    weather = _MOCK_WEATHER[key]
    temperature = weather["temp"]
    if units == "fahrenheit":
        temperature = round(temperature * 9 / 5 + 32)

    return {
        "city": key,
        "country": country,
        "temperature": f"{temperature}°{'F' if units == 'fahrenheit' else 'C'}",
        "condition": weather["condition"],
        "humidity": f"{weather['humidity']}%",
        "units": units,
    }


weather_tool = ToolDescriptor(
    name="get_weather",
    description="Get current weather information for a specific city",
    parameters={
        "type": "object",
        "properties": {
            "city": {"type": "string", "description": "The city name"},
            "country": {
                "type": "string",
                "description": "The country code (optional)",
                "default": "US",
            },
            "units": {
                "type": "string",
                "enum": ["celsius", "fahrenheit"],
                "description": "Temperature units",
                "default": "celsius",
            },
        },
        "required": ["city"],
    },
    executor=get_weather,
)

# ---------------------------------------------------------------------------
# get_time
# ---------------------------------------------------------------------------

_TIMEZONE_EXAMPLES = ["UTC", "America/New_York", "Europe/London", "Asia/Tokyo", "Australia/Sydney"]


def get_time(args: dict[str, Any]) -> dict[str, Any]:
    timezone: str = args.get("timezone", "UTC")
    fmt: str = args.get("format", "24h")

    try:
        tz = dt_timezone.utc if timezone.upper() == "UTC" else ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return {
            "error": f"Invalid timezone: {timezone}",
            "available_examples": _TIMEZONE_EXAMPLES,
        }
    now = datetime.now(tz)

    pattern = "%m/%d/%Y, %I:%M:%S %p" if fmt == "12h" else "%m/%d/%Y, %H:%M:%S"
    return {
        "timezone": timezone,
        "current_time": now.strftime(pattern),
        "format": fmt,
        "timestamp": int(now.timestamp() * 1000),
    }


time_tool = ToolDescriptor(
    name="get_time",
    description="Get current time in a specific timezone or UTC",
    parameters={
        "type": "object",
        "properties": {
            "timezone": {
                "type": "string",
                "description": (
                    'Timezone (e.g., "America/New_York", "Europe/London", "Asia/Tokyo") or "UTC"'
                ),
                "default": "UTC",
            },
            "format": {
                "type": "string",
                "enum": ["12h", "24h"],
                "description": "Time format",
                "default": "24h",
            },
        },
    },
    executor=get_time,
)

# ---------------------------------------------------------------------------
# process_text
# ---------------------------------------------------------------------------


def process_text(args: dict[str, Any]) -> dict[str, Any]:
    text: str = args["text"]
    operation: str = args["operation"]

    if operation == "count_words":
        return {"operation": operation, "input": text, "result": len(text.split()), "unit": "words"}
    if operation == "count_chars":
        return {"operation": operation, "input": text, "result": len(text), "unit": "characters"}
    if operation == "reverse":
        return {"operation": operation, "input": text, "result": text[::-1]}
    if operation == "uppercase":
        return {"operation": operation, "input": text, "result": text.upper()}
    if operation == "lowercase":
        return {"operation": operation, "input": text, "result": text.lower()}
    if operation == "title_case":
        return {"operation": operation, "input": text, "result": text.title()}
    msg = f"Unknown operation: {operation}"
    raise ValueError(msg)


text_tool = ToolDescriptor(
    name="process_text",
    description="Process text with various operations like counting, reversing, or case conversion",
    parameters={
        "type": "object",
        "properties": {
            "text": {"type": "string", "description": "The text to process"},
            "operation": {
                "type": "string",
                "enum": [
                    "count_words",
                    "count_chars",
                    "reverse",
                    "uppercase",
                    "lowercase",
                    "title_case",
                ],
                "description": "The operation to perform on the text",
            },
        },
        "required": ["text", "operation"],
    },
    executor=process_text,
)


BUILTIN_TOOLS: list[ToolDescriptor] = [calculator_tool, weather_tool, time_tool, text_tool]
