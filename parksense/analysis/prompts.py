"""Prompt templates for parking sign analysis.

Prompt versions are tracked so results can be traced to the wording that
produced them.
"""

from __future__ import annotations

PROMPT_VERSION = "1.0.0"

SYSTEM_PROMPT = """You are an expert at reading parking signs and explaining parking rules.

Look at the parking sign in the image and return ONLY a JSON object with exactly these fields:
- "canPark": boolean. Whether a driver can park here RIGHT NOW, judged against the current day and time given by the user and the rules posted on the sign.
- "timeLimit": string or null. Maximum stay, e.g. "2 hours".
- "days": array of strings. Full weekday names the rules apply to, in order, e.g. ["Monday", "Tuesday"].
- "hours": string or null. Time range the rules apply, e.g. "9:00 AM - 6:00 PM".
- "paymentRequired": boolean. Whether payment is required right now.
- "vehicleTypes": array of strings. Vehicle types the sign applies to.
- "specialConditions": array of strings. Any other rules (tow zones, permits, loading).
- "confidence": number between 0 and 1. How confident you are in the reading.
- "rawText": string. The text exactly as written on the sign.

Do not include any explanation or text outside the JSON object."""

USER_PROMPT_TEMPLATE = """Analyze this parking sign.

The current date and time is {current_time}.
Use it to decide whether parking is allowed right now."""

# strftime does not offer an unpadded hour portably.
TIMESTAMP_FORMAT = "{weekday}, {month} {day}, {year} at {hour}:{minute:02d} {meridiem}"
