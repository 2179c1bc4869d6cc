"""Instruction text sent with every scan image."""

from __future__ import annotations

# Bump together with ScanResult whenever the expected schema changes.
SCAN_PROMPT_VERSION = "2"

SCAN_PROMPT = """Analyze this image of device boxes and provide a JSON response with the following structure:

{
  "description": "A brief, clear description of what you see in the image (1-2 sentences)",
  "deviceCount": number of devices in the picture,
  "devices": array of objects, each containing:
    - "position": string describing the device's position in the image
    - "imei": string containing ONE IMEI number for that device
}

If the image is not clear enough for accurate IMEI reading, set deviceCount to 0, use an empty devices array and include an "error" field with the message.

Return ONLY the JSON response with no additional text or markdown formatting."""


def build_scan_prompt() -> str:
    return SCAN_PROMPT
