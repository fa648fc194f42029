"""Decoding of sensor payloads posted by embedded clients.

Clients send the two fields ``temp`` and ``hum`` either as a form body, a JSON
object, or a loose text body that merely contains ``temp=<n>`` / ``hum=<n>``.
Every branch yields the same two floats. Values that cannot be read as a
number, or are missing, become ``0.0`` instead of failing the request.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import parse_qs

TEMPERATURE_KEY = "temp"
HUMIDITY_KEY = "hum"

_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_TEXT_TEMPERATURE = re.compile(r"temp=([0-9.]+)")
_TEXT_HUMIDITY = re.compile(r"hum=([0-9.]+)")


class PayloadFormat(str, Enum):
    """Body encodings accepted by the ingestion endpoint."""

    form = "form"
    json = "json"
    text = "text"


@dataclass(frozen=True, slots=True)
class ParsedPayload:
    temperature: float
    humidity: float
    payload_format: PayloadFormat


def detect_format(content_type: Optional[str]) -> PayloadFormat:
    candidate = (content_type or "").lower()
    if "application/x-www-form-urlencoded" in candidate:
        return PayloadFormat.form
    if "application/json" in candidate:
        return PayloadFormat.json
    return PayloadFormat.text


def coerce_float(value: Any) -> float:
    """Best-effort float conversion; anything unusable becomes ``0.0``.

    Strings are read up to the end of their leading numeric literal, so
    ``"25.5C"`` gives ``25.5``.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        match = _LEADING_FLOAT.match(value)
        if match is None:
            return 0.0
        parsed = float(match.group(1))
    else:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def _decode_text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def _parse_form(body: bytes) -> tuple[Any, Any]:
    fields = parse_qs(_decode_text(body), keep_blank_values=True)
    return _first(fields, TEMPERATURE_KEY), _first(fields, HUMIDITY_KEY)


def _parse_json(body: bytes) -> tuple[Any, Any]:
    if not body.strip():
        return None, None
    try:
        document = json.loads(body)
    except ValueError as exc:
        raise ValueError(f"Malformed JSON body: {exc}") from exc
    if not isinstance(document, dict):
        return None, None
    return document.get(TEMPERATURE_KEY), document.get(HUMIDITY_KEY)


def _parse_text(body: bytes) -> tuple[Any, Any]:
    text = _decode_text(body)
    temperature = _TEXT_TEMPERATURE.search(text)
    humidity = _TEXT_HUMIDITY.search(text)
    return (
        temperature.group(1) if temperature else None,
        humidity.group(1) if humidity else None,
    )


def _first(fields: Mapping[str, list[str]], key: str) -> Optional[str]:
    values = fields.get(key)
    if not values:
        return None
    return values[0]


_PARSERS: Dict[PayloadFormat, Callable[[bytes], tuple[Any, Any]]] = {
    PayloadFormat.form: _parse_form,
    PayloadFormat.json: _parse_json,
    PayloadFormat.text: _parse_text,
}


def parse_payload(content_type: Optional[str], body: bytes) -> ParsedPayload:
    """Extract temperature and humidity from a request body.

    Raises ``ValueError`` only when a JSON body cannot be decoded at all.
    """
    payload_format = detect_format(content_type)
    raw_temperature, raw_humidity = _PARSERS[payload_format](body)
    return ParsedPayload(
        temperature=coerce_float(raw_temperature),
        humidity=coerce_float(raw_humidity),
        payload_format=payload_format,
    )
