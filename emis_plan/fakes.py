"""
Fake payloads for seeding and tests

Driven by the `fake` metadata on each FieldSpec:
    {"generator": "lorem", "type": "sentence"}  -> lorem sentence
    {"generator": "lorem", "type": "words"}     -> 2-4 lorem words
    {"generator": "date", "type": "recent"}     -> within the last 30 days
    {"generator": "random", "type": "number"}   -> 1..20
    {"generator": "choice"}                     -> one of the field choices

References are never faked; pass them as overrides.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Optional

from .schema_spec import EntitySpec, FieldSpec

LOREM_WORDS = [
    "lorem", "ipsum", "dolor", "sit", "amet", "consectetur", "adipiscing",
    "elit", "sed", "do", "eiusmod", "tempor", "incididunt", "ut", "labore",
    "et", "dolore", "magna", "aliqua", "enim", "ad", "minim", "veniam",
    "quis", "nostrud", "exercitation", "ullamco", "laboris", "nisi",
    "aliquip", "ex", "ea", "commodo", "consequat",
]


def _words(rng: random.Random, count: int) -> str:
    return " ".join(rng.choice(LOREM_WORDS) for _ in range(count))


def _sentence(rng: random.Random) -> str:
    text = _words(rng, rng.randint(6, 12))
    return text[0].upper() + text[1:] + "."


def fake_value(f: FieldSpec, rng: random.Random):
    options = f.fake or {}
    generator = options.get("generator")
    kind = options.get("type")

    if generator == "lorem":
        if kind == "words":
            return _words(rng, rng.randint(2, 4)).title()
        return _sentence(rng)
    if generator == "date":
        delta = timedelta(days=rng.randint(0, 29), seconds=rng.randint(0, 86399))
        return (datetime.now(timezone.utc) - delta).isoformat()
    if generator == "random":
        return rng.randint(1, 20)
    if generator == "choice" and f.choices:
        return rng.choice(list(f.choices))
    return None


def fake(spec: EntitySpec, overrides: Optional[dict] = None, seed: Optional[int] = None) -> dict:
    """Build a wire payload (camelCase keys) for an entity."""
    rng = random.Random(seed)
    payload = {}
    for f in spec.fields:
        if f.is_reference or not f.fake:
            continue
        value = fake_value(f, rng)
        if value is not None:
            payload[f.key] = value
    payload.update(overrides or {})
    return payload
