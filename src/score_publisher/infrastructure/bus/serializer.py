from __future__ import annotations

import json
from datetime import datetime
from typing import Any


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def serialize_payload(payload: dict[str, Any]) -> str:
    return json.dumps(payload, cls=_Encoder, separators=(",", ":"))

