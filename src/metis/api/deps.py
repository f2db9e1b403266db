from __future__ import annotations

from fastapi import Request

from metis.core.tracker import Tracker


def get_tracker(request: Request) -> Tracker:
    return request.app.state.tracker
