"""
Request dependencies: stores live on app.state (built once in the lifespan) so tests can swap backends.
"""
from fastapi import Request

from whentomeet.services.roster_store import RosterStore
from whentomeet.services.slot_store import SlotStore


def get_slot_store(request: Request) -> SlotStore:
    return request.app.state.slot_store


def get_roster_store(request: Request) -> RosterStore:
    return request.app.state.roster_store
