"""
Client side: API client, local identity, drag selection and the poll loop.
"""
from whentomeet.client.api_client import AvailabilityClient
from whentomeet.client.identity import LocalIdentity
from whentomeet.client.profile import delete_profile, save_profile
from whentomeet.client.selection import BatchResult, DragAction, SelectionController, rectangle
from whentomeet.client.sync import SyncLoop

__all__ = [
    "AvailabilityClient",
    "BatchResult",
    "DragAction",
    "LocalIdentity",
    "SelectionController",
    "SyncLoop",
    "delete_profile",
    "rectangle",
    "save_profile",
]
