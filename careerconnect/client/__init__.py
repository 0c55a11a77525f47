"""
Client module - API wrapper and state stores for front ends.
"""

from careerconnect.client.api import APIError, CareerConnectClient
from careerconnect.client.stores import AuthStore, JobStore, MessageStore

__all__ = ["APIError", "CareerConnectClient", "AuthStore", "JobStore", "MessageStore"]
