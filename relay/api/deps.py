"""
FastAPI dependencies resolving the clients owned by the application.
"""

import asyncio

from fastapi import Request

from relay.config import Settings
from relay.services.apns_client import ApnsClient
from relay.services.email_dispatcher import EmailDispatcher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_push_client(request: Request) -> ApnsClient:
    return request.app.state.push_client


def get_email_dispatcher(request: Request) -> EmailDispatcher:
    return request.app.state.email_dispatcher


def get_push_limit(request: Request) -> asyncio.Semaphore:
    """Process-wide bound on in-flight push deliveries"""
    return request.app.state.push_limit
