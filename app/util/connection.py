from aiohttp import ClientSession
from fastapi import Request


def create_client_session() -> ClientSession:
    """
    Create the process-wide HTTP client. It is opened once at startup and shared
    by every request, so it must not carry per-request state.
    """
    return ClientSession(headers={"Accept": "application/json"})


def get_connection(request: Request) -> ClientSession:
    return request.app.state.client_session
