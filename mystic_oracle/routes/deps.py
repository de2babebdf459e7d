from fastapi import Request

from ..oracle import OracleSession


def get_session(request: Request) -> OracleSession:
    return request.app.state.session
