"""Credential helpers shared by both transports."""
import base64


def basic_auth_header(server_key: str) -> str:
    """`Basic base64(server_key + ":")`, the server-key credential."""
    token = base64.b64encode(f"{server_key}:".encode("utf-8")).decode("ascii")
    return f"Basic {token}"
