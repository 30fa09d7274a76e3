from wsabridge.cli.app import app

__all__ = ["app"]
