from wsabridge.cli import app

app()
