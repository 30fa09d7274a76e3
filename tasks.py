# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create .venv with the package, test and dev extras installed."""
    ctx.run("uv sync --extra test --extra dev")


@task
def lint(ctx):
    """
    Static checks for the package and its tests.
    """
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def fmt(ctx):
    """Apply ruff formatting and import sorting."""
    ctx.run("ruff check --select I --fix src tests", pty=True)
    ctx.run("ruff format src tests", pty=True)


@task
def test(ctx, k=None):
    """
    Run tests with coverage information. Use -k to select tests by expression.
    """
    select = f" -k '{k}'" if k else ""
    ctx.run(
        f"pytest --cov=wsabridge --cov-report=term-missing{select}", pty=True
    )


@task
def info(ctx):
    """Show what the CLI detects on this machine (adb, subsystem state)."""
    ctx.run("wsabridge --log-level DEBUG info", pty=True)


@task
def build_package(ctx):
    """
    Build sdist and wheel into dist/.
    """
    ctx.run("rm -rf dist")
    ctx.run("uv build")
