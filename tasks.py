# type: ignore
import os
import tempfile
from pathlib import Path

from invoke import task


@task
def venv(ctx):
    """Initialize development environment with uv."""
    print("Initializing development environment with uv...")

    # creates .venv with the package and its test and dev extras
    ctx.run("uv sync --all-extras")

    print("Development environment initialization complete!")


@task
def lint(ctx):
    """
    Perform static analysis on the source code to check for syntax errors and enforce style consistency.
    """
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """
    Run tests with coverage information.
    """
    ctx.run("pytest --cov=sharelink --cov-report=term-missing", pty=True)


@task
def demo(ctx, url="https://example.com/"):
    """
    Print the context menu built against the mock companion process.
    """
    config = Path(tempfile.mkdtemp()) / "config.toml"
    config.write_text(
        "[companion]\n"
        'command = ["sharelink", "mock-companion", '
        '"-d", "p1:Pixel", "-d", "t1:Tablet:share", "-d", "tv:TV:none"]\n'
    )

    env = {"SHARELINK_CONFIG": str(config)}
    ctx.run("sharelink devices", env=env, pty=True)
    ctx.run(f"sharelink menu --url {url}", env=env, pty=True)


@task
def build_package(ctx):
    """
    Build package using uv.
    """

    ctx.run("rm -rf dist")
    ctx.run("uv build")


@task
def release(ctx):
    """Build the package and publish it to PyPI using uv."""
    token = os.getenv("PYPI_TOKEN")
    if not token:
        raise ValueError("PYPI_TOKEN environment variable is not set")

    ctx.run("invoke lint test build-package")
    ctx.run(f"uv publish --token {token}")
