"""Nox configuration for Cloud SQL Scheduler development automation.

This file defines automated development tasks including linting, testing,
formatting, and running the Cloud Function locally.
"""

import nox

# Python versions to test against
PYTHON_VERSIONS = ["3.11"]

# Default sessions to run when no specific session is requested
nox.options.sessions = ["lint", "test", "coverage"]


@nox.session(python=PYTHON_VERSIONS)
def lint(session):
    """Run linting with ruff and mypy."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    # Run ruff for code quality
    session.run("poetry", "run", "ruff", "check", "src", "tests", "functions")

    # Run mypy for type checking
    session.run("poetry", "run", "mypy", "src")

    session.log("✅ Linting completed successfully")


@nox.session(python=PYTHON_VERSIONS)
def format_code(session):
    """Format code with black and isort."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    session.run("poetry", "run", "black", "src", "tests", "functions")
    session.run("poetry", "run", "isort", "src", "tests", "functions")

    # Fix auto-fixable ruff issues
    session.run("poetry", "run", "ruff", "check", "--fix", "src", "tests", "functions")

    session.log("✅ Code formatting completed")


@nox.session(python=PYTHON_VERSIONS)
def test(session):
    """Run the test suite with pytest."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    session.run(
        "poetry", "run", "pytest",
        "tests/",
        "-v",
        "--tb=short",
        "--strict-markers",
        "-m", "not slow",
    )

    session.log("✅ Unit tests completed successfully")


@nox.session(python=PYTHON_VERSIONS)
def coverage(session):
    """Run tests with coverage reporting."""
    session.install("poetry")
    session.run("poetry", "install", "--all-extras")

    session.run(
        "poetry", "run", "pytest",
        "tests/",
        "--cov=cloudsql_scheduler",
        "--cov-report=term-missing",
        "--cov-report=xml:coverage.xml",
        "--cov-fail-under=80",
        "-m", "not slow",
    )

    session.log("✅ Coverage analysis completed")


@nox.session(python=PYTHON_VERSIONS)
def serve(session):
    """Run the Pub/Sub function locally with functions-framework.

    Examples:
      nox -s serve
      nox -s serve -- --port 8081
    """
    session.install("poetry")
    session.run("poetry", "install")
    session.env.setdefault("DRY_RUN", "true")
    session.env.setdefault("STRUCTURED_LOGGING", "false")
    session.run(
        "poetry", "run", "functions-framework",
        "--source", "functions/scheduler/main.py",
        "--target", "process_pubsub",
        "--signature-type", "cloudevent",
        *session.posargs,
    )


@nox.session(python=PYTHON_VERSIONS)
def clean(session):
    """Clean up build artifacts and cache files."""
    import shutil
    import os

    # Directories to clean
    clean_dirs = [
        ".pytest_cache",
        "__pycache__",
        ".coverage",
        "htmlcov",
        "coverage.xml",
        "dist",
        ".ruff_cache",
        ".mypy_cache",
    ]

    for dir_name in clean_dirs:
        if os.path.exists(dir_name):
            if os.path.isdir(dir_name):
                shutil.rmtree(dir_name)
                session.log(f"🗑️  Removed directory: {dir_name}")
            else:
                os.remove(dir_name)
                session.log(f"🗑️  Removed file: {dir_name}")

    session.log("✅ Cleanup completed")


@nox.session(python=PYTHON_VERSIONS)
def security(session):
    """Run security checks with bandit and safety."""
    session.install("poetry")
    session.run("poetry", "install")

    session.install("bandit", "safety")
    session.run("bandit", "-r", "src", "-f", "json")
    session.run("safety", "check")

    session.log("✅ Security checks completed")


@nox.session(python=PYTHON_VERSIONS)
def pre_commit(session):
    """Run all pre-commit checks."""
    session.install("poetry")
    session.run("poetry", "install")

    session.notify("format_code")
    session.notify("lint")
    session.notify("test")
    session.notify("security")

    session.log("✅ All pre-commit checks completed")
