"""Main application entry point.

Runs the NiceGUI client (port 8080), the development backend (port 5000),
or both. Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def run_ui() -> None:
    """Serve the NiceGUI client against the configured backends."""
    from nicegui import ui

    from docbridge.ui.app_page import app_page  # noqa: F401 - Registers the page

    port = int(os.getenv("PORT", "8080"))
    logger.info(f"Client UI available at http://localhost:{port}/")

    ui.run(
        title="AI Document Processor",
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        reload=False,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "docbridge-secret"),
    )


def run_devserver() -> None:
    """Serve the in-memory development backend."""
    import uvicorn

    from docbridge.devserver.app import create_app

    port = int(os.getenv("DEVSERVER_PORT", "5000"))
    logger.info(f"Development backend on http://localhost:{port}")
    logger.info(f"API docs available at http://localhost:{port}/docs")

    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run the development backend and the UI as separate processes.

    Useful for local work: the UI's "local" endpoint points at the backend.
    """
    import asyncio
    import subprocess

    async def run_servers() -> None:
        backend_proc = subprocess.Popen(
            [sys.executable, "-c", "from docbridge.main import run_devserver; run_devserver()"]
        )
        ui_proc = subprocess.Popen(
            [sys.executable, "-c", "from docbridge.main import run_ui; run_ui()"]
        )

        try:
            while True:
                await asyncio.sleep(1)
                if backend_proc.poll() is not None or ui_proc.poll() is not None:
                    break
        except KeyboardInterrupt:
            logger.info("Shutting down servers...")
        finally:
            backend_proc.terminate()
            ui_proc.terminate()
            backend_proc.wait()
            ui_proc.wait()

    asyncio.run(run_servers())


def main() -> None:
    """Application entry point.

    RUN_MODE selects what to start: ``ui`` (default), ``devserver``, or
    ``separate`` for both.
    """
    mode = os.getenv("RUN_MODE", "ui").lower()

    logger.info(f"Starting docbridge in {mode} mode")

    if mode == "devserver":
        run_devserver()
    elif mode == "separate":
        run_separate()
    else:
        run_ui()


if __name__ == "__main__":
    main()
