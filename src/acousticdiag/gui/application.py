"""Qt application entry point for the AcousticDiag desktop GUI.

This module wires up argument parsing and logging, builds the
:class:`~acousticdiag.gui.main_window.MainWindow` around a
:class:`~acousticdiag.gui.session_controller.SessionController`, and starts
the Qt event loop. ``--headless`` skips Qt entirely and runs one diagnostic
window from the terminal. Both the ``acousticdiag`` script and
``python -m acousticdiag.gui.application`` flow through ``main()`` here.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Tuple

from ..config.app_config import AppConfig, AppPaths
from ..dataio.history import HistoryStore
from ..dataio.settings import SettingsStore
from ..headless import build_source, run_headless

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AcousticDiag machine sound diagnostics")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML runtime configuration (default: <data dir>/config.yaml)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory for history and settings (default: ~/.acousticdiag)",
    )
    parser.add_argument(
        "--synthetic",
        action="store_true",
        help="Use a generated test tone instead of the microphone",
    )
    parser.add_argument(
        "--tone-hz",
        type=float,
        default=120.0,
        help="Synthetic tone frequency in Hz (default: 120)",
    )
    parser.add_argument(
        "--device",
        type=str,
        default=None,
        help="sounddevice input device name or index",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run one diagnostic without the GUI (requires --machine)",
    )
    parser.add_argument(
        "--machine",
        type=str,
        default=None,
        help="Machine id to diagnose in headless mode (e.g. m1)",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="INFO",
        help="Logging verbosity (default: INFO)",
    )
    return parser


def _parse_cli_args(
    argv: list[str],
) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    if args.headless and not args.machine:
        parser.error("--headless requires --machine")
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _device_arg(value: str | None):
    if value is not None and value.isdigit():
        return int(value)
    return value


def create_app(
    argv: list[str] | None = None,
    *,
    app_config: AppConfig | None = None,
    audio_source=None,
) -> Tuple["QApplication", "QMainWindow"]:
    """
    Create the QApplication and main AcousticDiag window.

    Parameters
    ----------
    argv:
        Optional argument list to pass to :class:`QApplication`.
    app_config:
        Paths, runtime settings and machine catalog; loaded from disk when
        omitted.
    audio_source:
        Source handed to the session; defaults to the microphone.

    Returns
    -------
    app:
        The QApplication instance (owned by caller).
    window:
        The main window instance with all tabs set up.
    """
    from PySide6.QtCore import QLoggingCategory
    from PySide6.QtWidgets import QApplication

    from .main_window import MainWindow
    from .session_controller import SessionController

    qt_args = argv if argv is not None else sys.argv
    app = QApplication.instance() or QApplication(qt_args)

    # Suppress noisy QObject::connect warnings from QStyleHints and similar internals
    QLoggingCategory.setFilterRules("qt.core.qobject.connect=false")

    app_config = app_config or AppConfig.load()
    runtime = app_config.runtime.sanitized()
    paths = app_config.paths
    paths.ensure()

    controller = SessionController(
        audio_source or build_source(runtime),
        history_store=HistoryStore(paths.history_file, limit=runtime.history_limit),
        settings_store=SettingsStore(paths.settings_file),
        config=runtime,
    )
    window = MainWindow(controller, app_config.catalog)
    controller.setParent(window)
    return app, window


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)
    configure_logging(args.log_level)

    paths = AppPaths(data_root=Path(args.data_dir)) if args.data_dir else AppPaths()
    app_config = AppConfig.load(config_path=args.config, paths=paths)
    logger.debug("Loaded %d machine profiles", len(app_config.catalog))

    if args.headless:
        raise SystemExit(
            run_headless(
                app_config,
                args.machine,
                synthetic=args.synthetic,
                tone_hz=args.tone_hz,
                device=_device_arg(args.device),
            )
        )

    runtime = app_config.runtime.sanitized()
    source = build_source(
        runtime,
        synthetic=args.synthetic,
        tone_hz=args.tone_hz,
        device=_device_arg(args.device),
    )
    app, win = create_app(qt_argv, app_config=app_config, audio_source=source)
    win.show()
    raise SystemExit(app.exec())


if __name__ == "__main__":
    main()
