"""Application entry point and setup for the pintype typing trainer."""

import argparse
import curses
import logging
import sys
from typing import List, Optional

from pintype.core.controller import SessionController
from pintype.core.errors import PintypeError
from pintype.core.settings import CONFIG_DIR, Settings
from pintype.core.words import Vocabulary, bundled_texts
from pintype.ui.audio import make_sound
from pintype.ui.terminal import KeyReader, TerminalRenderer


def configure_logging() -> None:
    """Configure application-wide logging to ~/.pintype/pintype.log.

    The terminal belongs to curses, so nothing is logged to stderr.
    """
    try:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        logging.basicConfig(level=logging.CRITICAL)
        return
    logging.basicConfig(
        filename=str(CONFIG_DIR / "pintype.log"),
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pintype",
        description="Terminal typing practice with pinyin for Chinese text.",
    )
    parser.add_argument(
        "text",
        nargs="?",
        help=f"bundled text ({', '.join(bundled_texts())}) or path to a word list",
    )
    parser.add_argument("--config", help="path to a YAML settings file")
    parser.add_argument("--mute", action="store_true", help="disable the keystroke sound")
    return parser.parse_args(argv)


def _session(screen, settings: Settings, vocabulary: Vocabulary) -> None:
    curses.set_escdelay(25)
    renderer = TerminalRenderer(screen)
    controller = SessionController(
        vocabulary,
        renderer,
        audio=make_sound(settings.sound, settings.sound_path),
        settings=settings,
    )
    controller.run(KeyReader(screen, settings.tick_ms))


def run(argv: Optional[List[str]] = None) -> None:
    """Load settings and text, then run the typing session until ESC."""
    args = parse_args(argv)
    configure_logging()
    try:
        settings = Settings.load(args.config).override(
            text=args.text, sound=False if args.mute else None
        )
        vocabulary = Vocabulary.resolve(settings.text)
        curses.wrapper(_session, settings, vocabulary)
    except (PintypeError, OSError, ValueError) as e:
        logging.exception("Fatal error")
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
