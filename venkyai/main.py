"""Main application entry point for VenkyAI."""

import sys
import asyncio
import inspect
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .backend import InMemoryBackend, OpenAIChatStreamer
from .config import VenkyConfig
from .errors import CommandError, ConfigError
from .events import EventKind, EventPublisher
from .services import Orchestrator
from .ui import ConsoleView

logger = logging.getLogger(__name__)

REPLAY_COMMANDS = {
    "open_setup",
    "start_session",
    "end_session",
    "start_recording",
    "stop_recording",
    "toggle_recording",
    "start_capture",
    "stop_capture",
    "toggle_capture",
    "transcribe",
    "send_message",
}


def load_replay_script(path: str) -> List[Dict[str, Any]]:
    """Load a replay script: a YAML list of event, command, auto_start and sleep steps."""
    with open(path, 'r', encoding='utf-8') as f:
        try:
            steps = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in replay script: {e}")

    if not isinstance(steps, list) or not all(isinstance(step, dict) for step in steps):
        raise ConfigError("Replay script must be a list of mappings")
    return steps


class Server:

    def __init__(self, config_path: str, log_level: Optional[str] = None):
        # Load configuration
        self.config = VenkyConfig(config_path)
        # Command line overrides config
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.orchestrator: Optional[Orchestrator] = None
        self.backend: Optional[InMemoryBackend] = None
        self.publisher: Optional[EventPublisher] = None

    def init(self) -> None:
        """Build the backend and orchestrator. Call from the event loop."""
        logger.info("Initializing services...")
        self.publisher = EventPublisher(asyncio.get_running_loop())

        chat_streamer = None
        api_key = self.config.get_openai_api_key()
        if self.config.get('openai.enabled', False):
            if api_key:
                chat_streamer = OpenAIChatStreamer(
                    api_key=api_key,
                    publisher=self.publisher,
                    model=self.config.get('openai.model', 'gpt-4o'),
                )
            else:
                logger.warning("OpenAI enabled but no API key configured; using canned replies")

        self.backend = InMemoryBackend(
            self.publisher,
            chat_streamer=chat_streamer,
            reply=self.config.get('assistant.reply', 'Noted.'),
        )
        self.orchestrator = Orchestrator.from_config(self.backend, self.config)

    async def replay(self, steps: List[Dict[str, Any]]) -> None:
        for index, step in enumerate(steps, 1):
            logger.debug(f"Replay step {index}: {step}")
            try:
                await self._run_step(step)
            except CommandError as e:
                logger.error(f"Replay step {index} failed: {e}")
            # let background persists and capture triggers run
            await asyncio.sleep(0)

    async def _run_step(self, step: Dict[str, Any]) -> None:
        if 'event' in step:
            try:
                kind = EventKind(step['event'])
            except ValueError:
                raise ConfigError(f"Unknown replay event: {step['event']}")
            self.publisher.publish(kind, step.get('payload'))
        elif 'command' in step:
            name = step['command']
            if name not in REPLAY_COMMANDS:
                raise ConfigError(f"Unknown replay command: {name}")
            result = getattr(self.orchestrator.controller, name)(*step.get('args', []))
            if inspect.isawaitable(result):
                await result
        elif 'auto_start' in step:
            self.backend.auto_start(step['auto_start'])
        elif 'transcription' in step:
            self.backend.queue_transcription(step['transcription'])
        elif 'sleep' in step:
            await asyncio.sleep(float(step['sleep']))
        else:
            raise ConfigError(f"Unrecognized replay step: {step}")

    async def run(self, script_path: str) -> None:
        steps = load_replay_script(script_path)
        self.init()
        async with self.orchestrator:
            await self.replay(steps)
            ConsoleView().render(self.orchestrator.snapshot())


def setup_logging(config: VenkyConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/venkyai.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info(f"VenkyAI logging to {log_file_path} at {level.upper()}")


def main() -> None:
    """Main entry point for VenkyAI."""
    parser = argparse.ArgumentParser(
        description="VenkyAI - session and streaming event orchestrator",
        epilog="Replays a YAML script of events and commands, then prints the session state"
    )

    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to configuration YAML file"
    )

    parser.add_argument(
        "--replay",
        type=str,
        required=True,
        help="Path to YAML replay script"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="VenkyAI v0.1.0"
    )

    args = parser.parse_args()

    try:
        server = Server(args.config, args.log_level)
        asyncio.run(server.run(args.replay))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
