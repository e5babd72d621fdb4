"""
Command-line entry point.

Runs either a single prompt (arguments, piped stdin or ``--execute``) or an
interactive chat loop with slash commands. Streamed responses go to stdout;
logs and diagnostics go to stderr.
"""

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from common.config import config as env
from common.exception.exceptions import (
    ApiRequestError,
    ContextTooLargeError,
    GeminiChatError,
)
from gemini_chat.config.chat_config import ChatConfig
from gemini_chat.entity.attachments import STDIN_SOURCE
from gemini_chat.entity.session import LOCATION_MAP, LOCATION_NAME, ChatSession
from gemini_chat.services.chat.chat_service import ChatService
from gemini_chat.services.chat.models_service import ModelsService
from gemini_chat.services.persistence.session_store import SessionStore
from gemini_chat.services.streaming.output import ConsoleSink
from gemini_chat.services.transport.retrying_transport import RetryingTransport

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PROMPT = "User: "
DEFAULT_MIME_TYPE = "application/octet-stream"

HELP_TEXT = """Commands:
  /exit, /quit                  Leave the session
  /clear                        Start a new conversation
  /system [text]                Show or set the system prompt
  /attach <path>                Stage a file for the next prompt
  /paste                        Stage text read from stdin until EOF
  /attachments [remove <n>]     List or drop staged attachments
  /history attachments [remove <turn> <part>]
                                List or drop files stored in the history
  /save <path>                  Save the conversation as JSON
  /load <path>                  Load a conversation saved with /save
  /stats                        Show history size and token count
  /models                       List available models (API mode)
  /help                         Show this help"""


def resolve_log_level(name: str) -> int:
    """Map a level name to its number; unknown names fall back to WARNING."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(quiet: bool = False) -> None:
    """Send logs to stderr and, if configured, to a log file."""
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR if quiet else resolve_log_level(env.APP_LOG_LEVEL))
    handlers: List[logging.Handler] = [stderr_handler]
    if env.APP_LOG_FILE:
        handlers.append(logging.FileHandler(env.APP_LOG_FILE, mode="a"))

    logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, handlers=handlers, force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini-chat",
        description="Streaming command-line chat client for Gemini models",
    )
    parser.add_argument("prompt", nargs="*", help="Prompt text, files to attach or a .json session")
    parser.add_argument("-m", "--model", help="Model name (e.g. gemini-2.5-flash)")
    parser.add_argument("-S", "--system", help="System prompt for the session")
    parser.add_argument("-t", "--temp", type=float, help="Generation temperature")
    parser.add_argument("-s", "--seed", type=int, help="Random seed")
    parser.add_argument("-o", "--max-tokens", type=int, help="Maximum output tokens")
    parser.add_argument("-b", "--budget", type=int, help="Thinking token budget")
    parser.add_argument("-p", "--proxy", help="Proxy URL")
    parser.add_argument("--topk", type=int, help="Top-K sampling")
    parser.add_argument("--topp", type=float, help="Top-P sampling")
    parser.add_argument("-e", "--execute", action="store_true", help="Run one prompt and exit")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only errors on stderr")
    parser.add_argument("-ng", "--no-grounding", action="store_true", help="Disable Google Search grounding")
    parser.add_argument("-nu", "--no-url-context", action="store_true", help="Disable URL context")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-f", "--free", action="store_true", help="Use the key-free endpoint")
    mode.add_argument("--api", action="store_true", help="Use the official API (needs GEMINI_API_KEY)")
    parser.add_argument("--loc", action="store_true", help="Print the detected location and exit")
    parser.add_argument("--map", action="store_true", help="Print a map link for the location and exit")
    parser.add_argument("-l", "--list", action="store_true", help="List available models and exit")
    parser.add_argument("--load-session", metavar="PATH", help="Load a saved session")
    parser.add_argument("--save-session", metavar="PATH", help="Save the conversation on exit")
    return parser


def build_config(args: argparse.Namespace) -> ChatConfig:
    """Environment defaults overridden by command-line options."""
    config = ChatConfig.from_env()
    if args.model:
        config.model_name = args.model
    if args.system:
        config.system_prompt = args.system
    if args.temp is not None:
        config.temperature = args.temp
    if args.seed is not None:
        config.seed = args.seed
    if args.max_tokens is not None:
        config.max_output_tokens = args.max_tokens
    if args.budget is not None:
        config.thinking_budget = args.budget
    if args.proxy:
        config.proxy = args.proxy
    if args.topk is not None:
        config.top_k = args.topk
    if args.topp is not None:
        config.top_p = args.topp
    if args.no_grounding:
        config.google_grounding = False
    if args.no_url_context:
        config.url_context = False
    if args.free:
        config.free_mode = True
    elif args.api:
        config.free_mode = False
    if args.loc:
        config.location_mode |= LOCATION_NAME
    if args.map:
        config.location_mode |= LOCATION_MAP
    config.normalize()
    return config


class ChatApp:
    """Wires configuration, session and services for one process."""

    def __init__(
        self,
        config: ChatConfig,
        transport: Optional[RetryingTransport] = None,
        sink: Optional[ConsoleSink] = None,
    ):
        self.config = config
        self.sink = sink or ConsoleSink()
        self.transport = transport or RetryingTransport(
            proxy=config.proxy, timeout=config.request_timeout
        )
        self.session = ChatSession(system_prompt=config.system_prompt)
        self.chat_service = ChatService(config, self.transport, self.sink)
        self.models_service = ModelsService(config, self.transport)
        self.store = SessionStore(config)

    # ------------------------------------------------------------------
    # Prompts and attachments
    # ------------------------------------------------------------------

    async def run_prompt(self, prompt: str) -> bool:
        """Send one prompt; returns True on success."""
        try:
            outcome = await self.chat_service.send_prompt(self.session, prompt)
        except ContextTooLargeError as e:
            print(f"Error: {e}. Please use '/clear' or restart the session.", file=sys.stderr)
            return False
        if outcome is None:
            return True
        self.sink.write("\n")
        if not outcome.success:
            print(outcome.describe(), file=sys.stderr)
        return outcome.success

    def attach_file(self, path: str) -> None:
        data = Path(path).read_bytes()
        mime_type = mimetypes.guess_type(path)[0] or DEFAULT_MIME_TYPE
        self.session.attachments.add_content(path, data, mime_type, as_text=self.config.free_mode)
        print(f"Attached: {path} (MIME: {mime_type})", file=sys.stderr)

    def attach_stream(self, stream) -> None:
        data = stream.buffer.read() if hasattr(stream, "buffer") else stream.read().encode("utf-8")
        self.session.attachments.add_content(
            STDIN_SOURCE, data, "text/plain", as_text=self.config.free_mode
        )

    # ------------------------------------------------------------------
    # Interactive commands
    # ------------------------------------------------------------------

    async def handle_command(self, line: str) -> bool:
        """Run a slash command; returns False when the session should end."""
        command, _, rest = line.partition(" ")
        rest = rest.strip()
        try:
            if command in ("/exit", "/quit"):
                return False
            elif command == "/help":
                print(HELP_TEXT, file=sys.stderr)
            elif command == "/clear":
                self.session.clear()
                print("Session cleared.", file=sys.stderr)
            elif command == "/system":
                self._system_command(rest)
            elif command == "/attach":
                if not rest:
                    print("Usage: /attach <path>", file=sys.stderr)
                else:
                    self.attach_file(rest)
            elif command == "/paste":
                print("Pasting content. Press Ctrl+D when done.", file=sys.stderr)
                self.attach_stream(sys.stdin)
            elif command == "/attachments":
                self._attachments_command(rest.split())
            elif command == "/history":
                self._history_command(rest.split())
            elif command == "/save":
                if not rest:
                    print("Usage: /save <path>", file=sys.stderr)
                else:
                    self.store.save(self.session, rest)
            elif command == "/load":
                if not rest:
                    print("Usage: /load <path>", file=sys.stderr)
                else:
                    self.store.load(self.session, rest)
            elif command == "/stats":
                await self._stats_command()
            elif command == "/models":
                await self._models_command()
            else:
                print(f"Unknown command: {command}. Type /help for a list of commands.", file=sys.stderr)
        except (GeminiChatError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
        return True

    def _system_command(self, text: str) -> None:
        if text:
            self.session.system_prompt = text
            print("System prompt set.", file=sys.stderr)
        elif self.session.system_prompt:
            print(f"System prompt: {self.session.system_prompt}", file=sys.stderr)
        else:
            print("No system prompt set.", file=sys.stderr)

    def _attachments_command(self, args: List[str]) -> None:
        if args[:1] == ["remove"] and len(args) == 2 and args[1].isdigit():
            part = self.session.attachments.remove(int(args[1]))
            print(f"Removed attachment {args[1]} ({part.filename or part.type.value}).", file=sys.stderr)
            return
        if not len(self.session.attachments):
            print("No pending attachments.", file=sys.stderr)
            return
        for index, part in enumerate(self.session.attachments):
            label = part.filename or (f"text, {len(part.text or '')} chars")
            print(f"  [{index}] {label} ({part.mime_type or 'text/plain'})", file=sys.stderr)

    def _history_command(self, args: List[str]) -> None:
        if args[:1] != ["attachments"]:
            print("Unknown command for '/history'. Try '/history attachments'.", file=sys.stderr)
            return
        if args[1:2] == ["remove"]:
            if len(args) != 4 or not (args[2].isdigit() and args[3].isdigit()):
                print("Usage: /history attachments remove <turn> <part>", file=sys.stderr)
                return
            self.session.history.remove_attachment(int(args[2]), int(args[3]))
            print(f"Removed attachment [{args[2]}:{args[3]}] from history.", file=sys.stderr)
            return
        found = self.session.history.list_attachments()
        if not found:
            print("No file attachments in history.", file=sys.stderr)
        for turn_index, part_index, role, part in found:
            print(
                f"  [{turn_index}:{part_index}] {role}: {part.filename or 'file'} ({part.mime_type})",
                file=sys.stderr,
            )

    async def _stats_command(self) -> None:
        print(
            f"Session: {self.session.name}, turns: {len(self.session.history)}, "
            f"pending attachments: {len(self.session.attachments)}",
            file=sys.stderr,
        )
        if self.config.free_mode:
            return
        tokens = await self.models_service.count_tokens(self.session)
        if tokens is not None:
            print(f"Total tokens in context: {tokens}", file=sys.stderr)

    async def _models_command(self) -> None:
        if self.config.free_mode:
            print("Listing models requires API mode.", file=sys.stderr)
            return
        try:
            models = await self.models_service.list_models()
        except ApiRequestError as e:
            print(f"Error: {e}", file=sys.stderr)
            return
        for model in models:
            print(model.describe())
        print(f"\nFound {len(models)} models.", file=sys.stderr)

    async def repl(self) -> None:
        if self.config.free_mode:
            print("--- Running in key-free mode. API key features are disabled. ---", file=sys.stderr)
        else:
            print(
                f"Using model: {self.config.model_name}, Temperature: {self.config.temperature:.2f}, "
                f"Seed: {self.config.seed}",
                file=sys.stderr,
            )
        print(f"--- Session: {self.session.name}\n", file=sys.stderr)

        while True:
            try:
                line = await asyncio.to_thread(input, PROMPT)
            except EOFError:
                print(file=sys.stderr)
                break
            line = line.strip()
            if not line:
                continue
            if line.startswith("/"):
                if not await self.handle_command(line):
                    break
                continue
            await self.run_prompt(line)
        print("Exiting session.", file=sys.stderr)


def collect_initial_prompt(app: ChatApp, items: List[str]) -> str:
    """Split positional arguments into sessions to load, files to attach and prompt words."""
    words = []
    for item in items:
        if item.endswith(".json") and Path(item).is_file():
            app.store.load(app.session, item)
        elif Path(item).is_file():
            app.attach_file(item)
        else:
            words.append(item)
    return " ".join(words)


async def run(args: argparse.Namespace) -> int:
    config = build_config(args)
    app = ChatApp(config)

    if config.location_mode:
        outcome = await app.chat_service.request_location(app.session)
        if not outcome.success:
            print(outcome.describe(), file=sys.stderr)
        return 0 if outcome.success else 1

    if args.list:
        try:
            models = await app.models_service.list_models()
        except ApiRequestError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        for model in models:
            print(model.describe())
        return 0

    try:
        if args.load_session:
            app.store.load(app.session, args.load_session)
        prompt = collect_initial_prompt(app, args.prompt)

        interactive = not args.execute and sys.stdin.isatty() and sys.stdout.isatty()
        if not sys.stdin.isatty():
            if prompt:
                app.attach_stream(sys.stdin)
            else:
                prompt = sys.stdin.read().rstrip("\n")
    except (GeminiChatError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    success = True
    if prompt or len(app.session.attachments):
        success = await app.run_prompt(prompt)
    if interactive:
        await app.repl()

    if args.save_session:
        try:
            app.store.save(app.session, args.save_session)
        except GeminiChatError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    return 0 if success else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(quiet=args.quiet)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
