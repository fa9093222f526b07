#!/usr/bin/env python3
"""Fable: story memory for character chat.

This CLI stores short stories, summarizes them, keeps a vector index of the
summaries in sync with the story database, and answers questions in the
voice of a story's characters.

Commands:
    chat        Interactive session (add stories, then ask characters)
    add         Add and summarize a story
    characters  List the characters of a story
    ask         Ask a character a question about a stored story
    rehydrate   Rebuild the vector index from the story database
    status      Show configuration and store statistics

Examples:
    python main.py chat
    python main.py add --story "A dragon guarded a castle."
    python main.py characters --story "Alice met Bob and Carol."
    python main.py ask --story-id 1718031234567-3f9a1c --character Dragon --query "What is your treasure?"
    python main.py rehydrate

Environment:
    OPENAI_API_KEY: Required for OpenAI models and embeddings
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import sys

from config import Config
from database import StoryStore
from errors import FableError, IngestionFailure, RehydrationFailure
from memory.pointer import LatestStoryPointer
from memory.vector_store import VectorStore
from observability.logging import request_context, setup_logging

logger = logging.getLogger(__name__)

CHAT_HELP = """Commands:
  /add <story>         Add and summarize a story (it becomes the active story)
  /characters <story>  List the characters in a story
  /as <name>           Choose the character who answers
  /rehydrate           Rebuild the vector index from the story database
  /quit                Leave
Any other line is a question for the current character."""


def _read_story(args: argparse.Namespace) -> str:
    """Story text from --story, or stdin when omitted."""
    if args.story:
        return args.story
    return sys.stdin.read()


def _create_memory(config: Config):
    from pipeline import StoryMemory
    return StoryMemory.from_config(config)


def cmd_add(args: argparse.Namespace, config: Config) -> int:
    """Add and summarize a story, printing its id.

    Returns:
        Exit code (0 for success)
    """
    story = _read_story(args)
    if not story.strip():
        print("Error: story text is empty", file=sys.stderr)
        return 1

    async def add() -> str:
        memory = _create_memory(config)
        try:
            memory.index.connect()
            return await memory.add_story(story)
        finally:
            memory.close()

    try:
        with request_context():
            story_id = asyncio.run(add())
    except IngestionFailure as e:
        print(f"Error: an error occurred while adding the story ({e.stage})", file=sys.stderr)
        return 1

    print(story_id)
    return 0


def cmd_characters(args: argparse.Namespace, config: Config) -> int:
    """Print the character names found in a story.

    Returns:
        Exit code (0 for success)
    """
    from agents.characters import CharacterExtractor
    from agents.llm import TextService

    story = _read_story(args)
    extractor = CharacterExtractor(TextService(config.text_model))
    with request_context():
        names = asyncio.run(extractor.extract(story))
    print(names)
    return 0


def cmd_ask(args: argparse.Namespace, config: Config) -> int:
    """Answer a question as a character.

    The latest-story pointer does not outlive a process, so the grounding
    story is given explicitly with --story-id. Without it there is no
    active story.

    Returns:
        Exit code (0 for success)
    """
    pointer = LatestStoryPointer(story_id=args.story_id)

    async def ask():
        memory = _create_memory(config)
        try:
            return await memory.answer(args.query, args.character, pointer=pointer)
        finally:
            memory.close()

    with request_context():
        answer = asyncio.run(ask())
    print(answer.text)
    return 0


def cmd_rehydrate(args: argparse.Namespace, config: Config) -> int:
    """Rebuild the vector index from the story database.

    Returns:
        Exit code (0 for success)
    """
    async def rehydrate():
        memory = _create_memory(config)
        try:
            return await memory.start()
        finally:
            memory.close()

    try:
        with request_context():
            stats = asyncio.run(rehydrate())
    except RehydrationFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(stats.to_dict(), indent=2))
    return 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display configuration and store statistics.

    Read-only: missing stores count as empty and are not created, and no
    API key is needed.

    Returns:
        Exit code (0 for success)
    """
    stored = 0
    if config.db_path.exists():
        with StoryStore(config.db_path) as store:
            stored = store.count()

    indexed = 0
    if config.chroma_host or config.vector_db_path.exists():
        indexed = VectorStore.from_config(config).count()

    status = {
        "config": {
            "text_model": config.text_model,
            "embedding_provider": config.embedding_provider,
            "embedding_model": config.embedding_model,
            "collection": config.collection_name,
            "vector_backend": (
                f"{config.chroma_host}:{config.chroma_port}" if config.chroma_host
                else str(config.vector_db_path)
            ),
            "enable_logfire": config.enable_logfire,
        },
        "stores": {
            "db_path": str(config.db_path),
            "stories": stored,
            "indexed": indexed,
        },
    }
    print(json.dumps(status, indent=2))
    return 0


async def _chat_turn(memory, line: str, state: dict) -> str | None:
    """Handle one line of the chat loop.

    Returns:
        Text to print, or None to leave the session
    """
    command, _, rest = line.partition(" ")
    rest = rest.strip()

    if command in ("/quit", "/exit"):
        return None
    if command == "/help":
        return CHAT_HELP
    if command == "/add":
        if not rest:
            return "Usage: /add <story>"
        try:
            story_id = await memory.add_story(rest)
        except IngestionFailure as e:
            return f"An error occurred while adding the story ({e.stage})."
        return f"Story added and summarized successfully! (id={story_id})"
    if command == "/characters":
        if not rest:
            return "Usage: /characters <story>"
        names = await memory.extract_character_names(rest)
        return names or "No characters found."
    if command == "/as":
        if not rest:
            return "Usage: /as <name>"
        state["character"] = rest
        return f"Now answering as {rest}."
    if command == "/rehydrate":
        stats = await memory.rehydrate()
        return f"Rehydrated {stats.upserted} stories."
    if command.startswith("/"):
        return f"Unknown command {command}. Type /help for commands."

    if not state.get("character"):
        return "Choose a character first with /as <name>."
    answer = await memory.answer(line, state["character"])
    return answer.text


def cmd_chat(args: argparse.Namespace, config: Config) -> int:
    """Run an interactive chat session.

    Startup rehydration must succeed before the session begins.

    Returns:
        Exit code (0 for success)
    """
    async def chat() -> int:
        memory = _create_memory(config)
        try:
            try:
                with request_context():
                    stats = await memory.start()
            except RehydrationFailure as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1

            print(f"Memory ready ({stats.stories} stories). Type /help for commands.")
            state = {"character": args.character}
            while True:
                line = await asyncio.to_thread(_prompt)
                if line is None:
                    return 0
                line = line.strip()
                if not line:
                    continue
                with request_context():
                    try:
                        reply = await _chat_turn(memory, line, state)
                    except FableError as e:
                        logger.error("Chat turn failed | type=%s error=%s", type(e).__name__, e, exc_info=True)
                        reply = "An error occurred while processing your request."
                if reply is None:
                    return 0
                print(reply)
        finally:
            memory.close()

    return asyncio.run(chat())


def _prompt() -> str | None:
    """Read one line from the user, None on end of input."""
    try:
        return input("> ")
    except EOFError:
        return None


def main() -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="Fable: story memory for character chat",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # chat command
    chat_parser = subparsers.add_parser("chat", help="Interactive story chat")
    chat_parser.add_argument(
        "--character",
        help="Character who answers questions (change with /as)",
    )

    # add command
    add_parser = subparsers.add_parser("add", help="Add and summarize a story")
    add_parser.add_argument(
        "--story",
        help="Story text (read from stdin when omitted)",
    )

    # characters command
    characters_parser = subparsers.add_parser("characters", help="List the characters of a story")
    characters_parser.add_argument(
        "--story",
        help="Story text (read from stdin when omitted)",
    )

    # ask command
    ask_parser = subparsers.add_parser("ask", help="Ask a character a question")
    ask_parser.add_argument(
        "--query",
        required=True,
        help="Question to ask",
    )
    ask_parser.add_argument(
        "--character",
        required=True,
        help="Character who answers",
    )
    ask_parser.add_argument(
        "--story-id",
        help="Story to ground the answer in (see 'add' output)",
    )

    # rehydrate command
    subparsers.add_parser("rehydrate", help="Rebuild the vector index from the story database")

    # status command
    subparsers.add_parser("status", help="Show configuration and statistics")

    args = parser.parse_args()

    # Load configuration
    config = Config.load()

    # Setup logging
    setup_logging(config, verbose=args.verbose)

    # Validate configuration for commands that need it
    if args.command in ("chat", "add", "characters", "ask", "rehydrate"):
        error = config.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1

    # Route to command handler
    commands = {
        "chat": cmd_chat,
        "add": cmd_add,
        "characters": cmd_characters,
        "ask": cmd_ask,
        "rehydrate": cmd_rehydrate,
        "status": cmd_status,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except KeyboardInterrupt:
            logger.info("Stopped by user (Ctrl+C)")
            return 130
        except Exception as e:
            logger.error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
