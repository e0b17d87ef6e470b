#!/usr/bin/env python3
"""
Main entry point for Hadal speaking practice.
Allows running the package with: python -m hadal

    python -m hadal --prompt="What is your name?" --answer="My name is Amina." --duration=35
    python -m hadal --prompt="Describe your town." --level=2 --live
"""
import asyncio
import json
import sys

from .config import get_config
from .assessment import InvalidSubmission, RecordingError
from .practice import PracticeOrchestrator

USAGE = (
    "Usage: python -m hadal --prompt=TEXT [--answer=TEXT --duration=SECONDS | --live]\n"
    "                       [--level=1-4] [--locale=en|so] [--user=ID --question=ID] [--json]"
)


def main():
    """Command-line interface for the practice orchestrator."""

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    prompt_text = None
    answer = None
    duration = 0.0
    level = config.default_level
    live = False
    as_json = False
    user_id = None
    question_id = None

    for arg in sys.argv[1:]:
        if arg.startswith("--prompt="):
            prompt_text = arg.split("=", 1)[1]
        elif arg.startswith("--answer="):
            answer = arg.split("=", 1)[1]
        elif arg.startswith("--duration="):
            try:
                duration = float(arg.split("=", 1)[1])
            except ValueError:
                print("❌ Invalid duration. Use --duration=SECONDS")
                sys.exit(1)
        elif arg.startswith("--level="):
            try:
                level = int(arg.split("=", 1)[1])
            except ValueError:
                print("❌ Invalid level. Use --level=1 to --level=4")
                sys.exit(1)
        elif arg.startswith("--locale="):
            locale = arg.split("=", 1)[1]
            if locale not in ("en", "so"):
                print("❌ Invalid locale. Use --locale=en or --locale=so")
                sys.exit(1)
            config.feedback_locale = locale
        elif arg.startswith("--user="):
            user_id = arg.split("=", 1)[1]
        elif arg.startswith("--question="):
            question_id = arg.split("=", 1)[1]
        elif arg == "--live":
            live = True
        elif arg == "--json":
            as_json = True
        elif arg in ("-h", "--help"):
            print(USAGE)
            return
        else:
            print(f"❌ Unknown argument: {arg}")
            print(USAGE)
            sys.exit(1)

    if not prompt_text or (answer is None and not live):
        print(USAGE)
        sys.exit(1)

    orchestrator = PracticeOrchestrator(config=config)
    try:
        if live:
            result = asyncio.run(orchestrator.run_question(
                prompt_text, level, user_id=user_id, question_id=question_id, interactive=True
            ))
        else:
            result = orchestrator.assess_text(
                prompt_text, answer, level, duration, user_id=user_id, question_id=question_id
            )
    except InvalidSubmission as e:
        print(f"❌ {e}")
        sys.exit(1)
    except RecordingError as e:
        print(f"🎤 Recording unavailable: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        print("\n👋 Cancelled")
        sys.exit(130)
    finally:
        orchestrator.close()

    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        orchestrator.display_result(result)

    if user_id and question_id and orchestrator.needs_help(user_id, level, question_id):
        print("💡 You have missed this question a few times. Try a practice hint or an easier level.")


if __name__ == "__main__":
    main()
