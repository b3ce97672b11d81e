#!/usr/bin/env python3
"""
Analyze a practice transcript from the command line.

Scores a transcript and prints the analysis as JSON. With --user, the
session is also recorded for that user in the configured storage backend
and the updated progress is printed.

Usage:
    python scripts/analyze_transcript.py --text "..." --duration 95
    python scripts/analyze_transcript.py --file talk.txt --duration 240 --offline
    python scripts/analyze_transcript.py --file talk.txt --duration 240 --user alice
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from src.analysis import AIAnalyzer
from src.config import load_config
from src.errors import SpeechCoachError
from src.llm import LLMClient
from src.sessions import SessionPipeline
from src.storage import create_storage


def parse_arguments() -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Score a speech practice transcript',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--text', type=str, help='Transcript text')
    source.add_argument('--file', type=str, help='Path to a transcript text file')

    parser.add_argument(
        '--duration',
        type=float,
        required=True,
        help='Session duration in seconds'
    )
    parser.add_argument(
        '--offline',
        action='store_true',
        help='Skip the language model and use local analysis only'
    )
    parser.add_argument(
        '--user',
        type=str,
        default=None,
        help='Record the session for this username'
    )
    parser.add_argument(
        '--practice-mode',
        type=str,
        default='free',
        help='Practice mode label stored with the session'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args()


def build_analyzer(config, offline: bool) -> AIAnalyzer:
    """
    Build the analyzer, skipping the language model when it is unreachable.

    Args:
        config: Engine configuration
        offline: Force local analysis only

    Returns:
        Configured AIAnalyzer
    """
    client = None
    if config.use_llm and not offline:
        client = LLMClient(timeout=config.analysis_timeout)
        if not client.check_available():
            logger.warning(f"LLM backend {client.base_url} not reachable, using local analysis")
            client.close()
            client = None

    return AIAnalyzer(
        client,
        timeout=config.analysis_timeout,
        temperature=config.llm_temperature,
        use_model=client is not None,
    )


def main() -> int:
    """
    Main script logic.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = parse_arguments()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    transcript = args.text if args.text is not None else Path(args.file).read_text()

    analyzer = None
    try:
        config = load_config()
        analyzer = build_analyzer(config, args.offline)

        if not args.user:
            analysis = analyzer.analyze(transcript, args.duration)
            print(json.dumps(analysis.to_payload(), indent=2))
            return 0

        pipeline = SessionPipeline(create_storage(config), analyzer)
        user = pipeline.storage.get_user_by_username(args.user) or pipeline.create_user(args.user)
        result = pipeline.submit_session(
            user.id, transcript, args.duration * 1000, args.practice_mode
        )
        print(json.dumps({
            'session': result.session.to_dict(),
            'progress': result.progress.to_dict(),
            'new_achievements': [a.to_dict() for a in result.new_achievements],
        }, indent=2))
        return 0

    except SpeechCoachError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 2

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    finally:
        if analyzer is not None and analyzer.client is not None:
            analyzer.client.close()


if __name__ == "__main__":
    sys.exit(main())
