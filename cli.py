"""
ELLM CLI Interface
Command-line interface for the ELLM inference engine

Usage:
    python cli.py serve --host 0.0.0.0 --port 8000
    python cli.py ask --knowledge facts.txt "Is Socrates mortal?"
    python cli.py interactive
    python cli.py benchmark --chain-length 100
    python cli.py test
"""

import argparse
import json
import logging
import os
import sys
import time

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


SAMPLE_KNOWLEDGE = """
All humans are mortal.
Socrates is human.
All birds can fly.
Penguins are birds.
Penguins cannot fly.
The engine is part of the car.
The car is part of the transportation system.
Alice likes mathematics.
Bob teaches mathematics.
If Bob teaches mathematics and Alice likes mathematics, then Alice likes Bob.
""".strip()


def setup_environment():
    """Setup the environment for ELLM."""
    current_dir = os.path.dirname(os.path.abspath(__file__))
    if current_dir not in sys.path:
        sys.path.insert(0, current_dir)


def serve_command(args):
    """Start the ELLM API server."""
    from api.server import run_server

    run_server(
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers,
        config_path=args.config,
        log_level=args.log_level
    )


def test_command(args):
    """Run the ELLM test suite."""
    import pytest

    logger.info("Running ELLM tests...")

    test_args = [
        "tests/",
        "-v",
        "--tb=short"
    ]

    if args.verbose:
        test_args.append("-s")

    if args.coverage:
        test_args.extend(["--cov=ellm", "--cov=reasoning", "--cov=api", "--cov-report=html"])

    exit_code = pytest.main(test_args)

    if exit_code == 0:
        logger.info("All tests passed!")
    else:
        logger.error(f"Tests failed with exit code: {exit_code}")
        sys.exit(exit_code)


def ask_command(args):
    """Learn from a file or text and answer one question."""
    from reasoning.session import create_session

    session = create_session(args.config)

    if args.knowledge:
        with open(args.knowledge, 'r', encoding='utf-8') as f:
            session.learn(f.read())
    if args.text:
        session.learn(args.text)
    if args.sample:
        session.learn(SAMPLE_KNOWLEDGE)

    result = session.query(args.question)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(f"Answer: {result.answer}")
        print(f"Parsed: {result.parsed_query or 'Could not parse'}")
        print(f"Explanation: {result.explanation}")


def benchmark_command(args):
    """Time deduction over a generated "part of" chain."""
    from ellm.facts import Fact
    from reasoning.session import create_session

    logger.info("Running ELLM benchmarks...")

    session = create_session(args.config)
    length = args.chain_length

    start_time = time.time()
    for i in range(length):
        session.knowledge.add_fact(Fact(f"c{i}", "part of", f"c{i + 1}"))
    learn_time = time.time() - start_time

    query_fact = Fact("c0", "part of", f"c{length}")
    timings = []
    result = None
    for _ in range(args.runs):
        start_time = time.time()
        result = session.reasoner.deduce(session.knowledge, query_fact)
        timings.append(time.time() - start_time)

    benchmarks = {
        'chain_length': length,
        'learn_time': learn_time,
        'deduced': result.result if result else False,
        'avg_deduce_time': sum(timings) / len(timings) if timings else 0.0,
        'max_deduce_time': max(timings) if timings else 0.0,
        'largest_encoding_bits': max(
            (e.bit_length() for e in session.knowledge.all_fact_encodings()), default=0
        )
    }

    logger.info("\nBenchmark Results:")
    logger.info("=" * 50)
    for key, value in benchmarks.items():
        if isinstance(value, float):
            logger.info(f"  {key}: {value:.6f}")
        else:
            logger.info(f"  {key}: {value}")


def interactive_command(args):
    """Start interactive ELLM session."""
    from reasoning.session import create_session

    logger.info("Starting ELLM interactive session...")
    logger.info("Type 'quit' or 'exit' to end the session")
    logger.info("Type 'help' for available commands")

    session = create_session(args.config)

    print("\n" + "=" * 60)
    print("ELLM Interactive Session")
    print("=" * 60)

    while True:
        try:
            user_input = input("\nELLM> ").strip()
            command = user_input.lower()

            if command in ['quit', 'exit', 'q']:
                print("Goodbye!")
                break

            elif command == 'help':
                print("\nAvailable commands:")
                print("  help            - Show this help")
                print("  quit/exit/q     - Exit the session")
                print("  learn <text>    - Learn facts and rules")
                print("  ask <question>  - Ask a yes/no question")
                print("  facts           - List learned facts")
                print("  rules           - List learned rules")
                print("  sample          - Reset and load the sample knowledge")
                print("  reset           - Forget everything")
                print("  stats           - Show session statistics")
                print("  <question>?     - Same as ask")

            elif command.startswith('learn '):
                for line in session.learn(user_input[6:]):
                    print(f"  {line}")

            elif command in ('facts', 'rules'):
                items = session.knowledge_summary()[command]
                if not items:
                    print(f"  No {command} learned yet.")
                for item in items:
                    print(f"  - {item}")

            elif command == 'sample':
                session = session.reset()
                for line in session.learn(SAMPLE_KNOWLEDGE):
                    print(f"  {line}")

            elif command == 'reset':
                session = session.reset()
                print("Knowledge base cleared.")

            elif command == 'stats':
                stats = session.get_performance_stats()
                print("\nSession Statistics:")
                print(f"  Facts: {stats['facts']}")
                print(f"  Rules: {stats['rules']}")
                print(f"  Concepts: {stats['concepts']}")
                print(f"  Queries: {stats['queries']}")
                print(f"  Cycles detected: {stats['reasoning']['cycles_detected']}")

            elif command.startswith('ask ') or command.endswith('?'):
                question = user_input[4:] if command.startswith('ask ') else user_input
                result = session.query(question)
                print(f"\nAnswer: {result.answer}")
                print(f"Parsed: {result.parsed_query or 'Could not parse'}")
                print(f"Explanation: {result.explanation}")

            elif user_input:
                print("Unknown command. Type 'help' for available commands.")

        except KeyboardInterrupt:
            print("\nGoodbye!")
            break
        except EOFError:
            print("\nGoodbye!")
            break


def main():
    """Main CLI entry point."""
    setup_environment()

    parser = argparse.ArgumentParser(
        description="ELLM prime-encoded inference engine CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py serve --host 0.0.0.0 --port 8000
  python cli.py ask --sample "Can penguins fly?"
  python cli.py interactive
  python cli.py benchmark --chain-length 100
        """
    )
    parser.add_argument('--config', default=None, help='Path to a YAML session configuration')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Start the API server')
    serve_parser.add_argument('--host', default='0.0.0.0', help='Host to bind to')
    serve_parser.add_argument('--port', type=int, default=8000, help='Port to bind to')
    serve_parser.add_argument('--reload', action='store_true', help='Enable auto-reload')
    serve_parser.add_argument('--workers', type=int, default=1, help='Number of workers')
    serve_parser.add_argument('--log-level', default='info', choices=['debug', 'info', 'warning', 'error'])
    serve_parser.set_defaults(func=serve_command)

    # Test command
    test_parser = subparsers.add_parser('test', help='Run tests')
    test_parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    test_parser.add_argument('--coverage', action='store_true', help='Generate coverage report')
    test_parser.set_defaults(func=test_command)

    # Ask command
    ask_parser = subparsers.add_parser('ask', help='Answer a single question')
    ask_parser.add_argument('question', help='Yes/no question to answer')
    ask_parser.add_argument('--knowledge', help='File with facts and rules to learn first')
    ask_parser.add_argument('--text', help='Facts and rules to learn first')
    ask_parser.add_argument('--sample', action='store_true', help='Learn the sample knowledge first')
    ask_parser.add_argument('--json', action='store_true', help='Print the result as JSON')
    ask_parser.set_defaults(func=ask_command)

    # Benchmark command
    benchmark_parser = subparsers.add_parser('benchmark', help='Run benchmarks')
    benchmark_parser.add_argument('--chain-length', type=int, default=50, help='Length of the part-of chain')
    benchmark_parser.add_argument('--runs', type=int, default=5, help='Number of timed deductions')
    benchmark_parser.set_defaults(func=benchmark_command)

    # Interactive command
    interactive_parser = subparsers.add_parser('interactive', help='Start interactive session')
    interactive_parser.set_defaults(func=interactive_command)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
