# ABOUTME: Main entry point for the venue admission bot
# ABOUTME: Provides CLI interface for running games and listing configured scenarios/strategies

import argparse
import logging
from collections import defaultdict

from bouncer.config import ConfigManager
from bouncer.core.diagnostics import CompositeSink
from bouncer.monitoring import ConsoleReporter, DecisionStreamSink
from bouncer.runner import GameExecutor, ParallelRunner


def run_games(args):
    """Run games with specified strategy/strategies and scenario."""
    config_manager = ConfigManager()

    if not config_manager.get_scenario_config(args.scenario):
        print(f"❌ Scenario {args.scenario} not found")
        return

    # Parse strategies (comma-separated, single, or "all")
    if args.strategy.lower() == "all":
        strategies = config_manager.list_available_strategies()
        if not strategies:
            print("❌ No strategies found in config directory")
            return
        print(f"🎯 Using all available strategies: {', '.join(strategies)}")
    else:
        strategies = [s.strip() for s in args.strategy.split(',') if s.strip()]

    for strategy in strategies:
        if not config_manager.get_strategy_config(strategy):
            print(f"❌ Strategy '{strategy}' not found")
            return

    total_games = args.count * len(strategies)
    print(f"🎯 Running {total_games} games - Scenario {args.scenario} ({args.mode}) "
          f"with {', '.join(strategies)}")

    sinks = []
    if args.console:
        sinks.append(ConsoleReporter(progress_every=args.progress_every))
    if args.decision_stream:
        sinks.append(DecisionStreamSink(args.logs_dir))
    diagnostics = CompositeSink(*sinks) if sinks else None

    executor = GameExecutor(config_manager, logs_directory=args.logs_dir)
    runner = ParallelRunner(max_workers=args.workers, executor=executor, diagnostics=diagnostics)
    tasks = runner.create_tasks([args.scenario], strategies, args.count, mode=args.mode, base_seed=args.seed)

    batch_result = runner.run_batch(tasks)

    print("\n📊 Batch Complete:")
    print(f"   Total games: {len(batch_result.results)}")
    print(f"   Successful: {batch_result.successful_count} ({batch_result.success_rate*100:.1f}%)")
    print(f"   Duration: {batch_result.total_duration:.1f}s")

    if batch_result.best_result:
        best = batch_result.best_result
        print(f"   Best result: {best.game_state.rejected_count} rejections ({best.strategy_name})")

    if len(strategies) > 1:
        print("\n📈 Per-Strategy Results:")
        by_task = {task.solver_id: task.strategy_name for task in batch_result.tasks}
        strategy_results = defaultdict(list)
        for result in batch_result.results:
            strategy_results[by_task.get(result.solver_id, result.strategy_name)].append(result)

        for strategy in strategies:
            results = strategy_results[strategy]
            if results:
                successful = sum(1 for r in results if r.success)
                avg_rejections = sum(r.game_state.rejected_count for r in results if r.success) / max(1, successful)
                print(f"   {strategy}: {successful / len(results):.1%} success ({successful}/{len(results)}), "
                      f"avg {avg_rejections:.0f} rejections")


def list_configs(args):
    """Show configured scenarios and strategies."""
    config_manager = ConfigManager()

    print("🎪 Scenarios:")
    for scenario_id in config_manager.list_available_scenarios():
        config = config_manager.get_scenario_config(scenario_id) or {}
        constraints = ', '.join(f"{c['attribute']}≥{c['min_count']}" for c in config.get('constraints', []))
        print(f"   {scenario_id}: {config.get('name', '')} [{constraints}]")

    print("\n🧠 Strategies:")
    for name in config_manager.list_available_strategies():
        config = config_manager.get_strategy_config(name) or {}
        print(f"   {name} ({config.get('strategy', '?')}): {config.get('description', '')}")


def main():
    parser = argparse.ArgumentParser(description="Venue admission bot")
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run games')
    run_parser.add_argument('--scenario', type=int, default=1, help='Scenario ID (default: 1)')
    run_parser.add_argument('--strategy', default='paced_feasible', help='Strategy name(s) - comma-separated for multiple, or "all" for all available (default: paced_feasible)')
    run_parser.add_argument('--count', type=int, default=1, help='Number of games per strategy (default: 1)')
    run_parser.add_argument('--workers', type=int, default=4, help='Parallel workers (default: 4)')
    run_parser.add_argument('--mode', choices=['local', 'api'], default='local', help='Backend mode: local simulator or live API (default: local)')
    run_parser.add_argument('--seed', type=int, help='Base seed for the local simulator')
    run_parser.add_argument('--console', action='store_true', help='Render scenario intro and final summary tables')
    run_parser.add_argument('--progress-every', type=int, default=0, help='Console progress line every N arrivals (default: off)')
    run_parser.add_argument('--decision-stream', action='store_true', help='Append every decision to decision_stream.jsonl')
    run_parser.add_argument('--logs-dir', default='game_logs', help='Directory for game logs (default: game_logs)')

    # List command
    subparsers.add_parser('list', help='List configured scenarios and strategies')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    if not args.command:
        parser.print_help()
        return

    if args.command == 'run':
        run_games(args)
    elif args.command == 'list':
        list_configs(args)


if __name__ == "__main__":
    main()
