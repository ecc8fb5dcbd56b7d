#!/usr/bin/env python3
"""
TilePanel CLI

Headless driver for the animating tile panel.

Usage:
    tilepanel simulate --items 10 --width 220 [--add 1]
    tilepanel stream --items 10 --width 220 [--port 8765]
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import List

from . import __version__
from .animation import (
    AnimatingPanel,
    AppearInPlace,
    AsyncioTickSource,
    ManualTickSource,
    SlideFadeFromLeft,
    deterministic_jitter,
)
from .config import PanelConfig, load_config

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def build_panel(args, tick_source) -> AnimatingPanel:
    """Create a panel from CLI options."""
    config = load_config(args.config) if args.config else PanelConfig()
    if args.attraction is not None or args.dampening is not None:
        changes = {}
        if args.attraction is not None:
            changes["attraction"] = args.attraction
        if args.dampening is not None:
            changes["dampening"] = args.dampening
        config = config.replace(**changes)

    entry = SlideFadeFromLeft() if args.entry == "slide" else AppearInPlace()

    if args.seed is not None:
        rng = random.Random(args.seed)
        jitter = lambda item: rng.random()
    else:
        jitter = deterministic_jitter

    return AnimatingPanel(config, tick_source, entry_policy=entry, jitter=jitter)


def item_names(count: int, start: int = 0) -> List[str]:
    return [f"tile-{i}" for i in range(start, start + count)]


def cmd_simulate(args) -> int:
    """Lay out items, add more, and report how long each pass takes to settle."""
    source = ManualTickSource()
    try:
        panel = build_panel(args, source)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    items = item_names(args.items)
    panel.attach()
    size = panel.update_layout(items, args.width)
    print(f"Layout: {len(items)} items in {size.width:.1f} x {size.height:.1f}")

    frames = source.run_until_idle(args.max_frames)
    print(f"  Settled after {frames} frames")

    if args.add:
        items += item_names(args.add, start=len(items))
        size = panel.update_layout(items, args.width)
        print(f"Added {args.add}: {len(items)} items in {size.width:.1f} x {size.height:.1f}")
        frames = source.run_until_idle(args.max_frames)
        print(f"  Settled after {frames} frames")

    if panel.is_animating:
        print(f"Warning: still animating after {args.max_frames} frames")
        return 1

    if args.verbose:
        for item in items:
            offset = panel.offset(item)
            print(f"  {item}: offset=({offset.x:.2f}, {offset.y:.2f})")
    return 0


async def _run_stream(args) -> int:
    from .streaming import PanelStreamer, StreamManager

    source = AsyncioTickSource(fps=args.fps)
    panel = build_panel(args, source)
    items = item_names(args.items)

    async with StreamManager(args.host, args.port, max_fps=args.fps) as stream:
        streamer = PanelStreamer(panel, stream.server)
        panel.attach()
        panel.update_layout(items, args.width)

        elapsed = 0.0
        while not stream.is_stop_requested():
            if args.duration and elapsed >= args.duration:
                break
            await asyncio.sleep(args.add_every)
            elapsed += args.add_every
            if not stream.is_paused():
                items.append(f"tile-{len(items)}")
                panel.update_layout(items, args.width)
                logger.info("Added %s (%d items)", items[-1], len(items))

        await streamer.drain()
        streamer.close()

    panel.dispose()
    source.close()
    return 0


def cmd_stream(args) -> int:
    """Serve live offset frames over WebSocket."""
    try:
        return asyncio.run(_run_stream(args))
    except KeyboardInterrupt:
        return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="TilePanel - animated wrapping tile layout",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tilepanel simulate --items 10 --width 220
  tilepanel simulate --items 10 --width 220 --add 1 --entry slide -v
  tilepanel stream --items 12 --width 300 --add-every 2
        """,
    )
    parser.add_argument('--version', action='version', version=f'tilepanel {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    def add_panel_options(p):
        p.add_argument('--items', type=int, default=10, help='Initial item count (default: 10)')
        p.add_argument('--width', type=float, default=220.0, help='Available width (default: 220)')
        p.add_argument('--config', help='Panel configuration YAML file')
        p.add_argument('--attraction', type=float, help='Override attraction')
        p.add_argument('--dampening', type=float, help='Override dampening')
        p.add_argument('--entry', choices=['appear', 'slide'], default='appear',
                       help='Entry policy for new items (default: appear)')
        p.add_argument('--seed', type=int, help='Random jitter seed (default: per-item hash)')
        p.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    simulate_parser = subparsers.add_parser('simulate', help='Run a headless layout animation')
    add_panel_options(simulate_parser)
    simulate_parser.add_argument('--add', type=int, default=0, help='Items to add after settling')
    simulate_parser.add_argument('--max-frames', type=int, default=10000,
                                 help='Frame limit per pass (default: 10000)')

    stream_parser = subparsers.add_parser('stream', help='Stream offsets to WebSocket viewers')
    add_panel_options(stream_parser)
    stream_parser.add_argument('--host', default='localhost', help='Server host (default: localhost)')
    stream_parser.add_argument('--port', type=int, default=8765, help='Server port (default: 8765)')
    stream_parser.add_argument('--fps', type=float, default=60.0, help='Frame rate (default: 60)')
    stream_parser.add_argument('--add-every', type=float, default=2.0,
                               help='Seconds between added items (default: 2)')
    stream_parser.add_argument('--duration', type=float, default=0.0,
                               help='Stop after N seconds (default: run until stopped)')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    commands = {
        'simulate': cmd_simulate,
        'stream': cmd_stream,
    }
    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
