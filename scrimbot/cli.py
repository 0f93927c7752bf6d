"""
Command-line interface to simulate and watch a match setup.

All operations are parameter-based with no interactive input required.

Usage examples:
    # Simulate a full setup on the default map pool
    python -m scrimbot.cli simulate

    # Choose the maps, the votes and the random seed
    python -m scrimbot.cli simulate --maps Ascent,Bind,Haven --votes 3,3,1 --seed 7

    # Output as JSON for machine parsing
    python -m scrimbot.cli simulate --json

    # Show the effective configuration
    python -m scrimbot.cli show-config --config config.json

    # Give an admin the password they identify with
    python -m scrimbot.cli set-password 1234 --password hunter2
"""

import argparse
import asyncio
import json
import random
import sys
from typing import Any

from .config import DEFAULT_CONFIG_PATH, BotConfig
from .core.commands import CommandDispatcher, parse_command
from .auth.access import AccessControl
from .auth.auth import AuthManager
from .persistence.store import JsonStore
from .session.controller import MatchSetup
from .session.draft import Captain
from .session.errors import ScrimError
from .session.map_pool import MapPool
from .session.participant import Participant
from .session.queue import QUEUE_CAPACITY
from .session.state import ScrimState
from .session.vote import VOTE_TOKENS
from .transport.mock_transport import MockTransport

DEFAULT_MAPS = ["Ascent", "Bind", "Haven", "Split"]
PLAYER_NAMES = [
    "Alice", "Bob", "Charlie", "Dana", "Eve",
    "Frank", "Grace", "Heidi", "Ivan", "Judy",
]


async def _no_wait(seconds: float) -> None:
    pass


class SetupSimulator:
    """Plays one match setup with scripted players against an in-memory chat."""

    def __init__(
        self,
        maps: list[str],
        votes: list[int],
        seed: int | None = None,
        side: str = "defense",
    ):
        self.maps = maps
        self.votes = votes
        self.seed = seed
        self.side = side

        self.players = [
            Participant(f"p{i}", name) for i, name in enumerate(PLAYER_NAMES[:QUEUE_CAPACITY])
        ]
        self.admin = self.players[0]
        self.transport = MockTransport()
        self.state = ScrimState(
            pool=MapPool.from_names(maps),
            riot_ids={p.id: f"{p.name}#SIM" for p in self.players},
        )
        self.setup = MatchSetup(
            self.state,
            self.transport,
            config=BotConfig(vote_duration=0, vote_notice_at=0),
            rng=random.Random(seed),
            sleep=_no_wait,
        )
        self.dispatcher = CommandDispatcher(self.setup, AccessControl([self.admin.id]))
        self.commands: list[str] = []
        self.errors: list[str] = []
        self.teams: dict[str, Any] = {}

    async def say(self, actor: Participant, text: str, mentions: list[Participant] | None = None):
        """Send a chat line as `actor`, the way a chat client would."""
        self.commands.append(f"{actor.name}: {text}")
        command = parse_command(text, actor, mentions)
        if command is not None:
            await self.dispatcher.dispatch(command)

    async def run(self) -> dict[str, Any]:
        """Run the setup to completion. Returns results dict."""
        for player in self.players:
            await self.say(player, ".join")

        self.transport.set_votes(dict(zip(VOTE_TOKENS, self.votes)))
        self.commands.append(f"{self.admin.name}: .start")
        try:
            outcome = await self.setup.start(self.admin)
        except ScrimError as e:
            self.errors.append(type(e).__name__)
            return self._results(None)

        draft = self.state.session.draft
        captain_a, captain_b = self.players[0], self.players[1]
        await self.say(captain_a, ".captain")
        await self.say(captain_b, ".captain")

        # Captains take the next unpicked player in queue order
        while True:
            remaining = draft.remaining(list(self.state.queue))
            picker = draft.current_picker
            if not remaining or not isinstance(picker, Captain):
                break
            target = remaining[0]
            await self.say(picker.participant, f".pick @{target.name}", [target])

        self.teams = self.state.session.snapshot()
        await self.say(captain_b, f".{self.side}")
        return self._results(outcome)

    def _results(self, outcome) -> dict[str, Any]:
        return {
            "maps": self.maps,
            "seed": self.seed,
            "selected_map": outcome.map_name if outcome else None,
            "tie_broken": outcome.tie_broken if outcome else False,
            "tally": outcome.tally if outcome else {},
            "phase": self.state.session.phase.value,
            "commands": self.commands,
            "messages": self.transport.get_announcements(),
            "teams": self.teams,
            "errors": self.errors,
        }


def cmd_simulate(args):
    """Simulate a complete match setup."""
    maps = [m.strip() for m in args.maps.split(",") if m.strip()]
    votes = [int(v) for v in args.votes.split(",")] if args.votes else [1] * len(maps)

    simulator = SetupSimulator(maps, votes, seed=args.seed, side=args.side)
    results = asyncio.run(simulator.run())

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        print(f"\n=== Match setup ({len(maps)} maps) ===\n")
        for message in results["messages"]:
            print(message)
            print()
        print(f"Selected map: {results['selected_map']}")
        if results["errors"]:
            print(f"Errors: {', '.join(results['errors'])}")

    if results["errors"]:
        sys.exit(1)


def cmd_show_config(args):
    """Show the effective bot configuration."""
    try:
        config = BotConfig.load(args.config)
    except ValueError as e:
        print(f"Error: invalid config {args.config}: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps(config.to_dict(), indent=2))
    else:
        for key, value in config.to_dict().items():
            print(f"  {key}: {value}")


def cmd_set_password(args):
    """Set the password a participant identifies with."""
    try:
        config = BotConfig.load(args.config)
    except ValueError as e:
        print(f"Error: invalid config {args.config}: {e}")
        sys.exit(1)

    data_dir = args.data_dir or config.data_dir
    try:
        AuthManager(JsonStore(data_dir)).set_password(args.id, args.password)
    except ScrimError as e:
        print(f"Error: could not store the password: {e.message_id}")
        sys.exit(1)
    print(f"Password set for {args.id} in {data_dir}")


def main():
    parser = argparse.ArgumentParser(
        description="Scrim bot CLI for simulating match setups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser("simulate", help="Simulate a full match setup")
    simulate.add_argument(
        "--maps",
        default=",".join(DEFAULT_MAPS),
        help="Comma-separated map pool (default: %(default)s)",
    )
    simulate.add_argument(
        "--votes",
        help="Comma-separated vote counts, one per map (default: one vote each)",
    )
    simulate.add_argument("--seed", type=int, help="Random seed for the tie-break")
    simulate.add_argument(
        "--side",
        choices=["defense", "attack"],
        default="defense",
        help="Starting side chosen by team B's captain",
    )
    simulate.add_argument("--json", action="store_true", help="Output as JSON")
    simulate.set_defaults(func=cmd_simulate)

    show_config = subparsers.add_parser("show-config", help="Show the effective configuration")
    show_config.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    show_config.add_argument("--json", action="store_true", help="Output as JSON")
    show_config.set_defaults(func=cmd_show_config)

    set_password = subparsers.add_parser(
        "set-password", help="Set a participant's password (required for admins)"
    )
    set_password.add_argument("id", help="Participant id")
    set_password.add_argument("--password", required=True)
    set_password.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    set_password.add_argument("--data-dir", dest="data_dir", help="Overrides the config data_dir")
    set_password.set_defaults(func=cmd_set_password)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
