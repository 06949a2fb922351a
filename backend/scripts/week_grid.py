#!/usr/bin/env python3
"""
Terminal client for the availability grid: log in, mark/unmark a rectangle of slots, watch the week.
Needs the API running (API_BASE_URL, default http://127.0.0.1:8000).

Examples (from backend/):
  python scripts/week_grid.py login "Ann Lee" --color "#ef4444"
  python scripts/week_grid.py mark 1-4 3-7          # drag from Mon 10:00 to Wed 11:30
  python scripts/week_grid.py show --offset 1       # next week
  python scripts/week_grid.py watch                 # redraw every poll
"""
import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from whentomeet.client import AvailabilityClient, LocalIdentity, SelectionController, SyncLoop, delete_profile, save_profile
from whentomeet.client.render import render_legend, render_week
from whentomeet.core.constants import COLOR_OPTIONS, DEFAULT_COLOR
from whentomeet.core.errors import WhenToMeetError
from whentomeet.core.week import add_weeks, parse_slot_key, parse_week_key, week_key, week_start_of


def _week_start(args) -> datetime:
    if args.week:
        d = parse_week_key(args.week)
        return datetime(d.year, d.month, d.day)
    return add_weeks(week_start_of(datetime.now()), args.offset)


def _require_identity(identity: LocalIdentity):
    me = identity.load()
    if me is None:
        print("Not logged in. Run: week_grid.py login NAME")
        sys.exit(1)
    return me


def _draw(loop: SyncLoop, week_start: datetime, me) -> None:
    print(render_week(week_start, loop.table, me))
    legend = render_legend(loop.roster)
    if legend:
        print(legend)


def cmd_login(args, client: AvailabilityClient, identity: LocalIdentity) -> None:
    user = save_profile(client, identity, args.name, args.color)
    print(f"Logged in as {user.name} ({user.color}) id={user.id}")


def cmd_whoami(args, client: AvailabilityClient, identity: LocalIdentity) -> None:
    me = identity.load()
    print(f"{me.name} ({me.color}) id={me.id}" if me else "Not logged in")


def cmd_signout(args, client: AvailabilityClient, identity: LocalIdentity) -> None:
    identity.sign_out()
    print("Signed out (shared data untouched)")


def cmd_delete(args, client: AvailabilityClient, identity: LocalIdentity) -> None:
    if delete_profile(client, identity):
        print("Profile deleted and removed from every week")
    else:
        print("Not logged in")


def cmd_show(args, client: AvailabilityClient, identity: LocalIdentity) -> None:
    week_start = _week_start(args)
    loop = SyncLoop(client, week_key(week_start))
    loop.refresh_now()
    _draw(loop, week_start, identity.load())


def cmd_mark(args, client: AvailabilityClient, identity: LocalIdentity) -> None:
    me = _require_identity(identity)
    week_start = _week_start(args)
    loop = SyncLoop(client, week_key(week_start))
    loop.refresh_now()
    controller = SelectionController(client, me, loop)
    start, end = parse_slot_key(args.start), parse_slot_key(args.end)
    action = controller.press(*start)
    controller.move(*end)
    result = controller.release()
    print(f"{action.value}: {len(result.applied)} slots applied, {len(result.failed)} failed")
    _draw(loop, week_start, me)


def cmd_watch(args, client: AvailabilityClient, identity: LocalIdentity) -> None:
    week_start = _week_start(args)
    me = identity.load()
    loop = SyncLoop(client, week_key(week_start))

    def redraw(lp: SyncLoop) -> None:
        print("\033[2J\033[H", end="")  # clear screen
        _draw(lp, week_start, me)

    loop.subscribe(redraw)
    loop.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        loop.stop()


def main() -> int:
    parser = argparse.ArgumentParser(description="Shared weekly availability grid")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Create a profile, log back in by name, or edit your profile")
    p.add_argument("name")
    p.add_argument("--color", default=DEFAULT_COLOR, choices=[v for _, v in COLOR_OPTIONS])
    p.set_defaults(func=cmd_login)

    sub.add_parser("whoami").set_defaults(func=cmd_whoami)
    sub.add_parser("signout").set_defaults(func=cmd_signout)
    sub.add_parser("delete-profile").set_defaults(func=cmd_delete)

    for name, func in (("show", cmd_show), ("watch", cmd_watch), ("mark", cmd_mark)):
        p = sub.add_parser(name)
        if name == "mark":
            p.add_argument("start", help="Press cell, day-timeIndex (e.g. 1-4)")
            p.add_argument("end", help="Release cell, day-timeIndex")
        p.add_argument("--week", help="Week key YYYY-MM-DD (a Sunday)")
        p.add_argument("--offset", type=int, default=0, help="Weeks from the current week")
        p.set_defaults(func=func)

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        with AvailabilityClient() as client:
            args.func(args, client, LocalIdentity())
    except WhenToMeetError as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
