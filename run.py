# run.py

import argparse
import datetime

from dotenv import load_dotenv

load_dotenv()   # Loads variables from .env

from rich import print
from rich.markup import escape

from core.config import Settings
from core.log import setup_logging
from core.models import BUDGET_DEFAULT, TRAVEL_STYLES, TripQuery
from core.state import Store
from services import budget as bsvc
from services.planner import build_pipelines


def main(argv=None):
    p = argparse.ArgumentParser(description="Plan a trip and chat with the travel assistant.")
    p.add_argument("--origin", default="")
    p.add_argument("--dest", "--destination", dest="destination", default="")
    p.add_argument("--start", type=datetime.date.fromisoformat)   # format YYYY-MM-DD
    p.add_argument("--end", type=datetime.date.fromisoformat)     # format YYYY-MM-DD
    p.add_argument("--budget", type=int, default=BUDGET_DEFAULT, help="INR")
    p.add_argument("--style", action="append", default=[], choices=TRAVEL_STYLES)
    p.add_argument("--ask", action="append", default=[], help="question for the assistant")
    p.add_argument("--no-plan", action="store_true", help="only run the --ask questions")
    args = p.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    store = Store()
    itinerary_pipeline, chat_pipeline = build_pipelines(settings, store)

    if not args.no_plan:
        query = TripQuery(
            origin=args.origin,
            destination=args.destination,
            start=args.start,
            end=args.end,
            budget=args.budget,
            styles=frozenset(args.style),
        )
        print("[bold cyan]→ Planning…[/]")
        outcome = itinerary_pipeline.submit(query)
        itin = outcome.value

        print(f"[bold green]{escape(itin.destination)} Itinerary[/]")
        for d in itin.days:
            print(f"[yellow]Day {d.day}: {escape(d.title)}[/]")
            for activity in d.activities:
                print(f"  • {escape(activity)}")
            print(f"  Estimated cost : ₹{d.cost:,.0f}\n")

        summary = bsvc.summarize(itin, args.budget)
        colour = "red" if summary.over else "green"
        print(f"Total : ₹{summary.total:,.0f} (budget ₹{summary.budget:,.0f}) "
              f"[{colour}]{summary.status}[/]")
        if not outcome.ok:
            print(f"[dim]Cause : {escape(outcome.cause)}[/]")

    for question in args.ask:
        print(f"\n[bold cyan]You:[/] {escape(question)}")
        reply = chat_pipeline.send(question)
        if reply is not None:
            print(f"[bold magenta]Assistant:[/] {escape(reply.value)}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
