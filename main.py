"""
main.py — Bootstrap

1. Load tuning and the catalog
2. Create the app
3. Build the dashboard (store, clock, engine, effects, autopilot)
4. Push the dashboard scene
5. Run

    python main.py                # start with the autopilot tour
    python main.py --no-autopilot # straight to the interactive view
    python main.py --seed 7       # reproducible simulation
"""

import argparse

from core import tuning
from core.app import App
from core.bootstrap import build_dashboard
from core.constants import SCREEN_H, SCREEN_W
from scenes.dashboard_scene import DashboardScene


def main(argv=None):
    parser = argparse.ArgumentParser(description="Trade network dashboard")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for the simulation's random source")
    parser.add_argument("--no-autopilot", action="store_true",
                        help="skip the scripted tour")
    args = parser.parse_args(argv)

    tuning.load()
    app = App(title="Trade Network", width=SCREEN_W, height=SCREEN_H)
    dashboard = build_dashboard(seed=args.seed)
    app.push_scene(DashboardScene(dashboard, autopilot=not args.no_autopilot))
    app.run()


if __name__ == "__main__":
    main()
