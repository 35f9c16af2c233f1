"""CLI entry point for the weather dashboard."""

import argparse
import asyncio
import logging

from pydantic import ValidationError

from weatherdash.app.controller import build_controller
from weatherdash.config.loader import (
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from weatherdash.config.schema import AppConfig, DisplaySettings
from weatherdash.errors import MissingConfiguration
from weatherdash.models.common import resolve_timezone
from weatherdash.models.location import Location
from weatherdash.reporting.formatters import ConsoleRenderer, format_suggestions
from weatherdash.storage import prefs_repo
from weatherdash.storage.database import open_database

DEFAULT_CONFIG = "config.yaml"
DEFAULT_DB = "data/weatherdash.db"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherdash",
        description="Weather dashboard: current conditions and forecast",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite DB path")
    parser.add_argument(
        "--json", action="store_true", help="Print the view model as JSON"
    )

    sub = parser.add_subparsers(dest="command")

    # now
    now_p = sub.add_parser("now", help="Show current weather and forecast")
    where = now_p.add_mutually_exclusive_group()
    where.add_argument("--city", help="City name, looked up directly")
    where.add_argument("--here", action="store_true", help="Use geolocation")
    now_p.add_argument("--lat", type=float, help="Latitude")
    now_p.add_argument("--lon", type=float, help="Longitude")

    # search / suggest / recent
    search_p = sub.add_parser("search", help="Search a place and show its weather")
    search_p.add_argument("query")
    suggest_p = sub.add_parser("suggest", help="List matching places")
    suggest_p.add_argument("query")
    recent_p = sub.add_parser("recent", help="List or replay recent searches")
    recent_p.add_argument(
        "--replay", type=int, metavar="N", help="Replay the Nth entry (1 = newest)"
    )

    # watch
    sub.add_parser("watch", help="Show weather and keep auto-refreshing")

    # settings show / settings set
    settings_p = sub.add_parser("settings", help="Display settings")
    settings_sub = settings_p.add_subparsers(dest="settings_command")
    settings_sub.add_parser("show", help="Display current settings")
    sset_p = settings_sub.add_parser("set", help="Change a setting")
    sset_p.add_argument("keyvalue", help="key=value to set")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    cset_p = config_sub.add_parser("set", help="Set a config value")
    cset_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    if args.command == "config":
        return _cmd_config(config, args)
    elif args.command == "settings":
        return _cmd_settings(config, args)
    elif args.command == "recent" and args.replay is None:
        return _cmd_recent_list(args)
    elif args.command == "now" and (args.lat is None) != (args.lon is None):
        print("Error: --lat and --lon must be given together")
        return 1
    elif args.command == "now" and args.lat is not None and (args.city or args.here):
        print("Error: --lat/--lon cannot be combined with --city or --here")
        return 1

    try:
        return asyncio.run(_run_async(config, args))
    except MissingConfiguration as e:
        print(f"Error: {e.user_message}")
        return 1
    except KeyboardInterrupt:
        print("\nStopped")
        return 0


async def _run_async(config: AppConfig, args) -> int:
    conn = open_database(args.db)
    renderer = ConsoleRenderer(
        as_json=args.json, tz=resolve_timezone(config.display.timezone)
    )
    try:
        controller = build_controller(config, conn, renderer)
    except MissingConfiguration:
        conn.close()
        raise

    try:
        if args.command == "now":
            if args.city:
                view = await controller.show_city(args.city)
            elif args.here:
                view = await controller.use_current_location()
            elif args.lat is not None:
                view = await controller.show_location(
                    Location(latitude=args.lat, longitude=args.lon)
                )
            else:
                view = await controller.refresh()
        elif args.command == "search":
            view = await controller.search(args.query)
        elif args.command == "suggest":
            print(format_suggestions(await controller.suggest(args.query)))
            return 0
        elif args.command == "recent":
            recent = controller.state.recent_searches
            if not 1 <= args.replay <= len(recent):
                print(f"Error: no recent search #{args.replay}")
                return 1
            view = await controller.replay_recent(recent[args.replay - 1])
        elif args.command == "watch":
            return await _watch(controller)
        else:
            return 1
        return 0 if view is not None else 1
    finally:
        controller.stop()
        conn.close()


async def _watch(controller) -> int:
    view = await controller.start()
    if not controller.refresher.running:
        print("Auto-refresh is off (settings set auto_refresh=true to enable)")
        return 0 if view is not None else 1
    print(
        f"Refreshing every {int(controller.refresher.interval)}s, Ctrl-C to stop"
    )
    await asyncio.Event().wait()
    return 0


def _cmd_recent_list(args) -> int:
    conn = open_database(args.db)
    try:
        recent = prefs_repo.load_recent_searches(conn)
    finally:
        conn.close()
    if not recent:
        print("No recent searches")
        return 0
    for i, label in enumerate(recent, start=1):
        print(f"  {i}. {label}")
    return 0


def _cmd_settings(config: AppConfig, args) -> int:
    conn = open_database(args.db)
    try:
        settings = prefs_repo.load_settings(conn, config.display.defaults)
        if args.settings_command == "show":
            print(settings.model_dump_json(indent=2))
            return 0
        elif args.settings_command == "set":
            if "=" not in args.keyvalue:
                print("Error: use key=value format")
                return 1
            key, value = (part.strip() for part in args.keyvalue.split("=", 1))
            if key not in DisplaySettings.model_fields:
                print(f"Error: unknown setting {key}")
                return 1
            try:
                updated = DisplaySettings(**{**settings.model_dump(), key: value})
            except ValidationError as e:
                print(f"Error: {e}")
                return 1
            prefs_repo.save_settings(conn, updated)
            print(f"Set {key} = {getattr(updated, key)}")
            return 0
        else:
            print("Use: settings show | settings set key=value")
            return 1
    finally:
        conn.close()


def _cmd_config(config: AppConfig, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2, exclude={"api": {"api_key"}}))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            save_config(new_config, args.config)
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1
