from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from frame_app.core.adapters import (
    BrowserWindowOpener,
    JsonFileStore,
    NullOpenerState,
    QueryStringWindow,
    TimerScheduler,
)
from frame_app.core.logging import configure_logging
from frame_app.core.paths import exports_dir, storage_dir
from frame_app.core.qt_notifier import QtNotifier
from frame_app.core.schema_utils import validate_model
from frame_app.core.settings import AppSettings, load_app_settings
from frame_app.generate import GenerateModelClient, GenerateModelRequest
from frame_app.handoff.constants import BULK_TARGET, OVERRIDE_TARGET_FIELD
from frame_app.handoff.consumer import MemberSelection, ResultConsumer
from frame_app.handoff.exports import export_excel, export_handoff
from frame_app.handoff.launcher import SelectorLauncher
from frame_app.handoff.publisher import ResultPublisher

SESSION_STORE_FILE = "session_storage.json"


def _shared_store(settings: AppSettings) -> JsonFileStore:
    return JsonFileStore(settings.storage_path) if settings.storage_path else JsonFileStore()


def _session_store() -> JsonFileStore:
    return JsonFileStore(storage_dir() / SESSION_STORE_FILE)


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _parse_props(items: List[str]) -> Dict[str, Any]:
    props: Dict[str, Any] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {item!r}")
        props[key.strip()] = _parse_value(value)
    return props


def _cmd_open_selector(args: argparse.Namespace, settings: AppSettings) -> int:
    current: Dict[str, Any] = {}
    if args.material:
        current["material"] = args.material
    if args.e_value:
        current["E"] = args.e_value
    if args.strength:
        current["strengthValue"] = args.strength

    launcher = SelectorLauncher(
        BrowserWindowOpener((settings.screen_width, settings.screen_height)),
        QtNotifier(),
        TimerScheduler(),
        settings,
    )
    target = args.member.strip()
    if target.lower() == BULK_TARGET:
        out = launcher.open_bulk_selector(current)
        selected: Any = BULK_TARGET
    else:
        selected = int(target) if target.isdigit() else target
        out = launcher.open_selector(selected, current)
    if not out:
        return 1
    MemberSelection(_session_store()).select(selected)
    return 0


def _cmd_publish(args: argparse.Namespace, settings: AppSettings) -> int:
    props = _parse_props(args.prop or [])
    if args.target is not None:
        props[OVERRIDE_TARGET_FIELD] = _parse_value(args.target)
    publisher = ResultPublisher(
        window=QueryStringWindow(args.query or ""),
        shared_store=_shared_store(settings),
        session_store=_session_store(),
        opener_state=NullOpenerState(),
        notifier=QtNotifier(),
    )
    out = publisher.publish(props)
    if not out:
        return 1
    print(out.value.to_json())
    return 0


def _cmd_read(args: argparse.Namespace, settings: AppSettings) -> int:
    consumer = ResultConsumer(_shared_store(settings))
    result = consumer.consume() if args.consume else consumer.peek()
    if result is None:
        print("No section properties waiting.", file=sys.stderr)
        return 1
    print(result.to_json())
    return 0


def _cmd_export(args: argparse.Namespace, settings: AppSettings) -> int:
    result = ResultConsumer(_shared_store(settings)).peek()
    if result is None:
        print("No section properties waiting.", file=sys.stderr)
        return 1
    out = Path(args.out_path) if args.out_path else exports_dir() / f"section_properties_{result.timestamp}.xlsx"
    if out.suffix.lower() == ".xlsx":
        print(export_excel([result], out))
    else:
        for p in export_handoff([result], out):
            print(p)
    return 0


def _cmd_generate(args: argparse.Namespace, settings: AppSettings) -> int:
    raw: Dict[str, Any] = {"prompt": args.prompt, "mode": args.mode}
    if args.current_model:
        try:
            raw["currentModel"] = json.loads(Path(args.current_model).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Could not load current model from {args.current_model}: {e}")
            return 1
    request, err = validate_model(GenerateModelRequest, raw)
    if request is None:
        logger.error(f"Invalid generate request: {err}")
        return 2
    client = GenerateModelClient(args.endpoint or settings.generate_endpoint, settings.request_timeout_s)
    out = client.generate(request)
    if not out:
        return 1
    print(out.value)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="frame-app", description="Frame analyzer member-property handoff")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("open-selector", help="Open the steel section selector for a member (or 'bulk').")
    p.add_argument("member")
    p.add_argument("--material")
    p.add_argument("--e-value")
    p.add_argument("--strength")
    p.set_defaults(func=_cmd_open_selector)

    p = sub.add_parser("publish", help="Send section properties to the frame analyzer.")
    p.add_argument("--query", help="Selector URL query string, e.g. 'targetMember=2'.")
    p.add_argument("--prop", action="append", metavar="KEY=VALUE")
    p.add_argument("--target", help="Explicit target member index or 'bulk'.")
    p.set_defaults(func=_cmd_publish)

    p = sub.add_parser("read", help="Print the section properties waiting in shared storage.")
    p.add_argument("--consume", action="store_true", help="Remove the record after reading.")
    p.set_defaults(func=_cmd_read)

    p = sub.add_parser("export", help="Export waiting section properties (.xlsx file or handoff folder).")
    p.add_argument("out_path", nargs="?", help="Defaults to an .xlsx file in the exports folder.")
    p.set_defaults(func=_cmd_export)

    p = sub.add_parser("generate", help="Ask the model-generation proxy for a frame model.")
    p.add_argument("prompt")
    p.add_argument("--mode", choices=["generate", "edit"])
    p.add_argument("--current-model", help="JSON file with the current model (edit mode).")
    p.add_argument("--endpoint")
    p.set_defaults(func=_cmd_generate)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    settings = load_app_settings()
    try:
        return int(args.func(args, settings))
    except argparse.ArgumentTypeError as e:
        logger.error(str(e))
        return 2
    except (OSError, ValueError) as e:
        logger.opt(exception=e).error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
