from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import logging
from pathlib import Path

from PIL import Image

from stockchart.chart import StockChart
from stockchart.config import (
    CandlePanelConfig,
    ChartSettings,
    KdjPanelConfig,
    MacdPanelConfig,
    load_chart_config,
)
from stockchart.entities import AnyKEntity
from stockchart.sample_data import (
    dump_candles_json,
    load_candles_json,
    load_time_data_json,
    pad_with_empty,
    random_walk_candles,
)


LOGGER = logging.getLogger("stockchart.cli")

DEFAULT_SETTINGS = ChartSettings(
    panels=(CandlePanelConfig(height=240), KdjPanelConfig(margin_top=4), MacdPanelConfig(margin_top=4)),
)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="stockchart")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render the chart stack to a PNG file.")
    _add_chart_arguments(render)
    render.add_argument("--out", type=Path, required=True)
    render.add_argument("--highlight", type=float, nargs=2, metavar=("X", "Y"), default=None,
                        help="Pointer position in the first panel's pixels.")

    inspect = sub.add_parser("inspect", help="Print each panel's frame matrices as JSON.")
    _add_chart_arguments(inspect)

    export = sub.add_parser("export", help="Write the loaded candles as a JSON candle file.")
    _add_chart_arguments(export)
    export.add_argument("--out", type=Path, required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    chart = _build_chart(args)

    if args.command == "render":
        if args.highlight is not None and chart.panels:
            chart.set_highlight(chart.panels[0], args.highlight[0], args.highlight[1])
        frame = chart.render()
        Image.fromarray(frame).save(args.out)
        print(f"wrote {args.out} ({frame.shape[1]}x{frame.shape[0]}, entities={chart.entity_count()})")
        return

    if args.command == "inspect":
        report = []
        for n, panel in enumerate(chart.panels):
            frame = panel.pipeline.on_draw() if panel.pipeline is not None else None
            report.append(
                {
                    "panel": n,
                    "kind": panel.config.kind,
                    "main_area": None if panel.main_display_area is None else asdict(panel.main_display_area),
                    "coordinate": None if frame is None else frame.coordinate.to_list(),
                    "fix_x": None if frame is None else frame.fix_x.to_list(),
                    "fix_y": None if frame is None else frame.fix_y.to_list(),
                    "concat": None if frame is None else frame.concat.to_list(),
                }
            )
        print(json.dumps(report, indent=2))
        return

    if args.command == "export":
        dump_candles_json(chart.entities, args.out)
        print(f"wrote {args.out} (entities={chart.entity_count()})")
        return

    raise RuntimeError(f"unsupported command: {args.command}")


def _add_chart_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--data", type=Path, default=None, help="JSON candle file.")
    source.add_argument("--time-data", type=Path, default=None, help="JSON time-share file.")
    source.add_argument("--random", type=int, default=120, help="Generate N random-walk candles.")
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--pad", type=int, default=None, help="Pad with empty periods up to N entities.")
    parser.add_argument("--config", type=Path, default=None, help="TOML chart config.")
    parser.add_argument("--width", type=int, default=640)
    parser.add_argument("--start", type=int, default=None)
    parser.add_argument("--end", type=int, default=None)
    parser.add_argument("--scroll", type=float, default=0.0, help="Horizontal scroll in pixels.")
    parser.add_argument("--zoom", type=float, default=1.0, help="Horizontal zoom factor about the centre.")


def _build_chart(args: argparse.Namespace) -> StockChart:
    settings = load_chart_config(args.config) if args.config is not None else DEFAULT_SETTINGS
    if not settings.panels:
        settings = ChartSettings(chart=settings.chart, panels=DEFAULT_SETTINGS.panels)
    chart = StockChart.from_settings(width=args.width, settings=settings)
    chart.set_entities(_load_entities(args))
    if args.start is not None or args.end is not None:
        count = chart.entity_count()
        start = args.start if args.start is not None else chart.config.show_start_index
        end = args.end if args.end is not None else max(start, count - 1)
        chart.set_show_range(start, end)
    if args.zoom != 1.0:
        chart.zoom_x(args.zoom)
    if args.scroll:
        chart.scroll_by(args.scroll)
    return chart


def _load_entities(args: argparse.Namespace) -> list[AnyKEntity]:
    if args.data is not None:
        entities = load_candles_json(args.data)
    elif args.time_data is not None:
        entities = load_time_data_json(args.time_data)
    else:
        entities = list(random_walk_candles(args.random, seed=args.seed))
    if args.pad is not None:
        entities = pad_with_empty(entities, args.pad)
    LOGGER.info("loaded %d entities", len(entities))
    return entities


if __name__ == "__main__":
    main()
