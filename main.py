import argparse
import json
import logging
import sys
from pathlib import Path

from erdlayout.anchors import AnchorStrategy
from erdlayout.config import load_config
from erdlayout.layout.engines import ENGINES, run_layout


def main():
    parser = argparse.ArgumentParser(description="Lay out entity-relationship diagrams")
    parser.add_argument("input", help="YAML diagram file")
    parser.add_argument(
        "--layout", "-l",
        default=None,
        choices=list(ENGINES.keys()),
        help="Layout engine to use (default: from the input file, else hierarchical)"
    )
    parser.add_argument(
        "--anchors", "-a",
        default=None,
        choices=[s.value for s in AnchorStrategy],
        help="Edge anchor strategy (default: from the input file, else closest-pair)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Write positions and anchors as JSON to this file (default: stdout)"
    )
    parser.add_argument(
        "--render", "-r",
        help="Render the laid-out diagram to this PNG file"
    )
    parser.add_argument(
        "--persist",
        help="Apply the layout and append each node's new position to this JSON lines file"
    )
    parser.add_argument(
        "--diagnose", "-d",
        action="store_true",
        help="Print a diagnostic report for the layout"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.input)
        g = config.build_graph()
        layout_name = args.layout or config.layout.engine
        engine = config.layout.bind(layout_name)
    except FileNotFoundError:
        print(f"Error: YAML file '{args.input}' not found", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error loading YAML config: {e}", file=sys.stderr)
        sys.exit(1)

    strategy = AnchorStrategy(args.anchors) if args.anchors else config.layout.anchors
    output = run_layout(g, engine, strategy)

    payload = json.dumps(output.to_dict(), indent=2)
    if args.output:
        Path(args.output).write_text(payload)
        print(f"Laid out {len(g.nodes)} entities from {args.input} using {layout_name} layout",
              file=sys.stderr)
    else:
        print(payload)

    if args.render:
        from erdlayout.render.matplot import render

        output_path = Path(args.render)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        render(output.graph, output.anchors, str(output_path), diagnose=args.diagnose)

    if args.persist:
        store = Path(args.persist)

        def persist(node_id, point):
            with store.open("a") as f:
                f.write(json.dumps({"id": node_id, "position_x": point.x, "position_y": point.y}) + "\n")

        applier = config.layout.animation.bind(on_frame=lambda frame: None, persist=persist)
        report = applier.apply(g.positions(), output.positions)
        if report.failed:
            print(f"Warning: {len(report.failed)} position(s) were not saved", file=sys.stderr)

    if args.diagnose:
        from erdlayout.diagnostics import generate_layout_report

        print(generate_layout_report(output, layout_name), file=sys.stderr)


if __name__ == "__main__":
    main()
