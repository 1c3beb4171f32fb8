from __future__ import annotations

import sys

from sheet_chart.cli.doctor import main as doctor_main
from sheet_chart.cli.render_chart import main as render_main


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0] in {"-h", "--help"}:
        print("Usage: python -m sheet_chart.cli <command>\n")
        print("Commands:")
        print("  doctor   Validate environment and write a run_record.json")
        print("  render   Build chart_data.json from a workbook and a chart spec\n")
        return 0

    cmd = argv[0]
    if cmd == "doctor":
        return doctor_main(argv[1:])
    if cmd == "render":
        return render_main(argv[1:])

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
